"""Data models for artifact acquisition."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from maven.models import Coordinate


class ArchiveMode(Enum):
    """Which archive the extractor reads: compiled classes or sources."""
    PRIMARY = "primary"
    SOURCES = "sources"


class AcquisitionState(Enum):
    """States of the per-coordinate acquisition cascade."""
    CHECK_LOCAL_MAIN = "check_local_main"
    CHECK_LOCAL_SOURCES = "check_local_sources"
    DECIDE = "decide"
    DOWNLOAD = "download"
    RESOLVED = "resolved"
    SKIPPED = "skipped"
    BLOCKED = "blocked"


class AcquisitionChoice(Enum):
    """Operator answers to the missing-artifact menu."""
    SOURCES = "sources"
    MAIN = "main"
    BOTH = "both"
    SKIP = "skip"
    OFFLINE = "offline"


class DownloadKind(Enum):
    """A single concrete download that needs confirmation."""
    MAIN = "main"
    SOURCES = "sources"


@dataclass
class ArtifactBundle:
    """Archive bytes for one coordinate, plus best-effort sidecars.

    Held only for one extraction pass; the cache keeps derived metadata only.
    """
    coordinate: Coordinate
    primary: bytes
    mode: ArchiveMode = ArchiveMode.PRIMARY
    sources: Optional[bytes] = None
    javadoc: Optional[bytes] = None
    states: List[AcquisitionState] = field(default_factory=list)

    @property
    def is_sources(self) -> bool:
        return self.mode is ArchiveMode.SOURCES

    @property
    def source_text_archive(self) -> Optional[bytes]:
        """Archive to read ``.java`` text from, whichever role it plays."""
        return self.primary if self.is_sources else self.sources
