"""Error taxonomy shared by resolution, acquisition and extraction.

Every error carries the coordinate it concerns (when known) and a
human-readable reason so callers can report it without a stack trace.
"""
from __future__ import annotations

from typing import Any, Optional


class MavenApiError(Exception):
    """Base class for all recoverable project errors."""

    def __init__(self, reason: str, coordinate: Any = None):
        self.reason = reason
        self.coordinate = coordinate
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.coordinate is None:
            return self.reason
        key = getattr(self.coordinate, "key", self.coordinate)
        return f"{key}: {self.reason}"


class ManifestParseError(MavenApiError):
    """Manifest is unreadable or not a well-formed POM."""

    def __init__(self, reason: str, coordinate: Any = None, source: Optional[str] = None):
        self.source = source
        super().__init__(reason, coordinate)

    def __str__(self) -> str:
        base = super().__str__()
        if self.source and self.coordinate is None:
            return f"{self.source}: {base}"
        return base


class RemoteFetchError(MavenApiError):
    """Remote repository answered with a non-success status or was unreachable."""

    def __init__(
        self,
        reason: str,
        coordinate: Any = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(reason, coordinate)


class NotFoundRemotely(RemoteFetchError):
    """Remote repository does not have the requested file (HTTP 404)."""


class NotFoundLocally(MavenApiError):
    """Local repository does not have the requested file."""


class AcquisitionError(MavenApiError):
    """Dependency-level acquisition failure with the terminal cascade state."""

    state: Any = None

    def __init__(self, reason: str, coordinate: Any = None, state: Any = None):
        if state is not None:
            self.state = state
        super().__init__(reason, coordinate)


class UserSkipped(AcquisitionError):
    """Operator chose to skip the dependency."""


class DownloadDeclined(AcquisitionError):
    """Operator declined a specific download confirmation."""


class OfflineBlocked(AcquisitionError):
    """Offline mode is active and no local artifact exists."""


class EnrichmentFailure(MavenApiError):
    """A sidecar or documentation page could not be used. Never surfaced."""


class ArchiveReadError(MavenApiError):
    """Primary archive bytes are not a readable zip container."""
