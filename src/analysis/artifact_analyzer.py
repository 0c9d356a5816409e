"""Per-artifact analysis: cached metadata, or acquire then extract."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Union

from maven.models import Coordinate, Dependency
from extraction.models import JavaClass

if TYPE_CHECKING:
    from acquisition.acquirer import ArtifactAcquirer
    from cache.store import CacheStore
    from extraction.extractor import ApiExtractor

logger = logging.getLogger(__name__)


class ArtifactAnalyzer:
    """Produces the class list for one dependency."""

    def __init__(
        self,
        acquirer: "ArtifactAcquirer",
        extractor: "ApiExtractor",
        cache: Optional["CacheStore"] = None,
    ):
        self.acquirer = acquirer
        self.extractor = extractor
        self.cache = cache

    def analyze(self, target: Union[Dependency, Coordinate]) -> List[JavaClass]:
        """Return API metadata for a dependency or coordinate.

        The archive-metadata cache is consulted first; on a miss the archive is
        acquired, extracted and the result cached.

        Raises:
            AcquisitionError: The operator skipped or declined, or offline mode blocked it.
            RemoteFetchError: A chosen download failed.
            ArchiveReadError: The acquired archive is unreadable.
        """
        coordinate = target.coordinate if isinstance(target, Dependency) else target
        if self.cache is not None:
            cached = self.cache.get_cached_archive(coordinate)
            if cached is not None:
                logger.debug("Using cached archive metadata for %s", coordinate.key)
                return cached

        bundle = self.acquirer.acquire(coordinate)
        classes = self.extractor.extract(bundle)
        if self.cache is not None:
            self.cache.cache_archive(coordinate, classes)
        return classes
