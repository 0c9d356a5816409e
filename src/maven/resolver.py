"""Transitive dependency resolution over local and remote repositories."""
from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, List, Optional, Set

from common.errors import ManifestParseError, MavenApiError, NotFoundLocally
from common.logging_utils import extra_context, is_debug_enabled, Timer

from .models import Coordinate, Dependency, Project, ResolvedSet
from .pom import parse_pom_content, parse_pom_file

if TYPE_CHECKING:
    from cache.store import CacheStore
    from repository.local import LocalRepository
    from repository.remote import RemoteRepository

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Builds a deduplicated, scope-filtered dependency list for a project.

    Resolution is depth-first in declaration order; the first occurrence of a
    coordinate wins. Failures inside one subtree are logged and that subtree
    is abandoned while its siblings continue.
    """

    def __init__(
        self,
        local_repository: "LocalRepository",
        remote_repository: "RemoteRepository",
        cache: Optional["CacheStore"] = None,
    ):
        self.local_repository = local_repository
        self.remote_repository = remote_repository
        self.cache = cache

    def parse_manifest(self, path: str) -> Project:
        """Parse a manifest file, consulting the cache first.

        Raises:
            ManifestParseError: The file is unreadable or malformed.
        """
        abs_path = os.path.abspath(path)
        if self.cache is not None:
            cached = self.cache.get_cached_manifest(abs_path)
            if cached is not None:
                logger.debug("Using cached POM data for %s", abs_path)
                return cached

        project = parse_pom_file(abs_path)
        if self.cache is not None:
            self.cache.cache_manifest(abs_path, project)
        return project

    def resolve_tree(self, path: str) -> ResolvedSet:
        """Resolve the full transitive dependency list of a manifest.

        Top-level dependencies are kept whatever their scope, but test and
        provided ones are never expanded. Below the top level, test and
        provided dependencies are dropped.

        Raises:
            ManifestParseError: The root manifest is unreadable or malformed.
        """
        abs_path = os.path.abspath(path)
        if self.cache is not None:
            cached = self.cache.get_cached_resolved_set(abs_path)
            if cached is not None:
                logger.debug("Using cached dependency tree for %s", abs_path)
                return cached

        with Timer() as t:
            project = self.parse_manifest(abs_path)
            resolved: List[Dependency] = []
            processed: Set[Coordinate] = set()
            for dependency in project.dependencies:
                self._resolve_dependency(dependency, resolved, processed)

        result: ResolvedSet = tuple(resolved)
        logger.info(
            "Resolved %d dependencies for %s",
            len(result),
            project.coordinate.key,
            extra=extra_context(
                event="resolve", component="resolver", count=len(result), duration_ms=t.duration_ms()
            ),
        )
        if self.cache is not None:
            self.cache.cache_resolved_set(abs_path, result)
        return result

    def load_dependency_manifest(self, coordinate: Coordinate) -> Project:
        """Obtain a dependency's own manifest: local repository first, then remote.

        A remotely fetched POM is persisted into the local repository.

        Raises:
            RemoteFetchError: Not local and the remote fetch failed.
            ManifestParseError: The POM is malformed.
        """
        try:
            content = self.local_repository.read_manifest(coordinate)
            source = "local"
        except NotFoundLocally:
            content = self.remote_repository.fetch_manifest(coordinate)
            self.local_repository.write_manifest(coordinate, content)
            source = "remote"
        if is_debug_enabled(logger):
            logger.debug(
                "Loaded dependency POM",
                extra=extra_context(event="load_pom", component="resolver", target=coordinate.key, source=source),
            )
        return parse_pom_content(content, source=coordinate.key)

    def _resolve_dependency(
        self,
        dependency: Dependency,
        resolved: List[Dependency],
        processed: Set[Coordinate],
    ) -> None:
        coordinate = dependency.coordinate
        if coordinate in processed or dependency.optional:
            return
        processed.add(coordinate)
        resolved.append(dependency)

        if not coordinate.is_complete:
            logger.debug("Not expanding %s: coordinate is incomplete or uses properties", coordinate.key)
            return
        if not dependency.is_transitive_scope:
            logger.debug("Not expanding %s: %s scope does not propagate", coordinate.key, dependency.scope)
            return

        try:
            child_project = self.load_dependency_manifest(coordinate)
        except ManifestParseError as exc:
            logger.warning("Error resolving dependency %s: %s", coordinate.key, exc.reason)
            return
        except MavenApiError as exc:
            logger.warning("Could not fetch POM for %s: %s", coordinate.key, exc.reason)
            return
        except OSError as exc:
            logger.warning("Error resolving dependency %s: %s", coordinate.key, exc)
            return

        for child in child_project.dependencies:
            if not child.is_transitive_scope:
                continue
            self._resolve_dependency(child, resolved, processed)
