"""Whole-project analysis: resolve the tree, then analyze each dependency in turn.

Root manifest errors are fatal. Anything that goes wrong for a single
dependency is recorded as a DependencyFailure and the run continues.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

from constants import Constants
from common.errors import MavenApiError
from common.logging_utils import extra_context, Timer
from maven.models import Coordinate, Dependency, Project
from extraction.models import JavaClass

if TYPE_CHECKING:
    from maven.resolver import DependencyResolver

    from .artifact_analyzer import ArtifactAnalyzer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyFailure:
    coordinate: Coordinate
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"coordinate": self.coordinate.key, "reason": self.reason}


@dataclass
class ProjectAnalysis:
    """Outcome of analyzing a project's dependencies."""
    project: Project
    dependencies: List[Dependency] = field(default_factory=list)
    artifacts: Dict[str, List[JavaClass]] = field(default_factory=dict)
    failures: List[DependencyFailure] = field(default_factory=list)

    @property
    def analyzed_count(self) -> int:
        return len(self.artifacts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project": self.project.coordinate.to_dict(),
            "dependencies": [d.to_dict() for d in self.dependencies],
            "artifacts": {
                key: [c.to_dict() for c in classes] for key, classes in self.artifacts.items()
            },
            "failures": [f.to_dict() for f in self.failures],
        }


def manifest_path_for(path: str) -> str:
    """Accept a project directory (its pom.xml is used) or a manifest path."""
    if os.path.isdir(path):
        return os.path.join(path, Constants.POM_XML_FILE)
    return path


def run_project_analysis(
    path: str,
    resolver: "DependencyResolver",
    analyzer: "ArtifactAnalyzer",
) -> ProjectAnalysis:
    """Analyze every non-test, non-provided dependency of a project, one at a time.

    Args:
        path: Project directory or POM file.
        resolver: Dependency resolver.
        analyzer: Per-artifact analyzer.

    Returns:
        ProjectAnalysis with per-coordinate classes and recorded failures.

    Raises:
        ManifestParseError: The root manifest is unreadable or malformed.
    """
    manifest = manifest_path_for(path)
    project = resolver.parse_manifest(manifest)
    dependencies = resolver.resolve_tree(manifest)
    eligible = [d for d in dependencies if d.scope not in Constants.NON_TRANSITIVE_SCOPES]
    logger.info(
        "Analyzing %d of %d dependencies for %s",
        len(eligible),
        len(dependencies),
        project.coordinate.key,
    )

    result = ProjectAnalysis(project=project, dependencies=list(dependencies))
    total = len(eligible)
    with Timer() as t:
        for index, dependency in enumerate(eligible, start=1):
            coordinate = dependency.coordinate
            if not coordinate.is_complete:
                reason = "version is missing or uses an unresolved property"
                logger.warning("Skipping %s: %s", coordinate.key, reason)
                result.failures.append(DependencyFailure(coordinate, reason))
            else:
                try:
                    result.artifacts[coordinate.key] = analyzer.analyze(dependency)
                except MavenApiError as exc:
                    logger.warning("Failed to analyze %s: %s", coordinate.key, exc.reason)
                    result.failures.append(DependencyFailure(coordinate, exc.reason))
            logger.info("Processed %d/%d dependencies", index, total)

    logger.info(
        "Project analysis complete: %d analyzed, %d failed",
        result.analyzed_count,
        len(result.failures),
        extra=extra_context(
            event="analyze_project",
            component="project_runner",
            target=project.coordinate.key,
            count=total,
            duration_ms=t.duration_ms(),
        ),
    )
    return result
