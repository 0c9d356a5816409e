"""Maven repository path convention shared by local lookups and remote URLs.

``<root>/<group path>/<artifactId>/<version>/<artifactId>-<version>[-classifier].<ext>``
"""
from __future__ import annotations

import os
from typing import Any, Optional

JAR = "jar"
POM = "pom"
SOURCES = "sources"
JAVADOC = "javadoc"


def artifact_file_name(coordinate: Any, classifier: Optional[str] = None, extension: str = JAR) -> str:
    """File name for an artifact, e.g. ``widget-1.0-sources.jar``."""
    suffix = f"-{classifier}" if classifier else ""
    return f"{coordinate.artifact_id}-{coordinate.version}{suffix}.{extension}"


def artifact_relative_path(coordinate: Any, classifier: Optional[str] = None, extension: str = JAR) -> str:
    """Slash-separated path relative to a repository root."""
    return "/".join(
        (
            coordinate.group_path,
            coordinate.artifact_id,
            coordinate.version,
            artifact_file_name(coordinate, classifier, extension),
        )
    )


def local_artifact_path(root: str, coordinate: Any, classifier: Optional[str] = None, extension: str = JAR) -> str:
    """Absolute on-disk path under a local repository root."""
    return os.path.join(root, *artifact_relative_path(coordinate, classifier, extension).split("/"))


def remote_artifact_url(base_url: str, coordinate: Any, classifier: Optional[str] = None, extension: str = JAR) -> str:
    """URL under a remote repository base.

    Args:
        base_url: Repository base, e.g. https://repo1.maven.org/maven2
        coordinate: Maven coordinate
        classifier: None, "sources" or "javadoc"
        extension: "jar" or "pom"

    Returns:
        Full artifact URL string
    """
    return f"{base_url.rstrip('/')}/{artifact_relative_path(coordinate, classifier, extension)}"
