"""POM manifest parsing.

Only the fields needed for dependency resolution are read: the project
coordinate, the parent reference and the directly declared dependencies.
Parent POMs are never fetched or merged, so coordinate fields a child
inherits stay None; ``Project.parent`` records where they would come from.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Union

from constants import Constants, Scopes
from common.errors import ManifestParseError
from common.logging_utils import extra_context, is_debug_enabled

from .models import Coordinate, Dependency, Project

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    """Return the first direct child with the given local name, namespace-agnostic."""
    for child in elem:
        if isinstance(child.tag, str) and _local_name(child.tag) == name:
            return child
    return None


def _text(elem: Optional[ET.Element], name: str) -> Optional[str]:
    """Stripped text of a direct child, or None when absent or blank."""
    if elem is None:
        return None
    node = _child(elem, name)
    if node is None or node.text is None:
        return None
    value = node.text.strip()
    return value or None


def _coordinate_of(elem: Optional[ET.Element]) -> Coordinate:
    return Coordinate(_text(elem, "groupId"), _text(elem, "artifactId"), _text(elem, "version"))


def _parse_dependencies(project: ET.Element) -> List[Dependency]:
    deps_elem = _child(project, "dependencies")
    if deps_elem is None:
        return []
    result: List[Dependency] = []
    for dep in deps_elem:
        if not isinstance(dep.tag, str) or _local_name(dep.tag) != "dependency":
            continue
        scope = _text(dep, "scope")
        optional = (_text(dep, "optional") or "").lower() == "true"
        result.append(
            Dependency(
                coordinate=_coordinate_of(dep),
                scope=scope.lower() if scope else Scopes.COMPILE.value,
                optional=optional,
            )
        )
    return result


def parse_pom_content(pom_xml: Union[str, bytes], source: Optional[str] = None) -> Project:
    """Parse POM XML content into a Project.

    Args:
        pom_xml: POM XML content. Bytes are decoded by the parser according
            to the XML declaration, so non-UTF-8 POMs parse correctly.
        source: Where the content came from, for error messages.

    Returns:
        Project with declared dependencies in document order.

    Raises:
        ManifestParseError: Content is not well-formed XML or not a POM.
    """
    try:
        root = ET.fromstring(pom_xml)
    except (ET.ParseError, ValueError) as exc:
        raise ManifestParseError(f"malformed POM: {exc}", source=source) from exc

    if _local_name(root.tag) != "project":
        raise ManifestParseError(
            f"root element is <{_local_name(root.tag)}>, expected <project>", source=source
        )
    ns = root.tag[1:].split("}", 1)[0] if root.tag.startswith("{") else ""
    if ns and ns != Constants.MAVEN_POM_NS and is_debug_enabled(logger):
        logger.debug(
            "Unexpected POM namespace",
            extra=extra_context(event="anomaly", component="pom", action="parse", namespace=ns),
        )

    parent_elem = _child(root, "parent")
    parent = _coordinate_of(parent_elem) if parent_elem is not None else None
    coordinate = _coordinate_of(root)
    if parent is not None and None in (coordinate.group_id, coordinate.version):
        logger.debug(
            "POM %s relies on parent %s for coordinate fields; inheritance is not applied",
            source or coordinate.key,
            parent.key,
        )

    return Project(
        coordinate=coordinate,
        dependencies=tuple(_parse_dependencies(root)),
        parent=parent,
    )


def parse_pom_file(path: str) -> Project:
    """Read and parse a POM file from disk.

    Raises:
        ManifestParseError: File cannot be read or is not a valid POM.
    """
    try:
        with open(path, "rb") as fh:
            content = fh.read()
    except OSError as exc:
        raise ManifestParseError(f"cannot read manifest: {exc}", source=path) from exc
    return parse_pom_content(content, source=path)
