"""Data models for manifests and dependency resolution."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from constants import Constants, Scopes


@dataclass(frozen=True)
class Coordinate:
    """groupId:artifactId:version triple. Fields are None when a manifest omits them."""
    group_id: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]

    @property
    def key(self) -> str:
        """Render as ``g:a:v`` (missing parts render as empty strings)."""
        return ":".join(part or "" for part in (self.group_id, self.artifact_id, self.version))

    @property
    def group_path(self) -> str:
        """Group with dots replaced by slashes, as used in repository paths."""
        return (self.group_id or "").replace(".", "/")

    @property
    def is_complete(self) -> bool:
        """True when every field is present and free of unresolved properties."""
        return all(part and "${" not in part for part in (self.group_id, self.artifact_id, self.version))

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """Parse ``g:a:v``. Raises ValueError on any other shape."""
        parts = text.strip().split(":")
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"expected groupId:artifactId:version, got {text!r}")
        return cls(parts[0], parts[1], parts[2])

    def to_dict(self) -> Dict[str, Any]:
        return {"groupId": self.group_id, "artifactId": self.artifact_id, "version": self.version}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinate":
        return cls(data.get("groupId"), data.get("artifactId"), data.get("version"))

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Dependency:
    """A declared dependency: coordinate plus scope and optional flag."""
    coordinate: Coordinate
    scope: str = Scopes.COMPILE.value
    optional: bool = False

    @property
    def is_transitive_scope(self) -> bool:
        """False for scopes whose own dependencies never propagate (test, provided)."""
        return self.scope not in Constants.NON_TRANSITIVE_SCOPES

    def to_dict(self) -> Dict[str, Any]:
        data = self.coordinate.to_dict()
        data["scope"] = self.scope
        data["optional"] = self.optional
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        return cls(
            coordinate=Coordinate.from_dict(data),
            scope=data.get("scope") or Scopes.COMPILE.value,
            optional=bool(data.get("optional", False)),
        )


@dataclass(frozen=True)
class Project:
    """Parsed manifest. ``parent`` is informational only; it is never merged."""
    coordinate: Coordinate
    dependencies: Tuple[Dependency, ...] = field(default_factory=tuple)
    parent: Optional[Coordinate] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coordinate": self.coordinate.to_dict(),
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "parent": self.parent.to_dict() if self.parent else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        parent = data.get("parent")
        return cls(
            coordinate=Coordinate.from_dict(data.get("coordinate") or {}),
            dependencies=tuple(Dependency.from_dict(d) for d in data.get("dependencies") or []),
            parent=Coordinate.from_dict(parent) if parent else None,
        )


# Ordered, duplicate-free result of a resolution call.
ResolvedSet = Tuple[Dependency, ...]
