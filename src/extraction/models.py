"""API metadata model produced by archive extraction."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class JavaParameter:
    name: str
    type: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JavaParameter":
        return cls(name=data["name"], type=data["type"], description=data.get("description"))


@dataclass
class JavaMethod:
    """A method declaration. ``examples`` holds usage snippets taken from its javadoc."""
    name: str
    return_type: str
    parameters: List[JavaParameter] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    exceptions: List[str] = field(default_factory=list)
    javadoc: Optional[str] = None
    examples: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "returnType": self.return_type,
            "parameters": [p.to_dict() for p in self.parameters],
            "modifiers": list(self.modifiers),
            "exceptions": list(self.exceptions),
            "javadoc": self.javadoc,
            "examples": list(self.examples),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JavaMethod":
        return cls(
            name=data["name"],
            return_type=data.get("returnType", ""),
            parameters=[JavaParameter.from_dict(p) for p in data.get("parameters") or []],
            modifiers=list(data.get("modifiers") or []),
            exceptions=list(data.get("exceptions") or []),
            javadoc=data.get("javadoc"),
            examples=list(data.get("examples") or []),
        )


@dataclass
class JavaField:
    name: str
    type: str
    modifiers: List[str] = field(default_factory=list)
    javadoc: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "modifiers": list(self.modifiers),
            "javadoc": self.javadoc,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JavaField":
        return cls(
            name=data["name"],
            type=data.get("type", ""),
            modifiers=list(data.get("modifiers") or []),
            javadoc=data.get("javadoc"),
        )


@dataclass
class JavaClass:
    """A top-level type found in an archive. Owns its methods and fields."""
    name: str
    package_name: str
    is_interface: bool = False
    is_abstract: bool = False
    modifiers: List[str] = field(default_factory=lambda: ["public"])
    methods: List[JavaMethod] = field(default_factory=list)
    fields: List[JavaField] = field(default_factory=list)
    super_class: Optional[str] = None
    interfaces: List[str] = field(default_factory=list)
    javadoc: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.package_name}.{self.name}" if self.package_name else self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "packageName": self.package_name,
            "isInterface": self.is_interface,
            "isAbstract": self.is_abstract,
            "modifiers": list(self.modifiers),
            "methods": [m.to_dict() for m in self.methods],
            "fields": [f.to_dict() for f in self.fields],
            "superClass": self.super_class,
            "interfaces": list(self.interfaces),
            "javadoc": self.javadoc,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JavaClass":
        return cls(
            name=data["name"],
            package_name=data.get("packageName", ""),
            is_interface=bool(data.get("isInterface", False)),
            is_abstract=bool(data.get("isAbstract", False)),
            modifiers=list(data.get("modifiers") or []),
            methods=[JavaMethod.from_dict(m) for m in data.get("methods") or []],
            fields=[JavaField.from_dict(f) for f in data.get("fields") or []],
            super_class=data.get("superClass"),
            interfaces=list(data.get("interfaces") or []),
            javadoc=data.get("javadoc"),
        )
