"""Maven manifest parsing and dependency tree resolution.

- models.py: Coordinate, Dependency, Project
- pom.py: POM XML parsing
- resolver.py: transitive dependency resolution over local/remote repositories
"""

from .models import Coordinate, Dependency, Project, ResolvedSet
from .pom import parse_pom_content, parse_pom_file
from .resolver import DependencyResolver

__all__ = [
    "Coordinate",
    "Dependency",
    "Project",
    "ResolvedSet",
    "parse_pom_content",
    "parse_pom_file",
    "DependencyResolver",
]
