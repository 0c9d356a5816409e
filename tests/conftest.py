"""Shared fixtures: in-memory archives, POM text and repository helpers."""

import io
import os
import zipfile

import pytest

from maven.models import Coordinate
from repository.local import LocalRepository


def build_jar(entries):
    """Return zip bytes holding ``{entry name: text or bytes}``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            archive.writestr(name, content)
    return buffer.getvalue()


def pom_xml(group, artifact, version, dependencies=(), namespaced=True):
    """Render a minimal POM. ``dependencies`` holds (g, a, v, scope, optional) tuples."""
    deps = []
    for g, a, v, scope, optional in dependencies:
        parts = [f"<groupId>{g}</groupId>", f"<artifactId>{a}</artifactId>"]
        if v is not None:
            parts.append(f"<version>{v}</version>")
        if scope:
            parts.append(f"<scope>{scope}</scope>")
        if optional:
            parts.append("<optional>true</optional>")
        deps.append("<dependency>" + "".join(parts) + "</dependency>")
    ns = ' xmlns="http://maven.apache.org/POM/4.0.0"' if namespaced else ""
    return (
        f"<project{ns}><modelVersion>4.0.0</modelVersion>"
        f"<groupId>{group}</groupId><artifactId>{artifact}</artifactId><version>{version}</version>"
        f"<dependencies>{''.join(deps)}</dependencies></project>"
    )


@pytest.fixture
def jar_factory():
    return build_jar


@pytest.fixture
def local_repo(tmp_path):
    root = tmp_path / "m2"
    root.mkdir()
    return LocalRepository(str(root))


@pytest.fixture
def put_local(local_repo):
    """Write an artifact into the temporary local repository."""

    def _put(coordinate, content, classifier=None, extension="jar"):
        if isinstance(content, str):
            content = content.encode("utf-8")
        return local_repo.write_bytes(coordinate, content, classifier, extension)

    return _put


@pytest.fixture
def widget():
    return Coordinate("org.acme", "widget", "1.0")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep tests away from the real ~/.m2 and ~/.mavenapi."""
    monkeypatch.delenv("MAVEN_LOCAL_REPOSITORY", raising=False)
    monkeypatch.setenv("MAVENAPI_LOG_LEVEL", "INFO")
    monkeypatch.setattr("constants.Constants.CACHE_DIR", os.path.join(str(tmp_path), "default-cache"))
