"""Local Maven repository: root discovery, probing, reading and persisting artifacts."""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from typing import Any, Optional

from constants import Constants
from common.errors import NotFoundLocally
from common.logging_utils import extra_context, is_debug_enabled

from . import layout

logger = logging.getLogger(__name__)


def _expand(path: str) -> str:
    """Expand ``${user.home}``, ``${env.X}`` and ``~`` in a settings path."""
    home = os.path.expanduser("~")
    path = path.replace("${user.home}", home)
    for key, value in os.environ.items():
        path = path.replace("${env." + key + "}", value)
    return os.path.expanduser(path)


def read_settings_local_repository(settings_path: Optional[str] = None) -> Optional[str]:
    """Return the ``localRepository`` element of a Maven settings file.

    Nothing else in the settings format is consumed. Missing or malformed
    files yield None.
    """
    path = settings_path or Constants.SETTINGS_XML_FILE
    if not os.path.isfile(path):
        return None
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return None
    for child in root:
        if isinstance(child.tag, str) and child.tag.rsplit("}", 1)[-1] == "localRepository":
            if child.text and child.text.strip():
                return _expand(child.text.strip())
    return None


def resolve_local_repository(
    override: Optional[str] = None,
    settings_path: Optional[str] = None,
) -> str:
    """Locate the local repository root.

    Precedence: explicit override, then the MAVEN_LOCAL_REPOSITORY environment
    variable, then the settings file's localRepository, then ~/.m2/repository.
    """
    if override:
        return os.path.expanduser(override)
    env_value = os.environ.get(Constants.ENV_LOCAL_REPOSITORY)
    if env_value and env_value.strip():
        return os.path.expanduser(env_value.strip())
    from_settings = read_settings_local_repository(settings_path)
    if from_settings:
        return from_settings
    return Constants.DEFAULT_LOCAL_REPOSITORY


class LocalRepository:
    """Filesystem view of a local repository laid out by the Maven convention."""

    def __init__(self, root: Optional[str] = None):
        self.root = root or resolve_local_repository()

    def path_for(self, coordinate: Any, classifier: Optional[str] = None, extension: str = layout.JAR) -> str:
        return layout.local_artifact_path(self.root, coordinate, classifier, extension)

    def exists(self, coordinate: Any, classifier: Optional[str] = None, extension: str = layout.JAR) -> bool:
        return os.path.isfile(self.path_for(coordinate, classifier, extension))

    def read_bytes(self, coordinate: Any, classifier: Optional[str] = None, extension: str = layout.JAR) -> bytes:
        """Read an artifact.

        Raises:
            NotFoundLocally: File is absent or unreadable.
        """
        path = self.path_for(coordinate, classifier, extension)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            raise NotFoundLocally(f"{os.path.basename(path)} not in local repository", coordinate) from exc

    def read_manifest(self, coordinate: Any) -> bytes:
        """Read the raw ``.pom`` of a coordinate; decoding is left to the XML parser.

        Raises:
            NotFoundLocally: POM is absent or unreadable.
        """
        return self.read_bytes(coordinate, extension=layout.POM)

    def write_bytes(
        self,
        coordinate: Any,
        content: bytes,
        classifier: Optional[str] = None,
        extension: str = layout.JAR,
    ) -> str:
        """Persist an artifact under the layout convention, creating directories.

        Returns:
            The path written.
        """
        path = self.path_for(coordinate, classifier, extension)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp_path = path + ".part"
        with open(tmp_path, "wb") as fh:
            fh.write(content)
        os.replace(tmp_path, path)
        if is_debug_enabled(logger):
            logger.debug(
                "Saved artifact to local repository",
                extra=extra_context(
                    event="persist", component="local_repository", target=path, size=len(content)
                ),
            )
        return path

    def write_manifest(self, coordinate: Any, content: bytes) -> None:
        """Persist a fetched POM byte-for-byte. Failures are logged, not raised."""
        try:
            self.write_bytes(coordinate, content, extension=layout.POM)
        except OSError as exc:
            logger.warning("Failed to save POM for %s to local repository: %s", coordinate.key, exc)
