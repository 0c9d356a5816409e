"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    CONNECTION_ERROR = 2
    FILE_ERROR = 1
    EXIT_WARNINGS = 3


class Scopes(Enum):
    """Dependency scopes recognized when walking manifests.

    Args:
        Enum (string): Maven dependency scope names.
    """

    COMPILE = "compile"
    RUNTIME = "runtime"
    PROVIDED = "provided"
    TEST = "test"
    SYSTEM = "system"
    IMPORT = "import"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REMOTE_REPOSITORY_URL = "https://repo1.maven.org/maven2"
    MAVEN_POM_NS = "http://maven.apache.org/POM/4.0.0"
    MAVEN_SETTINGS_NS = "http://maven.apache.org/SETTINGS/1.0.0"
    POM_XML_FILE = "pom.xml"
    SETTINGS_XML_FILE = os.path.join(os.path.expanduser("~"), ".m2", "settings.xml")
    DEFAULT_LOCAL_REPOSITORY = os.path.join(os.path.expanduser("~"), ".m2", "repository")
    NON_TRANSITIVE_SCOPES = (Scopes.TEST.value, Scopes.PROVIDED.value)

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_USER_AGENT = "mavenapi/1.0"

    CACHE_DIR = os.path.join(os.path.expanduser("~"), ".mavenapi", "cache")
    CACHE_FLUSH_DELAY_SEC = 30
    FETCH_SIDECARS = True

    ENV_CONFIG = "MAVENAPI_CONFIG"
    ENV_LOG_LEVEL = "MAVENAPI_LOG_LEVEL"
    ENV_LOCAL_REPOSITORY = "MAVEN_LOCAL_REPOSITORY"
    CONFIG_FILE_NAME = "mavenapi.yml"


# Config section -> {yaml key: Constants attribute}
_CONFIG_KEYS = {
    "repository": {"remote_url": "REMOTE_REPOSITORY_URL"},
    "http": {"timeout": "REQUEST_TIMEOUT", "user_agent": "HTTP_USER_AGENT"},
    "cache": {"dir": "CACHE_DIR", "flush_delay": "CACHE_FLUSH_DELAY_SEC"},
    "acquisition": {"fetch_sidecars": "FETCH_SIDECARS"},
}


def _config_candidates():
    """Yield YAML config locations in priority order."""
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        yield env_path
    yield os.path.join(os.getcwd(), Constants.CONFIG_FILE_NAME)
    yield os.path.join(os.path.expanduser("~"), ".config", "mavenapi", Constants.CONFIG_FILE_NAME)


def _load_yaml_config() -> Dict[str, Any]:
    """Load the first YAML configuration file found.

    Returns:
        Parsed mapping, or an empty dict when no usable file exists.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    for path in _config_candidates():
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logging.getLogger(__name__).warning("Ignoring unreadable config %s: %s", path, exc)
            return {}
        if isinstance(data, dict):
            return data
        return {}
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply configuration sections onto Constants. Unknown keys are ignored."""
    if not isinstance(cfg, dict):
        return
    for section, keys in _CONFIG_KEYS.items():
        values = cfg.get(section)
        if not isinstance(values, dict):
            continue
        for key, attr in keys.items():
            if key not in values or values[key] is None:
                continue
            current = getattr(Constants, attr)
            value = values[key]
            if isinstance(current, bool):
                value = str(value).strip().lower() in ("1", "true", "yes", "on")
            elif isinstance(current, int):
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    continue
            elif attr == "CACHE_DIR":
                value = os.path.expanduser(str(value))
            else:
                value = str(value)
            setattr(Constants, attr, value)


apply_config(_load_yaml_config())
