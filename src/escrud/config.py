"""
escrud Configuration
====================

Settings are layered, later layers winning:

    defaults -> appsettings.json -> ESCRUD_* environment -> CLI flags

The JSON file keeps the original console demo's shape:

    {
      "Elasticsearch": {
        "Url": "http://localhost:9200",
        "DefaultIndex": "products",
        "EnableDebugMode": true,
        "PrettyJson": true
      }
    }
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .exceptions import ConfigError

DEFAULT_URL = "http://localhost:9200"
DEFAULT_INDEX = "products"
DEFAULT_CONFIG_FILE = "appsettings.json"

# JSON key -> Settings attribute
_FILE_KEYS = {
    "Url": "url",
    "DefaultIndex": "default_index",
    "EnableDebugMode": "enable_debug_mode",
    "PrettyJson": "pretty_json",
}

# Environment variable -> Settings attribute
_ENV_KEYS = {
    "ESCRUD_URL": "url",
    "ESCRUD_INDEX": "default_index",
    "ESCRUD_DEBUG": "enable_debug_mode",
    "ESCRUD_PRETTY_JSON": "pretty_json",
}

_BOOL_FIELDS = {"enable_debug_mode", "pretty_json"}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Connection and logging settings, read once at startup."""
    url: str = DEFAULT_URL
    default_index: str = DEFAULT_INDEX
    enable_debug_mode: bool = True  # trace every request/response
    pretty_json: bool = True  # indent bodies in debug output

    def override(self, **values: Any) -> "Settings":
        """Return a copy with every non-None value applied."""
        changes = {k: v for k, v in values.items() if v is not None}
        for name in changes.keys() & _BOOL_FIELDS:
            changes[name] = parse_bool(changes[name], name)
        return replace(self, **changes)


def parse_bool(value: Union[str, bool], name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def read_settings_file(path: Path) -> dict:
    """
    Read the ``Elasticsearch`` section of a settings file.

    Returns:
        Dict keyed by Settings attribute names (unknown keys are ignored)
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    section = data.get("Elasticsearch", {}) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: 'Elasticsearch' must be an object")

    return {attr: section[key] for key, attr in _FILE_KEYS.items() if key in section}


def read_environment(environ: Optional[Mapping[str, str]] = None) -> dict:
    environ = os.environ if environ is None else environ
    return {attr: environ[var] for var, attr in _ENV_KEYS.items() if environ.get(var)}


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from defaults, settings file and environment.

    Args:
        path: Settings file; when None, ./appsettings.json is used if present
        environ: Environment mapping (default: os.environ)

    Raises:
        ConfigError: explicit path missing, malformed JSON, bad boolean
    """
    settings = Settings()

    if path is not None:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Settings file not found: {config_path}")
    else:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE

    if config_path.is_file():
        settings = settings.override(**read_settings_file(config_path))

    return settings.override(**read_environment(environ))
