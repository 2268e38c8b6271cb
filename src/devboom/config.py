"""Runtime settings for devboom.

Settings are resolved in three layers, later layers winning:

1. Built-in defaults (data directory from ``platformdirs``).
2. ``config.yaml`` inside the data directory, if present.
3. The ``DEVBOOM_HOME`` environment variable, which relocates the data
   directory (and with it the store and the config file).

The CLI's ``--data-dir`` option is passed straight to ``load_settings``
and overrides all three.

Example ``config.yaml``::

    default_scan_depth: 4
    extra_ignore_dirs: [".terraform", "tmp"]
    extra_extensions:
      ".jinja": "Jinja"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_data_dir

from devboom import APP_NAME
from devboom.exceptions import FilesystemError, InvalidInputError

logger = logging.getLogger(__name__)

ENV_HOME = "DEVBOOM_HOME"
CONFIG_FILENAME = "config.yaml"
STORE_FILENAME = "store.json"

DEFAULT_SCAN_DEPTH = 3
MAX_SCAN_DEPTH = 8
ICON_MAX_BYTES = 2 * 1024 * 1024


@dataclass
class Settings:
    """Resolved configuration for one devboom process.

    Attributes:
        data_dir: Directory holding the store and ``config.yaml``.
        default_scan_depth: Depth used when a scan request gives none.
        max_scan_depth: Upper bound accepted for scan depths.
        extra_ignore_dirs: Additional directory names to skip during
            scans and language statistics runs.
        extra_extensions: Additional ``extension -> language`` mappings
            for the language statistics engine.
        icon_max_bytes: Largest icon file accepted by ``set_ide_icon``.
    """

    data_dir: Path
    default_scan_depth: int = DEFAULT_SCAN_DEPTH
    max_scan_depth: int = MAX_SCAN_DEPTH
    extra_ignore_dirs: list[str] = field(default_factory=list)
    extra_extensions: dict[str, str] = field(default_factory=dict)
    icon_max_bytes: int = ICON_MAX_BYTES

    @property
    def store_path(self) -> Path:
        """Path of the JSON catalog file."""
        return self.data_dir / STORE_FILENAME

    @property
    def config_path(self) -> Path:
        """Path of the optional YAML config file."""
        return self.data_dir / CONFIG_FILENAME


def default_data_dir() -> Path:
    """Return the data directory before any config file is consulted."""
    override = os.environ.get(ENV_HOME)
    if override:
        return Path(override).expanduser()
    return Path(user_data_dir(APP_NAME, appauthor=False))


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from disk, returning {} when the file is absent."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise FilesystemError(f"Cannot read config file: {exc}", str(path)) from exc
    except yaml.YAMLError as exc:
        raise InvalidInputError(f"Malformed config file: {exc}", str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInputError("Config file must contain a mapping", str(path))
    return data


def _normalize_extensions(raw: dict[str, Any]) -> dict[str, str]:
    out: dict[str, str] = {}
    for ext, language in raw.items():
        key = str(ext).lower()
        if not key.startswith("."):
            key = f".{key}"
        out[key] = str(language)
    return out


def load_settings(data_dir: Path | str | None = None) -> Settings:
    """Resolve settings from defaults, ``config.yaml`` and the environment.

    Args:
        data_dir: Explicit data directory; takes precedence over
            ``DEVBOOM_HOME`` and the platform default.

    Returns:
        A fully populated ``Settings``.

    Raises:
        InvalidInputError: If the config file is malformed or holds
            out-of-range values.
        FilesystemError: If the config file exists but cannot be read.
    """
    base = Path(data_dir).expanduser() if data_dir is not None else default_data_dir()
    settings = Settings(data_dir=base)
    raw = _read_yaml(settings.config_path)

    known = {f.name for f in fields(Settings)} - {"data_dir"}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r in %s", key, settings.config_path)
            continue
        if key == "extra_extensions":
            if not isinstance(value, dict):
                raise InvalidInputError("extra_extensions must be a mapping", key)
            value = _normalize_extensions(value)
        elif key == "extra_ignore_dirs":
            if not isinstance(value, list):
                raise InvalidInputError("extra_ignore_dirs must be a list", key)
            value = [str(v) for v in value]
        else:
            try:
                value = int(value)
            except (TypeError, ValueError) as exc:
                raise InvalidInputError(f"{key} must be an integer", key) from exc
        setattr(settings, key, value)

    if not 1 <= settings.max_scan_depth <= MAX_SCAN_DEPTH:
        raise InvalidInputError(
            f"max_scan_depth must be between 1 and {MAX_SCAN_DEPTH}", "max_scan_depth",
        )
    if not 1 <= settings.default_scan_depth <= settings.max_scan_depth:
        raise InvalidInputError(
            f"default_scan_depth must be between 1 and {settings.max_scan_depth}",
            "default_scan_depth",
        )
    return settings
