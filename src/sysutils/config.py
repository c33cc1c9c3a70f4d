"""sysutils configuration.

Config files:
  - Global:  ~/.config/sysutils/config.json
  - Project: .sysutils.json (current directory)

Merge order: global → project → environment variables (highest priority).
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    GLOBAL = "global"
    PROJECT = "project"


DEFAULT_TEMP_PREFIX = "tmp_"
DEFAULT_TEMP_WIDTH = 6

DEFAULTS: Dict[str, Any] = {
    "debug": False,
    "temp_prefix": DEFAULT_TEMP_PREFIX,
    "temp_width": DEFAULT_TEMP_WIDTH,
}

# Mapping: config key → env var name
_ENV_OVERRIDES: list[tuple[str, str]] = [
    ("debug", "SYSUTILS_DEBUG"),
    ("temp_prefix", "SYSUTILS_TEMP_PREFIX"),
    ("temp_width", "SYSUTILS_TEMP_WIDTH"),
    ("log_file", "SYSUTILS_LOG_FILE"),
]

_INT_KEYS = frozenset({"temp_width"})
_BOOL_KEYS = frozenset({"debug"})
KNOWN_KEYS = frozenset(key for key, _ in _ENV_OVERRIDES)


def config_path(scope: Scope) -> Path:
    if scope is Scope.PROJECT:
        return Path.cwd() / ".sysutils.json"
    return Path.home() / ".config" / "sysutils" / "config.json"


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def _merge_layer(merged: Dict[str, Any], layer: Dict[str, Any], source: Path) -> None:
    """Merge one config file, dropping values that do not fit their key's type."""
    for key, value in layer.items():
        if key in _INT_KEYS and not (isinstance(value, int) and not isinstance(value, bool)):
            try:
                value = coerce_value(key, str(value))
            except ValueError:
                logger.warning("Invalid %s value %r in %s; ignoring", key, value, source)
                continue
        elif key in _BOOL_KEYS and not isinstance(value, bool):
            value = coerce_value(key, str(value))
        merged[key] = value


def load_config() -> Dict[str, Any]:
    """Load merged config: defaults → global → project → env vars."""
    merged: Dict[str, Any] = {**DEFAULTS}
    global_path = config_path(Scope.GLOBAL)
    _merge_layer(merged, _read_json(global_path), global_path)

    # The working directory may have been removed under us; skip the project layer then.
    try:
        project_path = config_path(Scope.PROJECT)
    except OSError as exc:
        logger.warning("Cannot resolve project config (%s); skipping it", exc)
    else:
        _merge_layer(merged, _read_json(project_path), project_path)

    # Environment variables override everything
    _apply_env_overrides(merged)

    return merged


def load_raw_config(scope: Scope) -> Dict[str, Any]:
    """Load config for a specific scope without merge/env overrides."""
    return _read_json(config_path(scope))


def coerce_value(key: str, raw: str) -> Any:
    """Convert a string setting to the type stored under *key*."""
    if key in _INT_KEYS:
        return int(raw)
    if key in _BOOL_KEYS:
        return raw.lower() == "true"
    return raw


def _apply_env_overrides(merged: Dict[str, Any]) -> None:
    for config_key, env_var in _ENV_OVERRIDES:
        val = os.environ.get(env_var)
        if not val:
            continue
        try:
            merged[config_key] = coerce_value(config_key, val)
        except ValueError:
            logger.warning("Invalid %s value %r; ignoring", env_var, val)


def save_config(data: Dict[str, Any], scope: Scope) -> None:
    """Save config to the specified scope."""
    from .file_io import atomic_write

    atomic_write(config_path(scope), (json.dumps(data, indent=2, ensure_ascii=False) + "\n").encode("utf-8"))
