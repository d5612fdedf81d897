"""Configuration manager for psoutline using TOML files."""

from __future__ import annotations

import copy
import logging
from dataclasses import fields
from typing import Any, Dict, List, Optional, Tuple

import toml

from . import config
from .models import ParseOptions

logger = logging.getLogger(__name__)

CONFIG_FILE = config.BASE_DIR / "config.toml"

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "parsing": {f.name: f.default for f in fields(ParseOptions)},
    "scan": {
        "extensions": list(config.DEFAULT_EXTENSIONS),
        "skip_dirs": sorted(config.SKIP_DIRS),
    },
}

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


class ConfigError(ValueError):
    """Raised for unknown configuration keys or values that cannot be parsed."""


def load_full_config() -> Dict[str, Any]:
    """Load the raw TOML config (all sections), or ``{}`` when absent."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_FILE, exc)
        return {}


def _save_full_config(cfg: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    try:
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(cfg, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", CONFIG_FILE, exc)
        return False


def load_config() -> Dict[str, Dict[str, Any]]:
    """Merge the user's config over the built-in defaults.

    Only keys known to the defaults are taken; values of the wrong type are
    ignored with a warning.
    """
    merged = copy.deepcopy(DEFAULT_CONFIG)
    user = load_full_config()
    for section, defaults in merged.items():
        values = user.get(section)
        if not isinstance(values, dict):
            continue
        for key, default in defaults.items():
            if key not in values:
                continue
            value = values[key]
            if isinstance(default, bool) and not isinstance(value, bool):
                logger.warning("Config %s.%s must be a boolean, got %r", section, key, value)
                continue
            if isinstance(default, list):
                if not isinstance(value, list):
                    logger.warning("Config %s.%s must be a list, got %r", section, key, value)
                    continue
                value = [str(v) for v in value]
                if key == "extensions":
                    value = normalize_extensions(value)
            defaults[key] = value
    return merged


def load_parse_options(cfg: Optional[Dict[str, Dict[str, Any]]] = None) -> ParseOptions:
    """Resolve the ``[parsing]`` section into an immutable options value."""
    cfg = cfg if cfg is not None else load_config()
    return ParseOptions(**cfg["parsing"])


def normalize_extensions(values: List[str]) -> List[str]:
    result: List[str] = []
    for value in values:
        value = value.strip().lower()
        if not value:
            continue
        if not value.startswith("."):
            value = "." + value
        if value not in result:
            result.append(value)
    return result


def resolve_key(key: str) -> Tuple[str, str]:
    """Map ``section.key`` or a bare ``key`` to its section and name."""
    if "." in key:
        section, _, name = key.partition(".")
        if name in DEFAULT_CONFIG.get(section, {}):
            return section, name
    else:
        for section, defaults in DEFAULT_CONFIG.items():
            if key in defaults:
                return section, key
    raise ConfigError(f"Unknown config key '{key}'")


def parse_value(section: str, name: str, raw: str) -> Any:
    default = DEFAULT_CONFIG[section][name]
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"Expected a boolean for '{section}.{name}', got '{raw}'")
    parts = [p for p in raw.replace(",", " ").split() if p]
    if name == "extensions":
        parts = normalize_extensions(parts)
    if not parts:
        raise ConfigError(f"'{section}.{name}' needs at least one value")
    return parts


def set_value(key: str, raw: str) -> Tuple[str, Any]:
    """Persist one setting; returns the dotted key and the stored value.

    Preserves other sections and keys already in the file.
    """
    section, name = resolve_key(key)
    value = parse_value(section, name, raw)
    cfg = load_full_config()
    cfg.setdefault(section, {})[name] = value
    if not _save_full_config(cfg):
        raise ConfigError(f"Could not write {CONFIG_FILE}")
    return f"{section}.{name}", value


def reset_config() -> bool:
    """Remove the psoutline sections from the config file, restoring defaults."""
    cfg = load_full_config()
    for section in DEFAULT_CONFIG:
        cfg.pop(section, None)
    return _save_full_config(cfg)
