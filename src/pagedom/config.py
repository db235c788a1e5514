"""
Configuration for pagedom.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/pagedom/config.toml) if exists
3. Environment variables (PAGEDOM_*) override file
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ViewportConfig:
    """Initial viewport size in CSS pixels."""
    width: int = 1024
    height: int = 768


@dataclass
class CollectionConfig:
    """Live collection defaults."""
    track_attributes: bool = True  # re-evaluate members on attribute writes


@dataclass
class ObserverConfig:
    """Intersection observer defaults."""
    root_margin: str = "0px"


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class Config:
    """Root config with all settings."""
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    collection: CollectionConfig = field(default_factory=CollectionConfig)
    observer: ObserverConfig = field(default_factory=ObserverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "pagedom" / "config.toml"
    return Path.home() / ".config" / "pagedom" / "config.toml"


def load_config() -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", path, exc)
            config = Config()

    # env var overrides
    config = _apply_env(config)

    return config


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "viewport" in data:
        v = data["viewport"]
        if "width" in v:
            config.viewport.width = int(v["width"])
        if "height" in v:
            config.viewport.height = int(v["height"])

    if "collection" in data:
        c = data["collection"]
        if "track_attributes" in c:
            config.collection.track_attributes = bool(c["track_attributes"])

    if "observer" in data:
        o = data["observer"]
        if "root_margin" in o:
            config.observer.root_margin = str(o["root_margin"])

    if "logging" in data:
        lg = data["logging"]
        if "level" in lg:
            config.logging.level = str(lg["level"]).upper()

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str, type]] = {
        "PAGEDOM_VIEWPORT_WIDTH": ("viewport", "width", int),
        "PAGEDOM_VIEWPORT_HEIGHT": ("viewport", "height", int),
        "PAGEDOM_TRACK_ATTRIBUTES": ("collection", "track_attributes", bool),
        "PAGEDOM_ROOT_MARGIN": ("observer", "root_margin", str),
        "PAGEDOM_LOG_LEVEL": ("logging", "level", str),
    }

    for env_key, (section, attr, conv) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(ValueError, AttributeError):
                # Bool needs special handling: "true", "1", "yes" -> True
                converted = val.lower() in ("true", "1", "yes") if conv is bool else conv(val)
                setattr(getattr(config, section), attr, converted)

    return config


def configure_logging(config: Config | None = None) -> None:
    """Set the pagedom logger level from config."""
    config = config or get_config()
    level = logging.getLevelName(config.logging.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.getLogger("pagedom").setLevel(level)


# Module-level config instance, loaded lazily
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() reloads it."""
    global _config
    _config = None
