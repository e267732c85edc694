import logging
import os
from dataclasses import dataclass, field
from typing import Any

import orjson

from swayfocus.errors import ConfigError

log = logging.getLogger(__name__)

TEMPLATE = os.path.join(os.path.dirname(__file__), "settings.json")


@dataclass
class Settings:
    log_level: str = "WARNING"
    aliases: dict[str, list[str]] = field(default_factory=dict)


def copy_file(src_file: str, dest_file: str) -> None:
    with open(src_file, "rb") as src, open(dest_file, "wb") as dest:
        dest.write(src.read())


def settings_path() -> str:
    if not (config := os.environ.get("SWAYFOCUS")):
        xdg_config = os.environ.get("XDG_CONFIG_HOME") or "~/.config"
        config = os.path.join(os.path.expanduser(xdg_config), "swayfocus")
    return os.path.join(config, "settings.json")


def ensure_settings_exist(s_file: str) -> None:
    """Copies the packaged template to `s_file` on first run"""
    if os.path.exists(s_file):
        return
    try:
        os.makedirs(os.path.dirname(s_file), exist_ok=True)
        copy_file(TEMPLATE, s_file)
    except OSError as e:
        # a read-only config dir shouldn't stop focus from moving
        log.warning("Could not create %s: %s", s_file, e)


def parse_settings(raw: Any, source: str = "settings") -> Settings:
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: expected an object at the top level")

    log_level = raw.get("log_level", "WARNING")
    if not isinstance(log_level, str):
        raise ConfigError(f"{source}: log_level must be a string")

    aliases = raw.get("aliases", {})
    if not isinstance(aliases, dict) or not all(
        isinstance(targets, list) and all(isinstance(t, str) for t in targets)
        for targets in aliases.values()
    ):
        raise ConfigError(f"{source}: aliases must map names to lists of targets")

    return Settings(log_level=log_level.upper(), aliases=aliases)


def load_settings(s_file: str | None = None) -> Settings:
    """
    Reads settings.json, creating it from the template when missing.
    `SWAYFOCUS_LOG` overrides the configured log level.
    """
    if s_file is None:
        s_file = settings_path()
        ensure_settings_exist(s_file)
        if not os.path.exists(s_file):
            s_file = TEMPLATE

    try:
        with open(s_file, "rb") as f:
            settings = parse_settings(orjson.loads(f.read()), s_file)
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"{s_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {s_file}: {e}") from e

    if level := os.environ.get("SWAYFOCUS_LOG"):
        settings.log_level = level.upper()
    return settings
