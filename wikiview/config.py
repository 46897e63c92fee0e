"""Persistent JSON config helpers.

Stores the theme name, key-binding overrides, history capacity and the
default pages directory. All access is defensive: malformed or missing config
falls back safely.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from .viewer.commands import BINDABLE_COMMANDS

APP_NAME = "wikiview"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

logger = logging.getLogger(__name__)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged and otherwise ignored so
    the viewer keeps running when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def load_theme_name() -> str | None:
    """Return the persisted theme name, or ``None`` when unset or invalid."""
    value = load_config().get("theme")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def save_theme_name(name: str) -> None:
    config = load_config()
    config["theme"] = str(name)
    save_config(config)


def load_key_bindings() -> dict[str, str]:
    """Load key-token to command-name overrides.

    Entries whose command is not a bindable command name are dropped.
    """
    value = load_config().get("key_bindings")
    if not isinstance(value, dict):
        return {}
    bindings: dict[str, str] = {}
    for key, command in value.items():
        if not isinstance(key, str) or not key or not isinstance(command, str):
            continue
        if command not in BINDABLE_COMMANDS:
            logger.warning("ignoring binding %r -> unknown command %r", key, command)
            continue
        bindings[key] = command
    return bindings


def load_history_limit() -> int | None:
    """Return the history capacity; ``None`` means unbounded.

    Booleans, non-integers and values below one are treated as unset.
    """
    value = load_config().get("history_limit")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


def load_pages_dir() -> Path | None:
    value = load_config().get("pages_dir")
    if not isinstance(value, str) or not value:
        return None
    return Path(value).expanduser()


__all__ = [
    "CONFIG_PATH",
    "load_config",
    "load_history_limit",
    "load_key_bindings",
    "load_pages_dir",
    "load_theme_name",
    "save_config",
    "save_theme_name",
]
