"""Settings file I/O for tf-prism.

Manages a JSON settings file at XDG_CONFIG_HOME/tf-prism/settings.json.
Keys read by the viewer: "theme" ("dark" | "light") and "context_lines".

Import as: from tf_prism.io import settings
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from tf_prism.core.diff_engine import DEFAULT_CONTEXT

logger = logging.getLogger(__name__)


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / tf-prism / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(config_home) / "tf-prism" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: top level is not an object", path)
        return {}
    return data


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single setting by key. Returns default if absent."""
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Save a single setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)


def load_theme() -> Optional[str]:
    """Load saved theme name, or None if unset."""
    theme = load_setting("theme")
    return theme if isinstance(theme, str) else None


def save_theme(theme_name: str) -> None:
    save_setting("theme", theme_name)


def load_context_lines() -> int:
    """Diff context size; falls back to the default on absent or invalid values."""
    value = load_setting("context_lines", DEFAULT_CONTEXT)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning("ignoring invalid context_lines setting %r", value)
        return DEFAULT_CONTEXT
    return value
