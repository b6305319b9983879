"""Colour themes for the plan viewer.

// [LAW:one-source-of-truth] All colours live in Theme. The theme is chosen
//   once at startup by select_theme() and threaded through every renderer;
//   nothing reads a module-level palette.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from tf_prism.core.plan import Action

logger = logging.getLogger(__name__)

THEME_ENV = "TF_PRISM_THEME"


@dataclass(frozen=True)
class Theme:
    name: str
    dark: bool

    create: str
    destroy: str
    update: str
    replace: str
    read: str
    header: str
    computed: str
    text: str
    muted: str
    selected_bg: str
    end_marker: str

    # Confirmation banner
    confirm_bg: str
    confirm_fg: str

    def action_color(self, action: Action) -> str:
        if action is Action.CREATE:
            return self.create
        if action is Action.DESTROY:
            return self.destroy
        if action in (Action.REPLACE, Action.DELETE_CREATE, Action.CREATE_DELETE):
            return self.replace
        if action is Action.READ:
            return self.read
        return self.update

    @property
    def search_style(self) -> str:
        return f"bold {self.header}"

    @property
    def match_style(self) -> str:
        return f"bold {self.create} on {self.selected_bg}"


# Catppuccin Mocha
DARK = Theme(
    name="dark",
    dark=True,
    create="#a6e3a1",
    destroy="#f38ba8",
    update="#f9e2af",
    replace="#cba6f7",
    read="#74c7ec",
    header="#89b4fa",
    computed="#94e2d5",
    text="#cdd6f4",
    muted="#7f849c",
    selected_bg="#45475a",
    end_marker="#6c7086",
    confirm_bg="#f38ba8",
    confirm_fg="#1e1e2e",
)

# Catppuccin Latte
LIGHT = Theme(
    name="light",
    dark=False,
    create="#40a02b",
    destroy="#d20f39",
    update="#df8e1d",
    replace="#8839ef",
    read="#209fb5",
    header="#1e66f5",
    computed="#179299",
    text="#4c4f69",
    muted="#8c8fa1",
    selected_bg="#bcc0cc",
    end_marker="#9ca0b0",
    confirm_bg="#d20f39",
    confirm_fg="#eff1f5",
)

THEMES: dict[str, Theme] = {DARK.name: DARK, LIGHT.name: LIGHT}


def background_is_light(colorfgbg: str | None) -> bool | None:
    """Interpret COLORFGBG ("fg;bg" or "fg;x;bg"). None when unknown.

    Background codes 7 and 9-15 are the light half of the 16-colour palette.
    """
    if not colorfgbg:
        return None
    last = colorfgbg.split(";")[-1]
    if not last.isdigit():
        return None
    bg = int(last)
    return bg == 7 or 9 <= bg <= 15


def select_theme(setting: str | None = None, environ=None) -> Theme:
    """Environment override, then persisted setting, then terminal detection."""
    env = os.environ if environ is None else environ
    for source, value in (("env", env.get(THEME_ENV)), ("settings", setting)):
        if not value:
            continue
        theme = THEMES.get(value.strip().lower())
        if theme is not None:
            logger.debug("theme %s selected from %s", theme.name, source)
            return theme
        logger.warning("ignoring unknown theme %r from %s", value, source)
    if background_is_light(env.get("COLORFGBG")):
        return LIGHT
    return DARK
