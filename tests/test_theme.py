"""Tests for theme selection (tf_prism.tui.theme)."""

import logging

import pytest

from tf_prism.core.plan import Action
from tf_prism.tui.theme import DARK, LIGHT, THEMES, background_is_light, select_theme


@pytest.mark.parametrize(
    "colorfgbg, expected",
    [
        ("15;0", False),
        ("0;15", True),
        ("0;7", True),
        ("0;default;11", True),
        ("15;8", False),
        ("default;default", None),
        ("", None),
        (None, None),
    ],
)
def test_background_is_light(colorfgbg, expected):
    assert background_is_light(colorfgbg) is expected


def test_default_is_dark():
    assert select_theme(environ={}) is DARK


def test_light_terminal_is_detected():
    assert select_theme(environ={"COLORFGBG": "0;15"}) is LIGHT


def test_setting_beats_detection():
    assert select_theme("dark", environ={"COLORFGBG": "0;15"}) is DARK


def test_env_beats_setting():
    assert select_theme("dark", environ={"TF_PRISM_THEME": " Light "}) is LIGHT


def test_unknown_names_fall_through_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="tf_prism"):
        theme = select_theme("solarized", environ={"TF_PRISM_THEME": "neon"})
    assert theme is DARK
    assert "neon" in caplog.text
    assert "solarized" in caplog.text


def test_themes_are_registered_by_name():
    assert THEMES == {"dark": DARK, "light": LIGHT}
    assert DARK.dark and not LIGHT.dark


def test_action_colours_differ_per_theme():
    for action in (Action.CREATE, Action.DESTROY, Action.UPDATE, Action.REPLACE, Action.READ):
        assert DARK.action_color(action) != LIGHT.action_color(action)
    assert DARK.action_color(Action.NO_OP) == DARK.update
