"""Mode system for key dispatch.

All keyboard input routes through one dispatcher based on the current mode.
Textual BINDINGS are not used - on_key is the sole entry point and
MODE_KEYMAP is the sole key→command table.
"""

from enum import Enum, auto


class Mode(Enum):
    """Exactly one mode is active at a time."""

    NORMAL = auto()
    SEARCHING = auto()
    FILTERING = auto()
    SORTING = auto()
    CONFIRMING = auto()


class Command(Enum):
    # Normal
    MOVE_UP = auto()
    MOVE_DOWN = auto()
    TOGGLE_EXPAND = auto()
    EXPAND = auto()
    COLLAPSE = auto()
    EXPAND_ALL = auto()
    COLLAPSE_ALL = auto()
    HALF_PAGE_DOWN = auto()
    HALF_PAGE_UP = auto()
    PAGE_DOWN = auto()
    PAGE_UP = auto()
    GO_TOP = auto()
    GO_BOTTOM = auto()
    OPEN_FILTER = auto()
    OPEN_SORT = auto()
    START_SEARCH = auto()
    NEXT_MATCH = auto()
    PREV_MATCH = auto()
    ARM_APPLY = auto()
    QUIT = auto()

    # Shared
    ESCAPE = auto()

    # Filter picker
    FILTER_UP = auto()
    FILTER_DOWN = auto()
    FILTER_TOGGLE = auto()
    FILTER_ALL = auto()
    FILTER_NONE = auto()
    FILTER_ACCEPT = auto()

    # Sort picker
    SORT_UP = auto()
    SORT_DOWN = auto()
    SORT_ACCEPT = auto()

    # Search input
    SEARCH_SUBMIT = auto()
    SEARCH_BACKSPACE = auto()

    # Confirmation
    CONFIRM_APPLY = auto()
    DISARM = auto()


# [LAW:one-source-of-truth] Key→command mapping per mode.
# SEARCHING: unmapped printable characters are text input.
# CONFIRMING: unmapped keys disarm the confirmation.
MODE_KEYMAP: dict[Mode, dict[str, Command]] = {
    Mode.NORMAL: {
        "up": Command.MOVE_UP,
        "k": Command.MOVE_UP,
        "down": Command.MOVE_DOWN,
        "j": Command.MOVE_DOWN,
        "enter": Command.TOGGLE_EXPAND,
        "space": Command.TOGGLE_EXPAND,
        "l": Command.EXPAND,
        "right": Command.EXPAND,
        "h": Command.COLLAPSE,
        "left": Command.COLLAPSE,
        "backspace": Command.COLLAPSE,
        "e": Command.EXPAND_ALL,
        "c": Command.COLLAPSE_ALL,
        "d": Command.HALF_PAGE_DOWN,
        "ctrl+d": Command.HALF_PAGE_DOWN,
        "u": Command.HALF_PAGE_UP,
        "ctrl+u": Command.HALF_PAGE_UP,
        "pagedown": Command.PAGE_DOWN,
        "pageup": Command.PAGE_UP,
        "g": Command.GO_TOP,
        "G": Command.GO_BOTTOM,
        "f": Command.OPEN_FILTER,
        "s": Command.OPEN_SORT,
        "/": Command.START_SEARCH,
        "slash": Command.START_SEARCH,
        "n": Command.NEXT_MATCH,
        "N": Command.PREV_MATCH,
        "a": Command.ARM_APPLY,
        "q": Command.QUIT,
        "ctrl+c": Command.QUIT,
        "escape": Command.ESCAPE,
    },
    Mode.FILTERING: {
        "up": Command.FILTER_UP,
        "k": Command.FILTER_UP,
        "down": Command.FILTER_DOWN,
        "j": Command.FILTER_DOWN,
        "space": Command.FILTER_TOGGLE,
        "a": Command.FILTER_ALL,
        "c": Command.FILTER_NONE,
        "enter": Command.FILTER_ACCEPT,
        "escape": Command.ESCAPE,
    },
    Mode.SORTING: {
        "up": Command.SORT_UP,
        "k": Command.SORT_UP,
        "down": Command.SORT_DOWN,
        "j": Command.SORT_DOWN,
        "enter": Command.SORT_ACCEPT,
        "space": Command.SORT_ACCEPT,
        "escape": Command.ESCAPE,
    },
    Mode.SEARCHING: {
        "enter": Command.SEARCH_SUBMIT,
        "backspace": Command.SEARCH_BACKSPACE,
        "escape": Command.ESCAPE,
    },
    Mode.CONFIRMING: {
        "a": Command.CONFIRM_APPLY,
        "y": Command.CONFIRM_APPLY,
        "escape": Command.ESCAPE,
    },
}


# [LAW:one-source-of-truth] Footer help per mode: (key, description) tuples.
FOOTER_KEYS: dict[Mode, list[tuple[str, str]]] = {
    Mode.NORMAL: [
        ("j/k", "navigate"),
        ("l/h", "expand/collapse"),
        ("e/c", "all"),
        ("d/u", "scroll"),
        ("gg/G", "top/bottom"),
        ("/", "search"),
        ("n/N", "match"),
        ("f", "filter"),
        ("s", "sort"),
        ("q", "quit"),
    ],
    Mode.SEARCHING: [
        ("enter", "search"),
        ("esc", "cancel"),
    ],
    Mode.FILTERING: [
        ("j/k", "navigate"),
        ("space", "toggle"),
        ("a", "select all"),
        ("c", "clear all"),
        ("enter", "apply"),
        ("esc", "clear all and close"),
    ],
    Mode.SORTING: [
        ("j/k", "navigate"),
        ("enter/space", "select"),
        ("esc", "close"),
    ],
    Mode.CONFIRMING: [
        ("y", "confirm apply"),
        ("any key", "cancel"),
    ],
}

APPLY_FOOTER_KEY: tuple[str, str] = ("a", "APPLY")
