"""Rich rendering of plan lines and resource rows.

Every function takes the Theme explicitly and returns rich Text. Lines are
returned one Text per terminal row so the layout can count them; nothing in
here relies on the console to wrap.

HCL colouring is driven by the line's own +/-/~ prefix rather than the
resource action, so a "+" line inside an update block is still green.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from tf_prism.core.plan import Action, Resource
from tf_prism.tui import search
from tf_prism.tui.theme import Theme

# ─── Labels ──────────────────────────────────────────────────────────────────
# [LAW:one-source-of-truth] Per-action glyphs and wording.

ACTION_SYMBOLS: dict[Action, str] = {
    Action.CREATE: "+",
    Action.DESTROY: "-",
    Action.UPDATE: "~",
    Action.REPLACE: "±",
    Action.DELETE_CREATE: "±",
    Action.CREATE_DELETE: "±",
    Action.READ: "≤",
}

ACTION_DESCRIPTIONS: dict[Action, str] = {
    Action.CREATE: "will be created",
    Action.DESTROY: "will be destroyed",
    Action.UPDATE: "will be updated",
    Action.REPLACE: "must be replaced",
    Action.READ: "will be read",
    Action.DELETE_CREATE: "will be destroyed and then created",
    Action.CREATE_DELETE: "will be created and then destroyed",
}

FILTER_LABELS: dict[Action, str] = {
    Action.CREATE: "create",
    Action.DESTROY: "destroy",
    Action.UPDATE: "update",
    Action.REPLACE: "replace",
    Action.READ: "read",
    Action.DELETE_CREATE: "destroy+create",
    Action.CREATE_DELETE: "create+destroy",
}

EXPANDED_INDICATOR = "▼"
COLLAPSED_INDICATOR = "▶"

# Minimum room for wrapped HCL content before wrapping is skipped.
MIN_WRAP_WIDTH = 20

_LINE_PREFIXES: tuple[tuple[str, Action], ...] = (
    ("+ ", Action.CREATE),
    ("- ", Action.DESTROY),
    ("~ ", Action.UPDATE),
)

_STRUCTURAL = frozenset({"", "{", "}", "[", "]"})

_WRAP_CONSOLE = Console(width=512, color_system=None, legacy_windows=False)


def action_symbol(action: Action) -> str:
    return ACTION_SYMBOLS.get(action, "~")


def action_description(action: Action) -> str:
    return ACTION_DESCRIPTIONS.get(action, "")


# ─── Text helpers ────────────────────────────────────────────────────────────


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap text to width; narrow widths leave it untouched."""
    if width <= 10 or len(text) <= width:
        return [text]
    lines = Text(text).wrap(_WRAP_CONSOLE, width)
    return [line.plain.rstrip() for line in lines] or [""]


def split_indent(line: str) -> tuple[str, str]:
    trimmed = line.lstrip(" \t")
    return line[: len(line) - len(trimmed)], trimmed


def split_prefix(trimmed: str) -> tuple[str, str, Action | None]:
    """(raw_prefix, content, line_action) for an indent-stripped line."""
    for prefix, action in _LINE_PREFIXES:
        if trimmed.startswith(prefix):
            return prefix, trimmed[len(prefix):], action
    return "", trimmed, None


# ─── HCL colouring ───────────────────────────────────────────────────────────


def colorize_value(value: str, action: Action, theme: Theme) -> Text:
    value = value.strip()
    if "(known after apply)" in value:
        return Text(value, style=f"italic {theme.computed}")
    if "(sensitive" in value:
        return Text(value, style=f"italic {theme.replace}")
    if " -> " in value:
        old, new = value.split(" -> ", 1)
        text = Text()
        text.append(old.strip(), style=f"strike {theme.destroy}")
        text.append(" → ")
        text.append(new.strip(), style=theme.create)
        return text
    if value == "null":
        return Text(value, style=theme.destroy)
    if value in ("true", "false"):
        return Text(value, style=theme.read)
    if value.endswith("{") or value.endswith("["):
        return Text(value, style=theme.muted)
    if action is Action.CREATE:
        return Text(value, style=theme.create)
    if action is Action.DESTROY:
        return Text(value, style=f"strike {theme.destroy}")
    return Text(value, style=theme.text)


def colorize_content(content: str, action: Action, theme: Theme) -> Text:
    if content in _STRUCTURAL:
        return Text(content, style=theme.muted)
    idx = content.find(" = ")
    if idx > 0:
        text = Text(content[:idx], style=theme.text)
        text.append(" = ")
        text.append_text(colorize_value(content[idx + 3:], action, theme))
        return text
    if content.endswith(" {"):
        text = Text(content[:-2], style=theme.header)
        text.append(" {")
        return text
    if content.startswith("resource ") or content.startswith("data "):
        return Text(content, style=f"bold {theme.replace}")
    return Text(content, style=theme.text)


def colorize_hcl_line(line: str, action: Action, theme: Theme) -> Text:
    indent, trimmed = split_indent(line)
    prefix, content, line_action = split_prefix(trimmed)
    text = Text(indent)
    if line_action is None:
        line_action = action
    else:
        text.append(prefix[0], style=theme.action_color(line_action))
        text.append(" ")
    text.append_text(colorize_content(content, line_action, theme))
    return text


def wrap_and_colorize(line: str, action: Action, theme: Theme, width: int) -> list[Text]:
    """Colour one raw HCL line, wrapping long content under its own column."""
    if width <= 0:
        return [colorize_hcl_line(line, action, theme)]
    indent, trimmed = split_indent(line)
    prefix, content, line_action = split_prefix(trimmed)
    available = width - len(indent) - len(prefix)
    if available < MIN_WRAP_WIDTH or len(content) <= available:
        return [colorize_hcl_line(line, action, theme)]

    pieces = wrap_text(content, available)
    if len(pieces) <= 1:
        return [colorize_hcl_line(line, action, theme)]

    continuation = indent + " " * len(prefix)
    content_action = line_action or action
    out = [colorize_hcl_line(indent + prefix + pieces[0], action, theme)]
    for piece in pieces[1:]:
        text = Text(continuation)
        text.append_text(colorize_content(piece.strip(), content_action, theme))
        out.append(text)
    return out


# ─── Resource rows ───────────────────────────────────────────────────────────


def _row_suffix(resource: Resource) -> str:
    suffix = f" {action_description(resource.action)}"
    body = len(resource.raw_lines) - 1
    if body > 0:
        suffix += f" ({body} lines)"
    return suffix


def resource_row(
    resource: Resource,
    theme: Theme,
    *,
    expanded: bool,
    selected: bool,
    query: str = "",
    width: int = 0,
) -> Text:
    """One collapsed/expanded resource header row.

    The selected row is drawn in the action colour on the selection
    background and padded to the full width.
    """
    color = theme.action_color(resource.action)
    indicator = EXPANDED_INDICATOR if expanded else COLLAPSED_INDICATOR
    symbol = action_symbol(resource.action)

    if selected:
        plain = f"{indicator} {symbol} {resource.address}{_row_suffix(resource)}"
        text = Text(plain.ljust(width) if width > 0 else plain, style=f"bold {color} on {theme.selected_bg}")
    else:
        text = Text(indicator, style=theme.muted)
        text.append(" ")
        text.append(symbol, style=color)
        text.append(" ")
        text.append(resource.address, style=f"bold {color}")
        text.append(_row_suffix(resource), style=theme.muted)

    if query:
        offset = len(indicator) + len(symbol) + 2
        for start, end in search.highlight_spans(resource.address, query):
            text.stylize(theme.match_style, offset + start, offset + end)
    return text
