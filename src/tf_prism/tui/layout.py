"""Frame composition: the scrollable resource body plus surrounding chrome.

    title
    summary
    (blank)
    status line          filter / sort / search / confirm prompt
    ┌──────────────┐
    │ viewport     │     body slice, or the filter / sort picker
    └──────────────┘
    (blank)
    help line            per-mode keys, plus the update notice

// [LAW:one-source-of-truth] render_body() is the only producer of line
//   geometry. The state machine's measure() is render_body()'s Layout.
// body_cache maps (resource index, theme, width, context) to expanded body
//   rows. The Viewer owns one per plan.
"""

from __future__ import annotations

from collections.abc import MutableMapping

from rich.text import Text

from tf_prism.core.diff_engine import DEFAULT_CONTEXT
from tf_prism.core.plan import Plan
from tf_prism.tui import embedded_content, rendering
from tf_prism.tui.input_modes import APPLY_FOOTER_KEY, FOOTER_KEYS, Mode
from tf_prism.tui.theme import Theme
from tf_prism.tui.viewer_state import (
    FILTERABLE_ACTIONS,
    SORT_OPTIONS,
    Layout,
    SortOrder,
    ViewerState,
    displayed_indices,
)

TITLE = "🔺 tf-prism - Terraform Plan Viewer"
END_OF_PLAN = "── End of Plan ──"
EMPTY_MESSAGE = "No resources match the current filters. Press 'f' to change filters."
NO_MATCHES_MESSAGE = "No resources match the search. Press Esc to clear it."
CONFIRM_PROMPT = "⚠️  Apply this plan? Press 'y' to confirm, any other key to cancel"

# Lines around the viewport: title, summary, blank, status / blank, help.
CHROME_LINES = 6

SORT_LABELS: dict[SortOrder, str] = {
    SortOrder.DEFAULT: "default (plan order)",
    SortOrder.ACTION: "by action",
    SortOrder.ADDRESS: "by address",
    SortOrder.TYPE: "by type",
}

SORT_HINTS: dict[SortOrder, str] = {
    SortOrder.DEFAULT: "as Terraform outputs them",
    SortOrder.ACTION: "group create, destroy, update, etc.",
    SortOrder.ADDRESS: "alphabetical by resource address",
    SortOrder.TYPE: "group by resource type (aws_instance, etc.)",
}

_SEP = " • "


def render_body(
    plan: Plan,
    state: ViewerState,
    theme: Theme,
    context: int = DEFAULT_CONTEXT,
    body_cache: MutableMapping | None = None,
) -> tuple[list[Text], Layout]:
    """All scrollable lines plus where each displayed resource starts."""
    displayed = displayed_indices(plan, state)
    if not displayed:
        message = NO_MATCHES_MESSAGE if state.search_query else EMPTY_MESSAGE
        lines = [Text(message, style=theme.muted)]
        return lines, Layout((), len(lines), len(lines))

    lines: list[Text] = []
    starts: list[int] = []
    for pos, idx in enumerate(displayed):
        resource = plan.resources[idx]
        expanded = idx in state.expanded
        starts.append(len(lines))
        lines.append(
            rendering.resource_row(
                resource,
                theme,
                expanded=expanded,
                selected=pos == state.cursor,
                query=state.search_query,
                width=state.viewport_width,
            )
        )
        if expanded and resource.body_lines:
            lines.extend(
                _expanded_rows(plan, idx, theme, state.viewport_width, context, body_cache)
            )
            lines.append(Text())

    content_lines = len(lines)
    lines.append(Text())
    lines.append(Text(END_OF_PLAN, style=theme.end_marker))
    # Room to scroll the last expanded block fully into view.
    lines.extend(Text() for _ in range(state.viewport_height))
    return lines, Layout(tuple(starts), content_lines, len(lines))


def _expanded_rows(
    plan: Plan,
    idx: int,
    theme: Theme,
    width: int,
    context: int,
    cache: MutableMapping | None,
) -> tuple[Text, ...]:
    key = (idx, theme, width, context)
    if cache is not None and key in cache:
        return cache[key]
    rows = embedded_content.render_expanded(plan.resources[idx], theme, width, context)
    if cache is not None:
        cache[key] = rows
    return rows


def summary_line(plan: Plan, theme: Theme) -> Text:
    if not plan.summary:
        return Text(f"  {len(plan.resources)} resources with changes", style=theme.text)
    text = Text("  ", style=theme.text)
    text.append(str(plan.total_add), style=theme.create)
    text.append(" to add, ")
    text.append(str(plan.total_change), style=theme.update)
    text.append(" to change, ")
    text.append(str(plan.total_destroy), style=theme.destroy)
    text.append(" to destroy")
    return text


def status_line(state: ViewerState, theme: Theme) -> Text:
    if state.confirming:
        return Text(
            f"  {CONFIRM_PROMPT}  ", style=f"bold {theme.confirm_fg} on {theme.confirm_bg}"
        )
    if state.mode is Mode.SEARCHING:
        text = Text("Search: ", style=theme.search_style)
        text.append(state.search_input, style=theme.text)
        text.append("█", style=theme.muted)
        return text

    parts: list[str] = []
    if state.status_filters:
        labels = [
            rendering.FILTER_LABELS[a] for a in FILTERABLE_ACTIONS if a in state.status_filters
        ]
        parts.append(f"Filter: {', '.join(labels)} ({len(labels)} active)")
    if state.sort_order is not SortOrder.DEFAULT:
        parts.append(f"Sort: {SORT_LABELS[state.sort_order]}")
    if state.search_query:
        count = len(state.search_matches)
        where = f"{state.cursor + 1}/{count}" if count else "0/0"
        parts.append(f'Search: "{state.search_query}" ({where} matches)')
    return Text(_SEP.join(parts), style=theme.search_style)


def help_line(state: ViewerState, theme: Theme, update_notice: str | None = None) -> Text:
    text = Text(style=theme.muted)
    keys = list(FOOTER_KEYS[state.mode])
    if state.mode is Mode.NORMAL and state.apply_mode:
        key, desc = APPLY_FOOTER_KEY
        text.append(f"{key}: {desc}", style=f"bold {theme.create}")
        text.append(_SEP)
    if state.mode is Mode.NORMAL and state.status_filters:
        keys.append(("esc", "clear filter"))
    text.append(_SEP.join(f"{key}: {desc}" for key, desc in keys))
    if update_notice:
        text.append(_SEP)
        text.append(update_notice, style=f"bold {theme.update}")
    return text


def filter_picker(state: ViewerState, theme: Theme) -> list[Text]:
    lines = [
        Text(
            "Filter by status (Space: toggle, a: all, c: clear, Enter: apply, Esc: clear all and close)",
            style=theme.search_style,
        ),
        Text(),
    ]
    for row, action in enumerate(FILTERABLE_ACTIONS):
        checked = "[x]" if action in state.status_filters else "[ ]"
        row_style = f"{theme.text} on {theme.selected_bg}" if row == state.filter_cursor else theme.text
        text = Text(f"  {checked} ", style=row_style)
        text.append(rendering.FILTER_LABELS[action], style=f"bold {theme.action_color(action)}")
        lines.append(text)
    return lines


def sort_picker(state: ViewerState, theme: Theme) -> list[Text]:
    lines = [Text("Sort by (Enter/Space: select, Esc: close)", style=theme.search_style), Text()]
    for row, order in enumerate(SORT_OPTIONS):
        marker = "● " if order is state.sort_order else "  "
        row_style = f"{theme.text} on {theme.selected_bg}" if row == state.sort_cursor else theme.text
        text = Text(f"{marker}{SORT_LABELS[order]} ", style=row_style)
        text.append(f"- {SORT_HINTS[order]}", style=theme.muted)
        lines.append(text)
    return lines


def viewport_lines(
    plan: Plan,
    state: ViewerState,
    theme: Theme,
    context: int = DEFAULT_CONTEXT,
    body_cache: MutableMapping | None = None,
) -> list[Text]:
    """Exactly viewport_height lines for the middle of the frame."""
    if state.mode is Mode.FILTERING:
        lines = filter_picker(state, theme)
    elif state.mode is Mode.SORTING:
        lines = sort_picker(state, theme)
    else:
        body, _ = render_body(plan, state, theme, context, body_cache)
        lines = body[state.y_offset : state.y_offset + state.viewport_height]
    lines = lines[: state.viewport_height]
    lines.extend(Text() for _ in range(state.viewport_height - len(lines)))
    return lines


def render_frame(
    plan: Plan,
    state: ViewerState,
    theme: Theme,
    context: int = DEFAULT_CONTEXT,
    update_notice: str | None = None,
    body_cache: MutableMapping | None = None,
) -> Text:
    lines = [
        Text(TITLE, style=f"bold {theme.header}"),
        summary_line(plan, theme),
        Text(),
        status_line(state, theme),
        *viewport_lines(plan, state, theme, context, body_cache),
        Text(),
        help_line(state, theme, update_notice),
    ]
    frame = Text("\n").join(lines)
    frame.no_wrap = True
    frame.overflow = "crop"
    return frame
