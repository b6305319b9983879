"""Viewer state machine: pure transitions over an immutable ViewerState.

dispatch(state, ctx, key, character) -> (state, Effect)

  key ──MODE_KEYMAP[mode]──▶ Command ──TRANSITIONS[command]──▶ (state, Effect)

// [LAW:one-source-of-truth] The displayed list is derived, never stored:
//   displayed = sort(filter(all)), narrowed to search matches when a query
//   is committed. It is recomputed on every transition.
// [LAW:single-enforcer] _normalize() is the sole place that re-resolves
//   search matches and clamps the cursor; dispatch() clamps the offset.

Nothing here touches the terminal. Line geometry comes from ctx.measure,
which the renderer supplies (tests supply a trivial one).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from tf_prism.core.plan import Action, Plan
from tf_prism.tui import search
from tf_prism.tui.input_modes import MODE_KEYMAP, Command, Mode


class SortOrder(Enum):
    DEFAULT = "default"
    ACTION = "action"
    ADDRESS = "address"
    TYPE = "type"


class Effect(Enum):
    NONE = "none"
    QUIT = "quit"
    APPLY = "apply"


SORT_OPTIONS: tuple[SortOrder, ...] = (
    SortOrder.DEFAULT,
    SortOrder.ACTION,
    SortOrder.ADDRESS,
    SortOrder.TYPE,
)

FILTERABLE_ACTIONS: tuple[Action, ...] = (
    Action.CREATE,
    Action.DESTROY,
    Action.UPDATE,
    Action.REPLACE,
    Action.READ,
    Action.DELETE_CREATE,
    Action.CREATE_DELETE,
)

# Least to most severe; destructive changes sort last, no-ops after them.
ACTION_RANK: dict[Action, int] = {
    Action.CREATE: 0,
    Action.READ: 1,
    Action.UPDATE: 2,
    Action.REPLACE: 3,
    Action.DELETE_CREATE: 4,
    Action.CREATE_DELETE: 5,
    Action.DESTROY: 6,
    Action.NO_OP: 7,
}


@dataclass(frozen=True)
class Layout:
    """Line geometry of the rendered resource list.

    line_starts[i] is the first line of displayed resource i.
    content_line_count counts resource lines only; total_lines includes the
    trailer and padding below the last resource.
    """

    line_starts: tuple[int, ...] = ()
    content_line_count: int = 0
    total_lines: int = 0


@dataclass(frozen=True)
class ViewerState:
    mode: Mode = Mode.NORMAL
    cursor: int = 0
    expanded: frozenset[int] = frozenset()
    status_filters: frozenset[Action] = frozenset()
    filter_cursor: int = 0
    sort_order: SortOrder = SortOrder.DEFAULT
    sort_cursor: int = 0
    search_input: str = ""
    search_query: str = ""
    search_matches: tuple[int, ...] = ()
    y_offset: int = 0
    viewport_height: int = 20
    viewport_width: int = 80
    pending_g: bool = False
    apply_mode: bool = False

    @property
    def confirming(self) -> bool:
        return self.mode is Mode.CONFIRMING


@dataclass(frozen=True)
class ViewContext:
    plan: Plan
    measure: Callable[[ViewerState], Layout]


Transition = Callable[[ViewerState, ViewContext], tuple[ViewerState, Effect]]


# ─── Displayed set ───────────────────────────────────────────────────────────


def filtered_indices(plan: Plan, state: ViewerState) -> list[int]:
    """Resource indices passing the status filter; no filter shows all."""
    if not state.status_filters:
        return list(range(len(plan.resources)))
    return [i for i, r in enumerate(plan.resources) if r.action in state.status_filters]


def _sort_key(plan: Plan, order: SortOrder) -> Callable[[int], tuple] | None:
    resources = plan.resources
    if order is SortOrder.ACTION:
        return lambda i: (ACTION_RANK.get(resources[i].action, 99), resources[i].address)
    if order is SortOrder.ADDRESS:
        return lambda i: (resources[i].address,)
    if order is SortOrder.TYPE:
        return lambda i: (resources[i].type, resources[i].address)
    return None


def base_indices(plan: Plan, state: ViewerState) -> list[int]:
    """Filtered then sorted resource indices (before search narrowing)."""
    indices = filtered_indices(plan, state)
    key = _sort_key(plan, state.sort_order)
    if key is not None:
        indices.sort(key=key)
    return indices


def resolve_matches(plan: Plan, state: ViewerState) -> tuple[int, ...]:
    if not state.search_query:
        return ()
    return search.find_matches(plan.resources, base_indices(plan, state), state.search_query)


def displayed_indices(plan: Plan, state: ViewerState) -> list[int]:
    base = base_indices(plan, state)
    if not state.search_query:
        return base
    return [base[pos] for pos in state.search_matches if pos < len(base)]


def _normalize(state: ViewerState, ctx: ViewContext) -> ViewerState:
    matches = resolve_matches(ctx.plan, state)
    state = replace(state, search_matches=matches)
    count = len(displayed_indices(ctx.plan, state))
    cursor = min(max(state.cursor, 0), max(count - 1, 0))
    return replace(state, cursor=cursor)


# ─── Scrolling ───────────────────────────────────────────────────────────────


def _max_offset(state: ViewerState, layout: Layout) -> int:
    return max(0, layout.total_lines - state.viewport_height)


def _with_offset(state: ViewerState, layout: Layout, offset: int) -> ViewerState:
    return replace(state, y_offset=min(max(offset, 0), _max_offset(state, layout)))


def ensure_cursor_visible(state: ViewerState, layout: Layout) -> ViewerState:
    """Nudge the offset only when the cursor line is outside the window."""
    if not 0 <= state.cursor < len(layout.line_starts):
        return state
    line = layout.line_starts[state.cursor]
    top = state.y_offset
    bottom = top + state.viewport_height - 1
    if line < top:
        return _with_offset(state, layout, line)
    if line > bottom:
        return _with_offset(state, layout, line - state.viewport_height + 1)
    return state


def scroll_for_expanded(state: ViewerState, ctx: ViewContext, layout: Layout) -> ViewerState:
    """Keep an expanded block visible; jump to its start when its end overflows."""
    if not 0 <= state.cursor < len(layout.line_starts):
        return state
    displayed = displayed_indices(ctx.plan, state)
    if state.cursor < len(displayed) and displayed[state.cursor] in state.expanded:
        if state.cursor + 1 < len(layout.line_starts):
            end_line = layout.line_starts[state.cursor + 1]
        else:
            end_line = layout.content_line_count
        bottom = state.y_offset + state.viewport_height - 1
        if end_line > bottom:
            return _with_offset(state, layout, layout.line_starts[state.cursor])
    return ensure_cursor_visible(state, layout)


def _moved(state: ViewerState, ctx: ViewContext) -> ViewerState:
    state = _normalize(state, ctx)
    return ensure_cursor_visible(state, ctx.measure(state))


def _expanded_moved(state: ViewerState, ctx: ViewContext) -> ViewerState:
    state = _normalize(state, ctx)
    return scroll_for_expanded(state, ctx, ctx.measure(state))


def _scrolled_by(state: ViewerState, ctx: ViewContext, delta: int) -> ViewerState:
    return _with_offset(state, ctx.measure(state), state.y_offset + delta)


def _current_resource(state: ViewerState, ctx: ViewContext) -> int | None:
    displayed = displayed_indices(ctx.plan, state)
    if 0 <= state.cursor < len(displayed):
        return displayed[state.cursor]
    return None


# ─── Normal mode ─────────────────────────────────────────────────────────────

_NONE = Effect.NONE


def _move_up(state, ctx):
    if state.cursor > 0:
        return _moved(replace(state, cursor=state.cursor - 1), ctx), _NONE
    return _scrolled_by(state, ctx, -1), _NONE


def _move_down(state, ctx):
    if state.cursor < len(displayed_indices(ctx.plan, state)) - 1:
        return _moved(replace(state, cursor=state.cursor + 1), ctx), _NONE
    return _scrolled_by(state, ctx, 1), _NONE


def _toggle_expand(state, ctx):
    idx = _current_resource(state, ctx)
    if idx is not None:
        state = replace(state, expanded=state.expanded ^ {idx})
    return _expanded_moved(state, ctx), _NONE


def _expand(state, ctx):
    idx = _current_resource(state, ctx)
    if idx is not None:
        state = replace(state, expanded=state.expanded | {idx})
    return _expanded_moved(state, ctx), _NONE


def _collapse(state, ctx):
    idx = _current_resource(state, ctx)
    if idx is not None:
        state = replace(state, expanded=state.expanded - {idx})
    return _moved(state, ctx), _NONE


def _expand_all(state, ctx):
    displayed = displayed_indices(ctx.plan, state)
    return _moved(replace(state, expanded=state.expanded | set(displayed)), ctx), _NONE


def _collapse_all(state, ctx):
    displayed = displayed_indices(ctx.plan, state)
    return _moved(replace(state, expanded=state.expanded - set(displayed)), ctx), _NONE


def _half_page_down(state, ctx):
    return _scrolled_by(state, ctx, state.viewport_height // 2), _NONE


def _half_page_up(state, ctx):
    return _scrolled_by(state, ctx, -(state.viewport_height // 2)), _NONE


def _page_down(state, ctx):
    return _scrolled_by(state, ctx, state.viewport_height), _NONE


def _page_up(state, ctx):
    return _scrolled_by(state, ctx, -state.viewport_height), _NONE


def _go_top(state, ctx):
    if not state.pending_g:
        return replace(state, pending_g=True), _NONE
    return replace(state, cursor=0, y_offset=0, pending_g=False), _NONE


def _go_bottom(state, ctx):
    last = len(displayed_indices(ctx.plan, state)) - 1
    return _moved(replace(state, cursor=max(last, 0)), ctx), _NONE


def _open_filter(state, ctx):
    return replace(state, mode=Mode.FILTERING, filter_cursor=0), _NONE


def _open_sort(state, ctx):
    return replace(state, mode=Mode.SORTING, sort_cursor=SORT_OPTIONS.index(state.sort_order)), _NONE


def _start_search(state, ctx):
    return replace(state, mode=Mode.SEARCHING, search_input=""), _NONE


def _step_match(state, ctx, step: int):
    count = len(displayed_indices(ctx.plan, state))
    if not state.search_query or count == 0:
        return state, _NONE
    return _moved(replace(state, cursor=(state.cursor + step) % count), ctx), _NONE


def _next_match(state, ctx):
    return _step_match(state, ctx, 1)


def _prev_match(state, ctx):
    return _step_match(state, ctx, -1)


def _arm_apply(state, ctx):
    if not state.apply_mode:
        return state, _NONE
    return replace(state, mode=Mode.CONFIRMING), _NONE


def _quit(state, ctx):
    return state, Effect.QUIT


# ─── Escape ──────────────────────────────────────────────────────────────────


def _clear_search(state: ViewerState) -> ViewerState:
    return replace(state, search_input="", search_query="", search_matches=())


def _escape(state, ctx):
    """Return to NORMAL, clearing whatever the active mode was holding."""
    if state.mode is Mode.FILTERING:
        state = replace(state, status_filters=frozenset())
    elif state.mode is Mode.SEARCHING:
        state = _clear_search(state)
    elif state.mode is Mode.NORMAL:
        if state.status_filters:
            state = replace(state, status_filters=frozenset())
        else:
            state = _clear_search(state)
    return _moved(replace(state, mode=Mode.NORMAL), ctx), _NONE


# ─── Filter picker ───────────────────────────────────────────────────────────


def _filter_up(state, ctx):
    return replace(state, filter_cursor=max(state.filter_cursor - 1, 0)), _NONE


def _filter_down(state, ctx):
    last = len(FILTERABLE_ACTIONS) - 1
    return replace(state, filter_cursor=min(state.filter_cursor + 1, last)), _NONE


def _filter_toggle(state, ctx):
    action = FILTERABLE_ACTIONS[state.filter_cursor]
    return replace(state, status_filters=state.status_filters ^ {action}), _NONE


def _filter_all(state, ctx):
    return replace(state, status_filters=frozenset(FILTERABLE_ACTIONS)), _NONE


def _filter_none(state, ctx):
    return replace(state, status_filters=frozenset()), _NONE


def _filter_accept(state, ctx):
    return _moved(replace(state, mode=Mode.NORMAL), ctx), _NONE


# ─── Sort picker ─────────────────────────────────────────────────────────────


def _sort_up(state, ctx):
    return replace(state, sort_cursor=max(state.sort_cursor - 1, 0)), _NONE


def _sort_down(state, ctx):
    return replace(state, sort_cursor=min(state.sort_cursor + 1, len(SORT_OPTIONS) - 1)), _NONE


def _sort_accept(state, ctx):
    order = SORT_OPTIONS[state.sort_cursor]
    return _moved(replace(state, sort_order=order, mode=Mode.NORMAL), ctx), _NONE


# ─── Search input ────────────────────────────────────────────────────────────


def _search_submit(state, ctx):
    query = state.search_input.strip()
    state = replace(state, mode=Mode.NORMAL, search_query=query, cursor=0, y_offset=0)
    return _moved(state, ctx), _NONE


def _search_backspace(state, ctx):
    return replace(state, search_input=state.search_input[:-1]), _NONE


def insert_search_text(state: ViewerState, text: str) -> ViewerState:
    return replace(state, search_input=state.search_input + text)


# ─── Confirmation ────────────────────────────────────────────────────────────


def _confirm_apply(state, ctx):
    return replace(state, mode=Mode.NORMAL), Effect.APPLY


def _disarm(state, ctx):
    return replace(state, mode=Mode.NORMAL), _NONE


# [LAW:one-source-of-truth] Command → transition.
TRANSITIONS: dict[Command, Transition] = {
    Command.MOVE_UP: _move_up,
    Command.MOVE_DOWN: _move_down,
    Command.TOGGLE_EXPAND: _toggle_expand,
    Command.EXPAND: _expand,
    Command.COLLAPSE: _collapse,
    Command.EXPAND_ALL: _expand_all,
    Command.COLLAPSE_ALL: _collapse_all,
    Command.HALF_PAGE_DOWN: _half_page_down,
    Command.HALF_PAGE_UP: _half_page_up,
    Command.PAGE_DOWN: _page_down,
    Command.PAGE_UP: _page_up,
    Command.GO_TOP: _go_top,
    Command.GO_BOTTOM: _go_bottom,
    Command.OPEN_FILTER: _open_filter,
    Command.OPEN_SORT: _open_sort,
    Command.START_SEARCH: _start_search,
    Command.NEXT_MATCH: _next_match,
    Command.PREV_MATCH: _prev_match,
    Command.ARM_APPLY: _arm_apply,
    Command.QUIT: _quit,
    Command.ESCAPE: _escape,
    Command.FILTER_UP: _filter_up,
    Command.FILTER_DOWN: _filter_down,
    Command.FILTER_TOGGLE: _filter_toggle,
    Command.FILTER_ALL: _filter_all,
    Command.FILTER_NONE: _filter_none,
    Command.FILTER_ACCEPT: _filter_accept,
    Command.SORT_UP: _sort_up,
    Command.SORT_DOWN: _sort_down,
    Command.SORT_ACCEPT: _sort_accept,
    Command.SEARCH_SUBMIT: _search_submit,
    Command.SEARCH_BACKSPACE: _search_backspace,
    Command.CONFIRM_APPLY: _confirm_apply,
    Command.DISARM: _disarm,
}


def resolve_command(mode: Mode, key: str, character: str | None = None) -> Command | None:
    command = MODE_KEYMAP[mode].get(key)
    if command is None and character is not None:
        command = MODE_KEYMAP[mode].get(character)
    if command is None and mode is Mode.CONFIRMING:
        return Command.DISARM
    return command


def _is_text(character: str | None) -> bool:
    return character is not None and len(character) == 1 and character.isprintable()


def dispatch(
    state: ViewerState, ctx: ViewContext, key: str, character: str | None = None
) -> tuple[ViewerState, Effect]:
    """Route one key event through the active mode's handler."""
    command = resolve_command(state.mode, key, character)

    # Any key other than the first-key of a sequence cancels the sequence.
    if command is not Command.GO_TOP and state.pending_g:
        state = replace(state, pending_g=False)

    if command is None:
        if state.mode is Mode.SEARCHING and _is_text(character):
            return insert_search_text(state, character), Effect.NONE
        return state, Effect.NONE

    state, effect = TRANSITIONS[command](state, ctx)
    state = _normalize(state, ctx)
    state = _with_offset(state, ctx.measure(state), state.y_offset)
    return state, effect


def resize(state: ViewerState, ctx: ViewContext, width: int, height: int) -> ViewerState:
    state = replace(state, viewport_width=max(width, 1), viewport_height=max(height, 1))
    state = _normalize(state, ctx)
    return ensure_cursor_visible(
        _with_offset(state, ctx.measure(state), state.y_offset), ctx.measure(state)
    )
