"""Viewer: binds a parsed plan, a theme and the state machine together.

The Textual app owns one Viewer and only forwards keys, sizes and the
update notice to it. Everything here is synchronous and terminal-free,
so tests drive it directly.

// [LAW:single-enforcer] The Viewer owns the expanded-body cache. It is
//   sized to the plan, so every expanded resource stays resident at two
//   widths, and it dies with the Viewer.
"""

from __future__ import annotations

import logging

from rich.text import Text
from textual.cache import LRUCache

from tf_prism.core.diff_engine import DEFAULT_CONTEXT
from tf_prism.core.plan import Plan
from tf_prism.tui import layout, viewer_state
from tf_prism.tui.theme import Theme
from tf_prism.tui.viewer_state import Effect, Layout, ViewContext, ViewerState

logger = logging.getLogger(__name__)


def _geometry_key(state: ViewerState) -> tuple:
    """State fields that change line geometry; cursor and offset do not."""
    return (
        state.status_filters,
        state.sort_order,
        state.search_query,
        state.search_matches,
        state.expanded,
        state.viewport_width,
        state.viewport_height,
    )


class Viewer:
    def __init__(
        self,
        plan: Plan,
        theme: Theme,
        *,
        apply_mode: bool = False,
        context_lines: int = DEFAULT_CONTEXT,
        width: int = 80,
        height: int = 24,
    ) -> None:
        self.plan = plan
        self.theme = theme
        self.context_lines = context_lines
        self.update_notice: str | None = None
        self._bodies: LRUCache = LRUCache(max(len(plan.resources), 1) * 2)
        self._last_geometry: tuple[tuple, Layout] | None = None
        self._ctx = ViewContext(plan=plan, measure=self._measure)
        self.state = ViewerState(apply_mode=apply_mode)
        self.resize(width, height)

    def _measure(self, state: ViewerState) -> Layout:
        key = _geometry_key(state)
        if self._last_geometry is not None and self._last_geometry[0] == key:
            return self._last_geometry[1]
        _, geometry = layout.render_body(
            self.plan, state, self.theme, self.context_lines, self._bodies
        )
        self._last_geometry = (key, geometry)
        return geometry

    @property
    def displayed(self) -> list[int]:
        return viewer_state.displayed_indices(self.plan, self.state)

    def handle_key(self, key: str, character: str | None = None) -> Effect:
        before = self.state.mode
        self.state, effect = viewer_state.dispatch(self.state, self._ctx, key, character)
        if self.state.mode is not before:
            logger.debug("mode %s -> %s on %r", before.name, self.state.mode.name, key)
        return effect

    def resize(self, width: int, height: int) -> None:
        """Resize to a terminal of width x height; chrome lines come off the top."""
        self.state = viewer_state.resize(
            self.state, self._ctx, width, height - layout.CHROME_LINES
        )

    def frame(self) -> Text:
        return layout.render_frame(
            self.plan,
            self.state,
            self.theme,
            self.context_lines,
            self.update_notice,
            body_cache=self._bodies,
        )
