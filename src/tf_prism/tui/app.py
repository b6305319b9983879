"""Textual shell around the Viewer.

// [LAW:single-enforcer] on_key is the sole key dispatcher. Textual
//   BINDINGS are not used; every key goes to Viewer.handle_key().
// [LAW:locality-or-seam] The app only forwards events and repaints; all
//   navigation, filtering and rendering decisions live in the Viewer.
"""

from __future__ import annotations

import logging
from enum import Enum

from textual.app import App, ComposeResult
from textual.message import Message
from textual.widgets import Static

from tf_prism.core.diff_engine import DEFAULT_CONTEXT
from tf_prism.core.plan import Plan
from tf_prism.tui.protocols import VersionCheck
from tf_prism.tui.theme import Theme
from tf_prism.tui.viewer import Viewer
from tf_prism.tui.viewer_state import Effect

logger = logging.getLogger(__name__)


class ViewerOutcome(Enum):
    QUIT = "quit"
    APPLY = "apply"


class UpdateAvailable(Message):
    """Posted from the version-check worker thread when a newer release exists."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__()


class PlanView(Static):
    """The whole frame. Content is replaced wholesale on every repaint."""

    DEFAULT_CSS = """
    PlanView {
        width: 100%;
        height: 100%;
    }
    """


class PlanViewerApp(App[ViewerOutcome]):
    """Full-screen interactive plan viewer."""

    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        plan: Plan,
        theme: Theme,
        *,
        apply_mode: bool = False,
        context_lines: int = DEFAULT_CONTEXT,
        version_check: VersionCheck | None = None,
    ) -> None:
        super().__init__()
        self._viewer = Viewer(plan, theme, apply_mode=apply_mode, context_lines=context_lines)
        self._version_check = version_check

    @property
    def viewer(self) -> Viewer:
        return self._viewer

    def compose(self) -> ComposeResult:
        yield PlanView(id="plan-view")

    def on_mount(self) -> None:
        self._viewer.resize(self.size.width, self.size.height)
        self._repaint()
        if self._version_check is not None:
            self.run_worker(self._check_version, thread=True, exclusive=False)

    def _repaint(self) -> None:
        self.query_one(PlanView).update(self._viewer.frame())

    def _check_version(self) -> None:
        """Worker thread: never touches the UI, only posts a message."""
        try:
            latest = self._version_check()
        except Exception:
            logger.warning("version check failed", exc_info=True)
            return
        if latest:
            # post_message returns False once the app has closed; the result is dropped.
            if not self.post_message(UpdateAvailable(latest)):
                logger.debug("update notice for %s arrived after exit", latest)

    def on_update_available(self, message: UpdateAvailable) -> None:
        self._viewer.update_notice = f"update available: {message.version}"
        self._repaint()

    def on_resize(self, event) -> None:
        self._viewer.resize(event.size.width, event.size.height)
        self._repaint()

    async def on_key(self, event) -> None:
        event.prevent_default()
        event.stop()
        effect = self._viewer.handle_key(event.key, event.character)
        if effect is Effect.QUIT:
            self.exit(ViewerOutcome.QUIT)
        elif effect is Effect.APPLY:
            logger.info("apply confirmed")
            self.exit(ViewerOutcome.APPLY)
        else:
            self._repaint()
