"""Protocols for the collaborators the viewer accepts from outside.

Neither has a shipped implementation; the CLI wires them when given one.
"""

from typing import Protocol


class HistorySource(Protocol):
    """A store of previously captured plan reports."""

    def read(self, entry_id: str) -> str:
        """Return the raw report text for entry_id.

        Raises:
            OSError: the entry cannot be read.
        """
        ...


class VersionCheck(Protocol):
    """Looks up a newer release. Called once, off the UI thread."""

    def __call__(self) -> str | None:
        """Return the newer version string, or None when up to date."""
        ...
