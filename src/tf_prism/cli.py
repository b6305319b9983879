"""CLI entry point for tf-prism.

    terraform plan -no-color | tf-prism
    tf-prism plan.txt
    tf-prism --apply plan.txt      # exit 3 when the user confirms apply

Exit codes: 0 quit, 1 input unreadable, 2 usage error, 3 apply confirmed.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from tf_prism.core import plan_parser
from tf_prism.io import logging_setup, settings
from tf_prism.tui.app import PlanViewerApp, ViewerOutcome
from tf_prism.tui.protocols import HistorySource, VersionCheck
from tf_prism.tui.theme import select_theme

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE = 2
EXIT_APPLY = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tf-prism",
        description="Interactive Terraform/OpenTofu plan viewer",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="Plan output to view (default: read standard input)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Enable the apply confirmation (a, then y); exits 3 when confirmed",
    )
    parser.add_argument(
        "--context",
        type=int,
        default=None,
        metavar="N",
        help="Context lines around changes in decoded content diffs (default: 3)",
    )
    parser.add_argument(
        "--history-entry",
        default=None,
        metavar="ID",
        help="View a previously captured plan from the history source",
    )
    return parser


def _read_input(path: str) -> str:
    # Both sources decode the same way; stray bytes never stop the viewer.
    if path == "-":
        return sys.stdin.buffer.read().decode("utf-8", errors="replace")
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def _reattach_terminal() -> None:
    """Point fd 0 back at the controlling terminal after draining a pipe."""
    fd = os.open("/dev/tty", os.O_RDONLY)
    try:
        os.dup2(fd, 0)
    finally:
        os.close(fd)


def main(
    argv: list[str] | None = None,
    *,
    history_source: HistorySource | None = None,
    version_check: VersionCheck | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.history_entry is not None and history_source is None:
        parser.error("--history-entry is not available: no history source is configured")
    if args.context is not None and args.context < 0:
        parser.error("--context must be zero or more")
    if args.history_entry is None and args.file == "-" and sys.stdin.isatty():
        parser.print_help()
        return EXIT_OK

    runtime = logging_setup.configure()
    logger.debug("logging to %s at %s", runtime.file_path, runtime.level_name)

    try:
        if args.history_entry is not None:
            text = history_source.read(args.history_entry)
        else:
            text = _read_input(args.file)
    except OSError as exc:
        logger.error("cannot read plan input: %s", exc)
        return EXIT_INPUT_ERROR

    plan = plan_parser.parse(text)
    if not plan.resources:
        print("No resource changes detected in the plan.")
        return EXIT_OK

    if args.file == "-" and args.history_entry is None:
        try:
            _reattach_terminal()
        except OSError as exc:
            logger.error("no terminal available for the viewer: %s", exc)
            return EXIT_INPUT_ERROR

    theme = select_theme(settings.load_theme())
    context = args.context if args.context is not None else settings.load_context_lines()
    app = PlanViewerApp(
        plan,
        theme,
        apply_mode=args.apply,
        context_lines=context,
        version_check=version_check,
    )
    with logging_setup.console_suspended():
        outcome = app.run()

    if outcome is ViewerOutcome.APPLY:
        logger.info("apply confirmed for %d resources", len(plan.resources))
        return EXIT_APPLY
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
