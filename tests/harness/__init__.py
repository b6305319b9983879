"""Test harness for tf-prism.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, frame_text, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    search_for,
    resize_and_settle,
)
from tests.harness.content import frame_text, text_lines
from tests.harness.builders import (
    make_plan,
    make_resource,
    mixed_plan,
    plan_text,
    resource_block,
)

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "search_for",
    "resize_and_settle",
    "frame_text",
    "text_lines",
    "make_plan",
    "make_resource",
    "mixed_plan",
    "plan_text",
    "resource_block",
]
