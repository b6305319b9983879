"""Tests for frame composition (tf_prism.tui.layout) and the Viewer facade."""

from dataclasses import replace

from tf_prism.core.plan import Action, Plan
from tf_prism.tui import layout
from tf_prism.tui.input_modes import Mode
from tf_prism.tui.theme import DARK
from tf_prism.tui.viewer import Viewer
from tf_prism.tui.viewer_state import Effect, Layout, SortOrder, ViewerState

from tests.harness import make_resource, mixed_plan, text_lines


def _state(**kwargs):
    return replace(ViewerState(viewport_height=5, viewport_width=80), **kwargs)


# ─── Body geometry ───────────────────────────────────────────────────────────


def test_collapsed_body_geometry():
    lines, geometry = layout.render_body(mixed_plan(), _state(), DARK)

    assert geometry == Layout((0, 1, 2, 3, 4, 5), 6, 13)
    assert len(lines) == geometry.total_lines
    plain = text_lines(lines)
    assert plain[6] == ""
    assert plain[7] == layout.END_OF_PLAN
    assert plain[8:] == [""] * 5


def test_expanded_body_adds_rendered_lines_and_a_gap():
    lines, geometry = layout.render_body(mixed_plan(), _state(expanded=frozenset({1, 4})), DARK)

    # Resource 4 has no body, so expanding it adds nothing.
    assert geometry.line_starts == (0, 1, 4, 5, 6, 7)
    assert geometry.content_line_count == 8
    plain = text_lines(lines)
    assert plain[1].startswith("▼ ~ aws_instance.web")
    assert plain[2] == '  ~ ami = "a" → "b"'
    assert plain[3] == ""


def test_empty_selection_shows_message():
    lines, geometry = layout.render_body(
        mixed_plan(), _state(status_filters=frozenset({Action.READ})), DARK
    )
    assert text_lines(lines) == [layout.EMPTY_MESSAGE]
    assert geometry == Layout((), 1, 1)


def test_search_without_matches_shows_search_message():
    lines, geometry = layout.render_body(mixed_plan(), _state(search_query="zzz"), DARK)
    assert text_lines(lines) == [layout.NO_MATCHES_MESSAGE]
    assert geometry == Layout((), 1, 1)


def test_only_the_cursor_row_is_selected():
    lines, _ = layout.render_body(mixed_plan(), _state(cursor=2), DARK)
    assert len(lines[2].plain) == 80
    assert len(lines[1].plain) < 80


# ─── Chrome ──────────────────────────────────────────────────────────────────


def test_summary_line_with_and_without_totals():
    assert layout.summary_line(mixed_plan(), DARK).plain == "  6 resources with changes"
    plan = Plan(
        resources=(make_resource("aws_instance.web"),),
        summary="Plan: 2 to add, 1 to change, 0 to destroy.",
        total_add=2,
        total_change=1,
    )
    assert layout.summary_line(plan, DARK).plain == "  2 to add, 1 to change, 0 to destroy"


def test_status_line_parts():
    assert layout.status_line(_state(), DARK).plain == ""

    state = _state(
        status_filters=frozenset({Action.UPDATE, Action.CREATE}),
        sort_order=SortOrder.ADDRESS,
        search_query="web",
        search_matches=(0,),
    )
    assert layout.status_line(state, DARK).plain == (
        'Filter: create, update (2 active) • Sort: by address • Search: "web" (1/1 matches)'
    )


def test_status_line_without_matches():
    state = _state(search_query="zzz")
    assert layout.status_line(state, DARK).plain == 'Search: "zzz" (0/0 matches)'


def test_status_line_while_typing_and_confirming():
    typing = _state(mode=Mode.SEARCHING, search_input="ab")
    assert layout.status_line(typing, DARK).plain == "Search: ab█"

    confirming = _state(mode=Mode.CONFIRMING, apply_mode=True)
    assert layout.CONFIRM_PROMPT in layout.status_line(confirming, DARK).plain


def test_help_line_per_mode():
    assert layout.help_line(_state(), DARK).plain.startswith("j/k: navigate • ")
    assert layout.help_line(_state(apply_mode=True), DARK).plain.startswith(
        "a: APPLY • j/k: navigate"
    )
    filtered = _state(status_filters=frozenset({Action.CREATE}))
    assert layout.help_line(filtered, DARK).plain.endswith("q: quit • esc: clear filter")

    confirming = _state(mode=Mode.CONFIRMING, apply_mode=True)
    assert layout.help_line(confirming, DARK).plain == "y: confirm apply • any key: cancel"


def test_help_line_appends_update_notice():
    text = layout.help_line(_state(), DARK, "update available: 1.2.3")
    assert text.plain.endswith(" • update available: 1.2.3")


# ─── Pickers and viewport ────────────────────────────────────────────────────


def test_filter_picker_rows():
    state = _state(mode=Mode.FILTERING, status_filters=frozenset({Action.CREATE}))
    rows = text_lines(layout.filter_picker(state, DARK))
    assert len(rows) == 9
    assert rows[2] == "  [x] create"
    assert rows[3] == "  [ ] destroy"
    assert rows[7] == "  [ ] destroy+create"


def test_sort_picker_marks_current_order():
    rows = text_lines(layout.sort_picker(_state(sort_order=SortOrder.TYPE), DARK))
    assert rows[2] == "  default (plan order) - as Terraform outputs them"
    assert rows[5].startswith("● by type ")


def test_viewport_is_always_exactly_its_height():
    for state in (
        _state(),
        _state(mode=Mode.FILTERING),
        _state(mode=Mode.SORTING, viewport_height=30),
        _state(status_filters=frozenset({Action.READ})),
    ):
        assert len(layout.viewport_lines(mixed_plan(), state, DARK)) == state.viewport_height


def test_viewport_slices_body_at_offset():
    rows = text_lines(layout.viewport_lines(mixed_plan(), _state(y_offset=2, viewport_height=3), DARK))
    assert [row.split()[2] for row in rows] == [
        "aws_lambda_function.example",
        "aws_iam_role.old",
        "aws_instance.api",
    ]


# ─── Viewer facade ───────────────────────────────────────────────────────────


def test_frame_has_chrome_around_viewport():
    viewer = Viewer(mixed_plan(), DARK, width=80, height=20)
    assert viewer.state.viewport_height == 20 - layout.CHROME_LINES

    rows = viewer.frame().plain.split("\n")
    assert len(rows) == 20
    assert rows[0] == layout.TITLE
    assert rows[1] == "  6 resources with changes"
    assert rows[4].startswith("▶ + aws_s3_bucket.logs")
    assert rows[-1].startswith("j/k: navigate")


def test_viewer_forwards_keys():
    viewer = Viewer(mixed_plan(), DARK, width=100, height=30)
    assert viewer.state.viewport_height == 24

    assert viewer.handle_key("j", "j") is Effect.NONE
    assert viewer.state.cursor == 1
    assert viewer.displayed == [0, 1, 2, 3, 4, 5]
    assert viewer.handle_key("q", "q") is Effect.QUIT


def test_viewer_update_notice_reaches_help_line():
    viewer = Viewer(mixed_plan(), DARK)
    viewer.update_notice = "update available: 2.0.0"
    assert viewer.frame().plain.endswith("update available: 2.0.0")


def test_tiny_terminal_keeps_one_viewport_line():
    viewer = Viewer(mixed_plan(), DARK, width=10, height=3)
    assert viewer.state.viewport_height == 1
    assert len(viewer.frame().plain.split("\n")) == 1 + layout.CHROME_LINES


def _counting(monkeypatch, target, name):
    calls = []
    original = getattr(target, name)

    def _wrapped(*args, **kwargs):
        calls.append(args)
        return original(*args, **kwargs)

    monkeypatch.setattr(target, name, _wrapped)
    return calls


def test_keypress_measures_the_body_at_most_once(monkeypatch):
    viewer = Viewer(mixed_plan(), DARK, width=80, height=20)
    calls = _counting(monkeypatch, layout, "render_body")

    viewer.handle_key("j", "j")
    assert calls == []

    viewer.handle_key("e", "e")
    assert len(calls) == 1


def test_expanded_bodies_render_once_per_width_on_large_plans(monkeypatch):
    plan = Plan(
        resources=tuple(
            make_resource(f"aws_instance.web_{n}", Action.CREATE, (f'      + ami = "ami-{n}"',))
            for n in range(300)
        )
    )
    viewer = Viewer(plan, DARK, width=80, height=20)
    calls = _counting(monkeypatch, layout.embedded_content, "render_expanded")

    viewer.handle_key("e", "e")
    viewer.frame()
    viewer.handle_key("j", "j")
    viewer.frame()
    assert len(calls) == 300

    viewer.resize(60, 20)
    viewer.resize(80, 20)
    viewer.frame()
    assert len(calls) == 600
    assert sorted(width for _, _, width, _ in calls) == [60] * 300 + [80] * 300
