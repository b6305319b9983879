"""Unit tests for tf_prism.core.diff_engine."""

from collections import Counter

import pytest

from tf_prism.core.diff_engine import (
    MAX_LCS_LINES,
    SEPARATOR_TEXT,
    DiffLine,
    DiffOp,
    compute_diff,
    context_diff,
    has_changes,
)

E, I, D, S = DiffOp.EQUAL, DiffOp.INSERT, DiffOp.DELETE, DiffOp.SEPARATOR


def ops(diff):
    return [(d.op, d.text) for d in diff]


@pytest.mark.parametrize("lines", [[], ["a"], ["a", "b", "a", "c"], ["x"] * 5])
def test_identical_inputs_are_all_equal(lines):
    diff = compute_diff(lines, list(lines))
    assert all(d.op is E for d in diff)
    assert [d.text for d in diff] == lines
    assert context_diff(diff) is None


def test_single_substitution_is_one_delete_one_insert():
    diff = compute_diff(["a", "b", "c"], ["a", "x", "c"])
    assert ops(diff) == [(E, "a"), (D, "b"), (I, "x"), (E, "c")]


def test_pure_insertions_and_deletions():
    assert ops(compute_diff([], ["a", "b"])) == [(I, "a"), (I, "b")]
    assert ops(compute_diff(["a", "b"], [])) == [(D, "a"), (D, "b")]


def test_diff_replays_to_both_sides():
    old = ["one", "two", "three", "four", "five"]
    new = ["zero", "one", "three", "3.5", "five", "six"]
    diff = compute_diff(old, new)
    assert [d.text for d in diff if d.op is not I] == old
    assert [d.text for d in diff if d.op is not D] == new
    assert sum(1 for d in diff if d.op is E) == 3


def test_large_input_keeps_shared_prefix_and_suffix():
    prefix = [f"p{i}" for i in range(500)]
    suffix = [f"s{i}" for i in range(400)]
    old = prefix + ["old-1", "old-2"] + suffix
    new = prefix + ["new-1"] + suffix
    assert len(old) + len(new) > MAX_LCS_LINES

    diff = compute_diff(old, new)
    assert ops(diff[: len(prefix)]) == [(E, line) for line in prefix]
    assert ops(diff[-len(suffix):]) == [(E, line) for line in suffix]
    middle = diff[len(prefix) : -len(suffix)]
    assert Counter(ops(middle)) == Counter([(D, "old-1"), (D, "old-2"), (I, "new-1")])


def test_large_changed_core_is_all_deletes_then_inserts():
    old = [f"o{i}" for i in range(450)]
    new = [f"n{i}" for i in range(450)]
    diff = compute_diff(old, new)
    assert ops(diff) == [(D, line) for line in old] + [(I, line) for line in new]


def test_context_diff_collapses_distant_equal_runs():
    old = [f"l{i}" for i in range(20)]
    new = list(old)
    new[2] = "changed-2"
    new[15] = "changed-15"
    result = context_diff(compute_diff(old, new), 3)

    texts = [d.text for d in result]
    assert texts[0] == "l0"
    assert texts.count(SEPARATOR_TEXT) == 1
    sep = texts.index(SEPARATOR_TEXT)
    # Three lines after the first change, then the gap, then three before the second.
    assert texts[sep - 3 : sep] == ["l3", "l4", "l5"]
    assert texts[sep + 1 : sep + 4] == ["l12", "l13", "l14"]
    # Trailing equal lines within context are kept; no trailing separator.
    assert texts[-3:] == ["l16", "l17", "l18"]
    assert result[-1].op is not S


def test_context_diff_leading_gap_gets_separator():
    old = [f"l{i}" for i in range(10)]
    new = old[:9] + ["last"]
    result = context_diff(compute_diff(old, new), 1)
    assert result[0] == DiffLine(S, SEPARATOR_TEXT)
    assert ops(result[1:]) == [(E, "l8"), (D, "l9"), (I, "last")]


def test_context_diff_negative_size_uses_default():
    old = [f"l{i}" for i in range(12)]
    new = old[:6] + ["x"] + old[7:]
    assert context_diff(compute_diff(old, new), -1) == context_diff(compute_diff(old, new), 3)


def test_has_changes():
    assert not has_changes([DiffLine(E, "a")])
    assert has_changes([DiffLine(E, "a"), DiffLine(I, "b")])
