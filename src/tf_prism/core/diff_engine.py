"""Line-level diff for decoded embedded content.

compute_diff() is an exact LCS diff for inputs up to MAX_LCS_LINES combined
lines. Beyond that it strips the common prefix/suffix and diffs only the
changed core; a core that is still too large is emitted as all deletes
followed by all inserts (an approximation, not a minimal edit script).

context_diff() collapses long equal runs for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MAX_LCS_LINES = 800
DEFAULT_CONTEXT = 3
SEPARATOR_TEXT = "@@"


class DiffOp(Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"
    SEPARATOR = "separator"


@dataclass(frozen=True)
class DiffLine:
    op: DiffOp
    text: str


def compute_diff(old_lines: list[str], new_lines: list[str]) -> list[DiffLine]:
    if len(old_lines) + len(new_lines) > MAX_LCS_LINES:
        return _diff_large_input(old_lines, new_lines)
    return _lcs_diff(old_lines, new_lines)


def _lcs_diff(old_lines: list[str], new_lines: list[str]) -> list[DiffLine]:
    """Exact diff via an LCS table and an iterative backtrack.

    Ties between an insert and a delete resolve to the insert when walking
    backwards, so deletes come out ahead of inserts in the final order.
    """
    m, n = len(old_lines), len(new_lines)
    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = table[i], table[i - 1]
        old = old_lines[i - 1]
        for j in range(1, n + 1):
            if old == new_lines[j - 1]:
                row[j] = prev[j - 1] + 1
            elif prev[j] >= row[j - 1]:
                row[j] = prev[j]
            else:
                row[j] = row[j - 1]

    result: list[DiffLine] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and old_lines[i - 1] == new_lines[j - 1]:
            result.append(DiffLine(DiffOp.EQUAL, old_lines[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            result.append(DiffLine(DiffOp.INSERT, new_lines[j - 1]))
            j -= 1
        else:
            result.append(DiffLine(DiffOp.DELETE, old_lines[i - 1]))
            i -= 1

    result.reverse()
    return result


def _diff_large_input(old_lines: list[str], new_lines: list[str]) -> list[DiffLine]:
    m, n = len(old_lines), len(new_lines)
    limit = min(m, n)

    prefix = 0
    while prefix < limit and old_lines[prefix] == new_lines[prefix]:
        prefix += 1

    suffix = 0
    while suffix < limit - prefix and old_lines[m - 1 - suffix] == new_lines[n - 1 - suffix]:
        suffix += 1

    old_core = old_lines[prefix : m - suffix]
    new_core = new_lines[prefix : n - suffix]

    result = [DiffLine(DiffOp.EQUAL, line) for line in old_lines[:prefix]]
    if len(old_core) + len(new_core) <= MAX_LCS_LINES:
        result.extend(_lcs_diff(old_core, new_core))
    else:
        result.extend(DiffLine(DiffOp.DELETE, line) for line in old_core)
        result.extend(DiffLine(DiffOp.INSERT, line) for line in new_core)
    result.extend(DiffLine(DiffOp.EQUAL, line) for line in old_lines[m - suffix :])
    return result


def has_changes(diff: list[DiffLine]) -> bool:
    return any(d.op is not DiffOp.EQUAL for d in diff)


def context_diff(diff: list[DiffLine], context_size: int = DEFAULT_CONTEXT) -> list[DiffLine] | None:
    """Keep context_size lines around each change; collapse the rest.

    Returns None when the diff contains no changes at all.
    """
    if context_size < 0:
        context_size = DEFAULT_CONTEXT
    if not has_changes(diff):
        return None

    keep = [False] * len(diff)
    for idx, line in enumerate(diff):
        if line.op is DiffOp.EQUAL:
            continue
        lo = max(0, idx - context_size)
        hi = min(len(diff) - 1, idx + context_size)
        for k in range(lo, hi + 1):
            keep[k] = True

    result: list[DiffLine] = []
    in_gap = False
    for idx, line in enumerate(diff):
        if not keep[idx]:
            in_gap = True
            continue
        if in_gap:
            result.append(DiffLine(DiffOp.SEPARATOR, SEPARATOR_TEXT))
            in_gap = False
        result.append(line)
    return result
