"""Expanded resource bodies: decoded user data and block diffs.

render_expanded() walks a resource's body lines and, per line, tries in order:

1. user_data / user_data_base64 attributes whose value decodes are shown
   decoded (diffed when the attribute changes)
2. a removed heredoc followed by an added heredoc is shown as one diff
3. a run of "- " lines followed by a run of "+ " lines is shown as one diff
   when either run is at least PREFIXED_BLOCK_MIN_LINES long
4. anything else is wrapped and HCL-coloured

// [LAW:single-enforcer] Callers that cache the returned Text objects must
//   treat them as read-only.
"""

from __future__ import annotations

import logging

from rich.text import Text

from tf_prism.core import content_decoder, diff_engine
from tf_prism.core.diff_engine import DiffLine, DiffOp
from tf_prism.core.plan import Action, Resource
from tf_prism.tui import rendering
from tf_prism.tui.theme import Theme

logger = logging.getLogger(__name__)

DECODABLE_KEYS = frozenset({"user_data", "user_data_base64"})
PREFIXED_BLOCK_MIN_LINES = 3
SEPARATOR_MARKER = "@@ ··· @@"
NO_DECODED_CHANGES = "  (no changes in decoded content)"


def _marker(text: str, theme: Theme, indent: str) -> Text:
    line = Text(indent)
    line.append(f"┄┄┄ {text} ┄┄┄", style=theme.muted)
    return line


def _styled(indent: str, body: str, style: str) -> Text:
    line = Text(indent)
    line.append(body, style=style)
    return line


def render_diff_lines(diff: list[DiffLine], indent: str, theme: Theme, width: int) -> list[Text]:
    wrap_width = width - len(indent) - 4
    out: list[Text] = []
    for entry in diff:
        if entry.op is DiffOp.SEPARATOR:
            out.append(_styled(indent, SEPARATOR_MARKER, theme.muted))
            continue
        if entry.op is DiffOp.DELETE:
            mark, style = "- ", theme.destroy
        elif entry.op is DiffOp.INSERT:
            mark, style = "+ ", theme.create
        else:
            mark, style = "  ", theme.muted
        for piece in rendering.wrap_text(entry.text, wrap_width):
            out.append(_styled(indent, mark + piece, style))
    return out


# ─── user_data ───────────────────────────────────────────────────────────────


def render_userdata(
    line: str, action: Action, theme: Theme, width: int, context: int
) -> list[Text] | None:
    """Decoded rendering of a user_data attribute line, or None."""
    indent, trimmed = rendering.split_indent(line)
    prefix, content, line_action = rendering.split_prefix(trimmed)
    if line_action is None:
        line_action = action

    eq = content.find(" = ")
    if eq < 0:
        return None
    key = content[:eq].strip()
    if key not in DECODABLE_KEYS:
        return None
    value = content[eq + 3:].strip()
    body_indent = indent + " " * len(prefix)

    if " -> " in value:
        old_raw, new_raw = value.split(" -> ", 1)
        old = content_decoder.try_decode(content_decoder.unquote(old_raw.strip()))
        new = content_decoder.try_decode(content_decoder.unquote(new_raw.strip()))
        if old is None and new is None:
            return None
        out = [rendering.colorize_hcl_line(line, action, theme), _marker(f"decoded {key}", theme, body_indent)]
        if old is not None and new is not None:
            diff = diff_engine.context_diff(
                diff_engine.compute_diff(old.split("\n"), new.split("\n")), context
            )
            if diff is None:
                out.append(_styled(body_indent, NO_DECODED_CHANGES, theme.muted))
            else:
                out.extend(render_diff_lines(diff, body_indent, theme, width))
        else:
            for text, mark, style in ((old, "- ", theme.destroy), (new, "+ ", theme.create)):
                if text is not None:
                    out.extend(_styled(body_indent, mark + part, style) for part in text.split("\n"))
        out.append(_marker(f"end {key}", theme, body_indent))
        return out

    decoded = content_decoder.try_decode(content_decoder.unquote(value))
    if decoded is None:
        return None
    if line_action is Action.CREATE:
        style = theme.create
    elif line_action is Action.DESTROY:
        style = theme.destroy
    else:
        style = theme.text
    out = [rendering.colorize_hcl_line(line, action, theme), _marker(f"decoded {key}", theme, body_indent)]
    for part in decoded.split("\n"):
        for piece in rendering.wrap_text(part, width - len(body_indent) - 2):
            out.append(_styled(body_indent, "  " + piece, style))
    out.append(_marker(f"end {key}", theme, body_indent))
    return out


# ─── Heredoc and prefixed block diffs ────────────────────────────────────────


def is_heredoc_marker(text: str) -> bool:
    return text.strip().startswith("<<")


def heredoc_terminator(text: str) -> str:
    text = text.strip()
    if text.startswith("<<-"):
        text = text[3:]
    elif text.startswith("<<"):
        text = text[2:]
    return text.strip()


def _find_terminator(lines: list[str], start: int, terminator: str) -> int | None:
    """Index of the heredoc's closing line, or None when it never closes."""
    for k in range(start, len(lines)):
        if lines[k].strip() in (terminator, terminator + ","):
            return k
    return None


def render_heredoc_pair(
    lines: list[str], idx: int, theme: Theme, width: int, context: int
) -> tuple[int, list[Text]]:
    """Diff "- <<EOT ... EOT" against the "+ <<EOT ... EOT" that follows.

    Returns (lines consumed, rendered); (0, []) when the pattern is absent.
    """
    _, first = rendering.split_indent(lines[idx])
    terminator = heredoc_terminator(first[2:])
    if not terminator:
        return 0, []

    old_close = _find_terminator(lines, idx + 1, terminator)
    if old_close is None or old_close + 1 >= len(lines):
        return 0, []

    add = old_close + 1
    while add < len(lines) and not lines[add].strip():
        add += 1
    if add >= len(lines):
        return 0, []
    _, added = rendering.split_indent(lines[add])
    if not (added.startswith("+ ") and is_heredoc_marker(added[2:])):
        return 0, []

    new_close = _find_terminator(lines, add + 1, terminator)
    if new_close is None:
        return 0, []

    old_content = [line.rstrip(" \t") for line in lines[idx + 1 : old_close]]
    new_content = [line.rstrip(" \t") for line in lines[add + 1 : new_close]]
    if not old_content and not new_content:
        return 0, []
    diff = diff_engine.context_diff(diff_engine.compute_diff(old_content, new_content), context)
    if diff is None:
        return 0, []

    indent, _ = rendering.split_indent(lines[idx])
    out = [_marker("heredoc diff", theme, indent)]
    out.extend(render_diff_lines(diff, indent, theme, width))
    out.append(_marker("end heredoc diff", theme, indent))
    return new_close + 1 - idx, out


def _run_end(lines: list[str], start: int, prefix: str) -> int:
    end = start
    while end < len(lines) and lines[end].lstrip(" \t").startswith(prefix):
        end += 1
    return end


def render_prefixed_block(
    lines: list[str], idx: int, theme: Theme, width: int, context: int
) -> tuple[int, list[Text]]:
    """Diff a run of "- " lines against the run of "+ " lines after it."""
    removed_end = _run_end(lines, idx, "- ")
    added_end = _run_end(lines, removed_end, "+ ")
    removed = removed_end - idx
    added = added_end - removed_end
    if removed == 0 or added == 0:
        return 0, []
    if removed < PREFIXED_BLOCK_MIN_LINES and added < PREFIXED_BLOCK_MIN_LINES:
        return 0, []

    old_content = [line.lstrip(" \t")[2:] for line in lines[idx:removed_end]]
    new_content = [line.lstrip(" \t")[2:] for line in lines[removed_end:added_end]]
    diff = diff_engine.context_diff(diff_engine.compute_diff(old_content, new_content), context)
    if diff is None:
        return 0, []

    indent, _ = rendering.split_indent(lines[idx])
    return added_end - idx, render_diff_lines(diff, indent, theme, width)


def render_block_diff(
    lines: list[str], idx: int, theme: Theme, width: int, context: int
) -> tuple[int, list[Text]]:
    _, trimmed = rendering.split_indent(lines[idx])
    if not trimmed.startswith("- "):
        return 0, []
    if is_heredoc_marker(trimmed[2:]):
        return render_heredoc_pair(lines, idx, theme, width, context)
    return render_prefixed_block(lines, idx, theme, width, context)


# ─── Whole body ──────────────────────────────────────────────────────────────


def render_expanded(
    resource: Resource, theme: Theme, width: int, context: int = diff_engine.DEFAULT_CONTEXT
) -> tuple[Text, ...]:
    lines = list(resource.body_lines)
    out: list[Text] = []
    idx = 0
    while idx < len(lines):
        line = lines[idx]
        decoded = render_userdata(line, resource.action, theme, width, context)
        if decoded is not None:
            out.extend(decoded)
            idx += 1
            continue
        consumed, rendered = render_block_diff(lines, idx, theme, width, context)
        if consumed:
            out.extend(rendered)
            idx += consumed
            continue
        out.extend(rendering.wrap_and_colorize(line, resource.action, theme, width))
        idx += 1
    logger.debug("rendered %s: %d body lines -> %d rows", resource.address, len(lines), len(out))
    return tuple(out)
