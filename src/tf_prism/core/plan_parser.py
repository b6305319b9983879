"""Parse plan/apply change reports into a Plan.

Two report layouts are recognized:

- the current layout, where each resource opens with a comment header
  ("# aws_instance.web will be created") followed by an HCL-ish body;
- the legacy layout, where the resource line itself carries the change symbol
  ("+ aws_instance.web") and attributes are written as "name: value".

parse() is total: it never raises. Lines it cannot classify stay in the
owning resource's raw_lines and simply produce no Attribute, so callers must
always be ready to fall back to raw-line display.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from tf_prism.core.plan import Action, Attribute, Plan, Resource, split_address

logger = logging.getLogger(__name__)


# ─── Patterns ────────────────────────────────────────────────────────────────

_NEW_FORMAT_PHRASES = (" will be ", " must be ", " has been ", " is tainted")

_HEADER_RE = re.compile(r"^\s*#\s+(.+?)\s+(will be|must be|has been|is tainted)")
_ATTR_RE = re.compile(r'^\s+([~+\-])\s+"?([^"=]+)"?\s*=\s*(.*)')
_ATTR_FREEFORM_RE = re.compile(r"^\s+([~+\-])\s+(.+)$")

_OLD_CREATE_RE = re.compile(r"^\+\s+(.+)$")
_OLD_DESTROY_RE = re.compile(r"^-\s+(.+)$")
_OLD_UPDATE_RE = re.compile(r"^~\s+(.+)$")
_OLD_REPLACE_RE = re.compile(r"^-/\+\s+(.+)$")
_OLD_CREATE_DELETE_RE = re.compile(r"^\+/-\s+(.+)$")
_OLD_ATTR_RE = re.compile(r"^\s+([^:]+):\s*(.*)$")

# Counts are capped well below int()'s digit limit; an oversized count is
# not a summary line.
_SUMMARY_RE = re.compile(
    r"Plan:\s*(\d{1,18})\s*to add,\s*(\d{1,18})\s*to change,\s*(\d{1,18})\s*to destroy"
)

# [LAW:one-source-of-truth] Header phrase → action. First match wins, so the
# compound "destroyed and then created" phrases must precede the plain verbs.
_HEADER_ACTIONS: tuple[tuple[tuple[str, ...], Action], ...] = (
    (("destroyed and then created", "-/+"), Action.DELETE_CREATE),
    (("created and then destroyed", "+/-"), Action.CREATE_DELETE),
    (("will be created", "has been created"), Action.CREATE),
    (("will be destroyed", "must be destroyed"), Action.DESTROY),
    (("will be updated", "has been changed"), Action.UPDATE),
    (("must be replaced", "will be replaced", "is tainted"), Action.REPLACE),
    (("will be read",), Action.READ),
)

_SYMBOL_ACTIONS = {
    "+": Action.CREATE,
    "-": Action.DESTROY,
    "~": Action.UPDATE,
}

# Legacy single-symbol headers are only headers when the line has no ":".
_OLD_HEADERS: tuple[tuple[re.Pattern, Action, bool], ...] = (
    (_OLD_CREATE_RE, Action.CREATE, True),
    (_OLD_DESTROY_RE, Action.DESTROY, True),
    (_OLD_UPDATE_RE, Action.UPDATE, True),
    (_OLD_REPLACE_RE, Action.REPLACE, False),
    (_OLD_CREATE_DELETE_RE, Action.CREATE_DELETE, False),
)


# ─── Builder ─────────────────────────────────────────────────────────────────


@dataclass
class _ResourceBuilder:
    """Mutable accumulator for the resource currently being read."""

    address: str
    action: Action
    raw_lines: list[str] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)

    def build(self) -> Resource:
        type_, name = split_address(self.address)
        return Resource(
            address=self.address,
            action=self.action,
            raw_lines=tuple(self.raw_lines),
            attributes=tuple(self.attributes),
            type=type_,
            name=name,
        )


# ─── Public API ──────────────────────────────────────────────────────────────


def parse(text: str) -> Plan:
    """Parse report text into an immutable Plan."""
    lines = text.split("\n")
    if is_new_format(lines):
        builders = _parse_new_format(lines)
    else:
        builders = _parse_old_format(lines)

    summary, totals = _parse_summary(lines)
    resources = tuple(b.build() for b in builders)
    logger.debug(
        "parsed %d resources (summary=%r)", len(resources), summary or None
    )
    return Plan(
        resources=resources,
        summary=summary,
        total_add=totals[0],
        total_change=totals[1],
        total_destroy=totals[2],
        raw_text=text,
    )


def is_new_format(lines: list[str]) -> bool:
    """True when any line looks like a current-layout resource header."""
    for line in lines:
        if "# " in line and any(phrase in line for phrase in _NEW_FORMAT_PHRASES):
            return True
    return False


def action_from_header(line: str) -> Action:
    """Map a resource header line to its Action; unknown phrasing is an update."""
    lower = line.lower()
    for needles, action in _HEADER_ACTIONS:
        if any(needle in lower for needle in needles):
            return action
    return Action.UPDATE


# ─── Current layout ──────────────────────────────────────────────────────────


def _parse_attribute_line(line: str) -> Attribute | None:
    match = _ATTR_RE.match(line)
    if match is not None:
        symbol, name, value = match.group(1), match.group(2).strip(), match.group(3).strip()
        old_value = new_value = None
        action = _SYMBOL_ACTIONS[symbol]
        if symbol == "+":
            new_value = value
        elif symbol == "-":
            old_value = value
        elif " -> " in value:
            old, new = value.split(" -> ", 1)
            old_value, new_value = old.strip(), new.strip()
        else:
            new_value = value
        return Attribute(
            name=name,
            action=action,
            old_value=old_value,
            new_value=new_value,
            computed="(known after apply)" in value,
            sensitive="(sensitive" in value,
        )

    match = _ATTR_FREEFORM_RE.match(line)
    if match is not None:
        return Attribute(name=match.group(2).strip(), action=_SYMBOL_ACTIONS[match.group(1)])
    return None


def _parse_new_format(lines: list[str]) -> list[_ResourceBuilder]:
    builders: list[_ResourceBuilder] = []
    current: _ResourceBuilder | None = None
    in_block = False
    depth = 0

    for line in lines:
        header = _HEADER_RE.match(line)
        if header is not None:
            current = _ResourceBuilder(
                address=header.group(1).strip(),
                action=action_from_header(line),
                raw_lines=[line],
            )
            builders.append(current)
            in_block = True
            depth = 0
            continue

        if not in_block or current is None:
            continue

        current.raw_lines.append(line)
        depth += line.count("{") - line.count("}")

        attribute = _parse_attribute_line(line)
        if attribute is not None:
            current.attributes.append(attribute)

        if depth <= 0 and line.strip() == "}":
            in_block = False

    return builders


# ─── Legacy layout ───────────────────────────────────────────────────────────


def _match_old_header(line: str) -> tuple[str, Action] | None:
    # NOTE: an address that itself contains ":" can never be a single-symbol
    # header here; that ambiguity is inherent to the legacy layout.
    for pattern, action, reject_colon in _OLD_HEADERS:
        match = pattern.match(line)
        if match is None:
            continue
        if reject_colon and ":" in line:
            continue
        return match.group(1).strip(), action
    return None


def _parse_old_format(lines: list[str]) -> list[_ResourceBuilder]:
    builders: list[_ResourceBuilder] = []
    current: _ResourceBuilder | None = None

    for line in lines:
        if not line.strip():
            continue

        header = _match_old_header(line)
        if header is not None:
            address, action = header
            current = _ResourceBuilder(address=address, action=action, raw_lines=[line])
            builders.append(current)
            continue

        if current is None:
            continue

        current.raw_lines.append(line)
        match = _OLD_ATTR_RE.match(line)
        if match is None:
            continue

        name, value = match.group(1).strip(), match.group(2).strip()
        if " => " in value:
            old, new = value.split(" => ", 1)
            attribute = Attribute(
                name=name,
                action=Action.UPDATE,
                old_value=old.strip(),
                new_value=new.strip(),
                computed="<computed>" in value,
            )
        else:
            attribute = Attribute(
                name=name,
                action=current.action,
                new_value=value,
                computed="<computed>" in value,
            )
        current.attributes.append(attribute)

    return builders


# ─── Summary ─────────────────────────────────────────────────────────────────


def _parse_summary(lines: list[str]) -> tuple[str, tuple[int, int, int]]:
    for line in lines:
        match = _SUMMARY_RE.search(line)
        if match is not None:
            return line, (int(match.group(1)), int(match.group(2)), int(match.group(3)))
    return "", (0, 0, 0)
