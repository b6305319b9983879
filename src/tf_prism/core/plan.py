"""Structured model of a parsed change report.

// [LAW:one-source-of-truth] Action values are the canonical action names;
// every label, glyph and sort rank elsewhere is keyed by this enum.

Plan and everything it holds is immutable once parse() returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Action(Enum):
    CREATE = "create"
    DESTROY = "destroy"
    UPDATE = "update"
    REPLACE = "replace"
    READ = "read"
    NO_OP = "no-op"
    CREATE_DELETE = "create-delete"
    DELETE_CREATE = "delete-create"


@dataclass(frozen=True)
class Attribute:
    """One attribute line inside a resource body.

    The action belongs to the line, not the resource: an "update" resource
    routinely carries attributes that are themselves created or destroyed.
    """

    name: str
    action: Action
    old_value: str | None = None
    new_value: str | None = None
    computed: bool = False
    sensitive: bool = False


@dataclass(frozen=True)
class Resource:
    address: str
    action: Action
    raw_lines: tuple[str, ...] = ()
    attributes: tuple[Attribute, ...] = ()
    type: str = ""
    name: str = ""

    @property
    def body_lines(self) -> tuple[str, ...]:
        """Raw lines after the header line."""
        return self.raw_lines[1:]


@dataclass(frozen=True)
class Plan:
    resources: tuple[Resource, ...] = ()
    summary: str = ""
    total_add: int = 0
    total_change: int = 0
    total_destroy: int = 0
    raw_text: str = ""


def split_address(address: str) -> tuple[str, str]:
    """Return (type, name) from the last two dot-separated address segments.

    Module-qualified addresses resolve the same way:
    "module.foo.aws_instance.bar" -> ("aws_instance", "bar").
    """
    parts = address.split(".")
    if len(parts) < 2:
        return "", ""
    return parts[-2], parts[-1]
