"""Classification and access helpers for parsed YAML values.

Engines never probe parsed values ad hoc; they ask for the NodeKind and
branch on it, or use the ``as_*`` accessors which return None when the value
has a different shape.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from ruamel.yaml.comments import TaggedScalar

PathSegment = str | int


class NodeKind(str, Enum):
    null = "null"
    boolean = "boolean"
    integer = "integer"
    float = "float"
    string = "string"
    timestamp = "timestamp"
    sequence = "sequence"
    mapping = "mapping"
    other = "other"


def node_kind(value: Any) -> NodeKind:
    """Return the kind of a parsed value (round-trip or plain)."""
    if value is None:
        return NodeKind.null
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return NodeKind.boolean
    if isinstance(value, int):
        return NodeKind.integer
    if isinstance(value, float):
        return NodeKind.float
    if isinstance(value, str):
        return NodeKind.string
    if isinstance(value, (datetime.date, datetime.datetime)):
        return NodeKind.timestamp
    if isinstance(value, list):
        return NodeKind.sequence
    if isinstance(value, dict):
        return NodeKind.mapping
    return NodeKind.other


def as_mapping(value: Any) -> dict | None:
    return value if node_kind(value) == NodeKind.mapping else None


def as_sequence(value: Any) -> list | None:
    return value if node_kind(value) == NodeKind.sequence else None


def explicit_tag(value: Any) -> str | None:
    """Return a local ``!Tag`` attached to a round-trip node, if any."""
    tag = getattr(value, "tag", None)
    if tag is None:
        return None
    tag_value = getattr(tag, "value", tag)
    if isinstance(tag_value, str) and tag_value.startswith("!"):
        return tag_value
    return None


def is_tagged(value: Any) -> bool:
    return isinstance(value, TaggedScalar) or explicit_tag(value) is not None


def format_path(segments: list[PathSegment]) -> str:
    """Render ``["jobs", 0, "steps"]`` as ``jobs[0].steps``."""
    out = ""
    for seg in segments:
        if isinstance(seg, int):
            out += f"[{seg}]"
        else:
            out += f".{seg}" if out else str(seg)
    return out


def is_addressable(segments: list[Any]) -> bool:
    """Whether every segment can be carried in an edit path.

    Null, float, boolean and timestamp keys are valid YAML but have no stable
    path form, so suggestions on them carry no fix.
    """
    return all(
        isinstance(seg, str) or (isinstance(seg, int) and not isinstance(seg, bool))
        for seg in segments
    )
