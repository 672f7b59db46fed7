"""Interpreter that applies edit operations to a parsed document in place."""

from __future__ import annotations

import copy
import logging
from typing import Any

from ruamel.yaml.comments import CommentedMap

from guardian.suggest.models import InsertElement, RenameField, SetField, Suggestion
from guardian.suggest.nodes import PathSegment, as_mapping, as_sequence

logger = logging.getLogger(__name__)

_MISSING = object()


def _child(container: Any, segment: PathSegment) -> Any:
    mapping = as_mapping(container)
    if mapping is not None:
        return mapping.get(segment, _MISSING)
    sequence = as_sequence(container)
    if sequence is not None and isinstance(segment, int) and 0 <= segment < len(sequence):
        return sequence[segment]
    return _MISSING


def resolve(document: Any, path: list[PathSegment]) -> Any:
    """Follow *path* from the root; returns None when any segment is missing."""
    node = document
    for segment in path:
        node = _child(node, segment)
        if node is _MISSING:
            return None
    return node


def _set(document: Any, edit: SetField) -> bool:
    if not edit.path:
        return False
    node = document
    for segment in edit.path[:-1]:
        child = _child(node, segment)
        if child is _MISSING or child is None:
            mapping = as_mapping(node)
            if mapping is None:
                return False
            child = mapping[segment] = CommentedMap()
        node = child

    last = edit.path[-1]
    value = copy.deepcopy(edit.value)
    mapping = as_mapping(node)
    if mapping is not None:
        mapping[last] = value
        return True
    sequence = as_sequence(node)
    if sequence is not None and isinstance(last, int) and 0 <= last < len(sequence):
        sequence[last] = value
        return True
    return False


def _rename_key(mapping: dict, old: Any, new: Any) -> None:
    """Rename in place, keeping the key's position and attached comments."""
    keys = list(mapping)
    pos = keys.index(old)
    value = mapping.pop(old)
    comments = getattr(mapping, "ca", None)
    if comments is not None and old in comments.items:
        comments.items[new] = comments.items.pop(old)
    if isinstance(mapping, CommentedMap):
        mapping.insert(pos, new, value)
        return
    tail = [(k, mapping.pop(k)) for k in keys[pos + 1:]]
    mapping[new] = value
    mapping.update(tail)


def _rename(document: Any, edit: RenameField) -> bool:
    mapping = as_mapping(resolve(document, edit.path))
    if mapping is None or edit.from_key not in mapping or edit.to_key in mapping:
        return False
    _rename_key(mapping, edit.from_key, edit.to_key)
    return True


def _insert(document: Any, edit: InsertElement) -> bool:
    sequence = as_sequence(resolve(document, edit.path))
    if sequence is None or not 0 <= edit.index <= len(sequence):
        return False
    sequence.insert(edit.index, copy.deepcopy(edit.value))
    return True


_HANDLERS = {
    SetField: _set,
    RenameField: _rename,
    InsertElement: _insert,
}


def apply_edit(document: Any, edit: SetField | RenameField | InsertElement) -> bool:
    """Apply one edit; returns False (leaving the document untouched) when the
    document no longer has the shape the edit was computed against."""
    handler = _HANDLERS[type(edit)]
    applied = handler(document, edit)
    if not applied:
        logger.debug("Edit %s did not apply", edit.model_dump())
    return applied


def apply_selected(
    document: Any, suggestions: list[Suggestion], selected: list[int],
) -> list[int]:
    """Apply the fixes of the selected suggestion indexes, in the order given.

    Out-of-range indexes and suggestions without a fix are skipped. Returns
    the indexes whose fix actually changed the document.
    """
    applied: list[int] = []
    for idx in selected:
        if not 0 <= idx < len(suggestions):
            continue
        fix = suggestions[idx].fix
        if fix is not None and apply_edit(document, fix):
            applied.append(idx)
    return applied
