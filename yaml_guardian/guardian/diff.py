"""Unified diffs for reviewing a change before it is accepted."""

from __future__ import annotations

import difflib

from pydantic import BaseModel


class DiffPreview(BaseModel):
    diff: str
    before: str
    after: str


def unified_diff(before: str, after: str, filename: str = "document.yaml") -> str:
    """Return a unified diff of *before* against *after*; empty when equal."""
    lines = difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
    )
    out = []
    for line in lines:
        out.append(line if line.endswith("\n") else line + "\n\\ No newline at end of file\n")
    return "".join(out)


def diff_preview(before: str, after: str, filename: str = "document.yaml") -> DiffPreview:
    return DiffPreview(diff=unified_diff(before, after, filename), before=before, after=after)
