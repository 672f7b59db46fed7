"""Dialect-aware suggestions with reversible, serialisable fixes."""

from __future__ import annotations

from typing import Any

from guardian.specs.pipeline_spec import StepSchema
from guardian.specs.template_spec import ResourceSpec
from guardian.suggest import pipeline, template
from guardian.suggest.models import (
    AnalysisResult,
    AppliedSuggestions,
    EditOperation,
    InsertElement,
    RenameField,
    SetField,
    Suggestion,
    SuggestionKind,
)
from guardian.validator.detect import detect
from guardian.validator.models import Dialect


def analyze_suggestions(
    document: Any,
    dialect: Dialect,
    *,
    resource_spec: ResourceSpec | None = None,
    step_schema: StepSchema | None = None,
) -> AnalysisResult:
    """Run the engine for *dialect*; generic documents get nothing."""
    if dialect == Dialect.template:
        return template.analyze(document, resource_spec)
    if dialect == Dialect.pipeline:
        return pipeline.analyze(document, step_schema)
    return AnalysisResult()


def apply_suggestions(
    content: str,
    selected: list[int],
    dialect: Dialect | None = None,
    *,
    resource_spec: ResourceSpec | None = None,
    step_schema: StepSchema | None = None,
) -> AppliedSuggestions:
    """Apply the selected suggestion indexes to *content*.

    The dialect is detected from the content when not given. Generic content
    comes back unchanged.
    """
    dialect = detect(content, dialect)
    if dialect == Dialect.template:
        return template.apply_suggestions(content, selected, resource_spec)
    if dialect == Dialect.pipeline:
        return pipeline.apply_suggestions(content, selected, step_schema)
    return AppliedSuggestions(content=content)


__all__ = [
    "AnalysisResult",
    "AppliedSuggestions",
    "EditOperation",
    "InsertElement",
    "RenameField",
    "SetField",
    "Suggestion",
    "SuggestionKind",
    "analyze_suggestions",
    "apply_suggestions",
]
