"""Plumbing shared by the dialect suggestion engines."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from guardian.suggest.edits import apply_selected
from guardian.suggest.models import (
    AnalysisResult,
    AppliedSuggestions,
    EditOperation,
    Suggestion,
    SuggestionKind,
)
from guardian.suggest.nodes import PathSegment, format_path
from guardian.validator.models import (
    LintMessage,
    LintSource,
    MessageKind,
    ValidationSeverity,
)
from guardian.validator.parser import dump_document, load_document

logger = logging.getLogger(__name__)


class Findings:
    """Collects suggestions and their mirrored diagnostics in emission order."""

    def __init__(self) -> None:
        self.suggestions: list[Suggestion] = []
        self.messages: list[LintMessage] = []

    def warn(self, path: list[PathSegment], message: str, hint: str | None = None) -> None:
        self.messages.append(
            LintMessage(
                source=LintSource.dialect_schema,
                severity=ValidationSeverity.warning,
                message=message,
                path=format_path(path) or None,
                kind=MessageKind.semantic,
                suggestion=hint,
            )
        )

    def suggest(
        self,
        path: list[PathSegment],
        message: str,
        kind: SuggestionKind,
        fix: EditOperation | None = None,
    ) -> None:
        self.suggestions.append(
            Suggestion(path=format_path(path), message=message, kind=kind, fix=fix)
        )
        self.warn(path, message)

    def result(self) -> AnalysisResult:
        return AnalysisResult(suggestions=self.suggestions, messages=self.messages)


def apply_with(
    content: str,
    selected: list[int],
    analyze: Callable[[Any], AnalysisResult],
) -> AppliedSuggestions:
    """Parse, re-derive suggestions, apply the selected fixes, re-serialise."""
    document = load_document(content)
    if document is None:
        return AppliedSuggestions(content=content)
    suggestions = analyze(document).suggestions
    applied = apply_selected(document, suggestions, selected)
    logger.debug("Applied %d of %d selected suggestions", len(applied), len(selected))
    return AppliedSuggestions(content=dump_document(document), applied=applied)
