"""Validation core: guard, bounded parser, dialect detection and models.

The orchestrator lives in ``guardian.validator.pipeline``.
"""

from guardian.validator.detect import detect, detect_document
from guardian.validator.models import (
    Dialect,
    LintMessage,
    LintSource,
    ValidateOptions,
    ValidationResult,
    ValidationSeverity,
)
from guardian.validator.parser import parse_bounded
from guardian.validator.security import guard

__all__ = [
    "Dialect",
    "LintMessage",
    "LintSource",
    "ValidateOptions",
    "ValidationResult",
    "ValidationSeverity",
    "detect",
    "detect_document",
    "guard",
    "parse_bounded",
]
