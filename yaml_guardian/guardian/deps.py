"""Shared FastAPI dependencies."""

from __future__ import annotations

from guardian.validator.pipeline import Validator

_validator: Validator | None = None


def get_validator() -> Validator:
    """FastAPI dependency: return the shared Validator."""
    assert _validator is not None, "Validator not initialised"
    return _validator
