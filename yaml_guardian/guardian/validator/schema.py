"""Validate a YAML document against a caller-supplied JSON Schema (Draft 7)."""

from __future__ import annotations

import json
import logging
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from pydantic import BaseModel, Field

from guardian.convert import yaml_to_json
from guardian.errors import ParseFailed

logger = logging.getLogger(__name__)


class SchemaIssue(BaseModel):
    instance_path: str = ""
    message: str
    keyword: str


class SchemaValidationResult(BaseModel):
    ok: bool = True
    errors: list[SchemaIssue] = Field(default_factory=list)


def _pointer(parts: Any) -> str:
    return "".join(f"/{p}" for p in parts)


def schema_validate(content: str, schema: dict[str, Any]) -> SchemaValidationResult:
    """Report every schema violation, not just the first."""
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        return SchemaValidationResult(
            ok=False,
            errors=[SchemaIssue(message=f"Invalid schema: {e.message}", keyword="schema-compile")],
        )

    try:
        instance = json.loads(yaml_to_json(content))
    except ParseFailed as e:
        return SchemaValidationResult(
            ok=False, errors=[SchemaIssue(message=str(e), keyword="parse")],
        )

    validator = Draft7Validator(schema)
    issues = [
        SchemaIssue(
            instance_path=_pointer(error.absolute_path),
            message=error.message,
            keyword=str(error.validator),
        )
        for error in sorted(validator.iter_errors(instance), key=lambda e: _pointer(e.absolute_path))
    ]
    logger.debug("Schema validation found %d issues", len(issues))
    return SchemaValidationResult(ok=not issues, errors=issues)
