"""Validation, suggestion and conversion endpoints."""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from guardian.convert import json_to_yaml, yaml_to_json
from guardian.deps import get_validator
from guardian.diff import DiffPreview, diff_preview, unified_diff
from guardian.errors import ParseFailed, SecurityRejected
from guardian.quickfix.autofix import AutoFixOptions, AutoFixResult, auto_fix
from guardian.specs import load_resource_spec, load_step_schema
from guardian.suggest import analyze_suggestions, apply_suggestions
from guardian.suggest.models import Suggestion
from guardian.validator.detect import detect_document
from guardian.validator.models import Dialect, LintMessage, ValidateOptions, ValidationResult
from guardian.validator.parser import parse_bounded
from guardian.validator.pipeline import Validator
from guardian.validator.schema import SchemaValidationResult, schema_validate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["validate"])


class ValidateRequest(BaseModel):
    content: str
    filename: str | None = None
    mime_type: str | None = None
    provider: Dialect | None = None
    ruleset_path: str | None = None
    relax_security: bool = False
    allow_anchors: bool = False
    allow_aliases: bool = False
    allowed_tags: list[str] = Field(default_factory=list)


class SuggestRequest(BaseModel):
    content: str
    provider: Dialect | None = None


class SuggestResponse(BaseModel):
    provider: Dialect
    suggestions: list[Suggestion] = Field(default_factory=list)
    messages: list[LintMessage] = Field(default_factory=list)


class ApplySuggestionsRequest(BaseModel):
    content: str
    selected: list[int] = Field(default_factory=list)
    provider: Dialect | None = None


class ApplySuggestionsResponse(BaseModel):
    content: str
    applied: list[int] = Field(default_factory=list)
    diff: str = ""


class AutoFixRequest(BaseModel):
    content: str
    rename_typos: bool = True
    rules_fix: bool = False
    ruleset_path: str | None = None


class ConvertRequest(BaseModel):
    content: str
    direction: Literal["yaml-to-json", "json-to-yaml"] = "yaml-to-json"


class ConvertResponse(BaseModel):
    content: str


class DiffPreviewRequest(BaseModel):
    before: str
    after: str
    filename: str = "document.yaml"


class SchemaValidateRequest(BaseModel):
    content: str
    schema_: dict[str, Any] = Field(..., alias="schema")


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.post("/validate", response_model=ValidationResult)
async def validate_content(
    body: ValidateRequest,
    validator: Validator = Depends(get_validator),
) -> ValidationResult:
    """Run the full validation pipeline on the submitted document."""
    options = ValidateOptions(
        filename=body.filename,
        mime_type=body.mime_type,
        provider=body.provider,
        ruleset_path=body.ruleset_path,
        relax_security=body.relax_security,
        allow_anchors=body.allow_anchors,
        allow_aliases=body.allow_aliases,
        allowed_tags=set(body.allowed_tags),
    )
    return await validator.validate(body.content, options)


@router.post("/suggest", response_model=SuggestResponse)
async def suggest(
    body: SuggestRequest,
    validator: Validator = Depends(get_validator),
) -> SuggestResponse:
    """List dialect suggestions for the document."""
    try:
        document = await parse_bounded(body.content, validator.config.parse_timeout_ms)
    except ParseFailed as e:
        raise HTTPException(status_code=400, detail=f"Invalid YAML: {e}")

    provider = body.provider or detect_document(document)
    analysis = analyze_suggestions(
        document,
        provider,
        resource_spec=load_resource_spec(validator.config.template_spec_path),
        step_schema=load_step_schema(validator.config.pipeline_schema_path),
    )
    return SuggestResponse(
        provider=provider,
        suggestions=analysis.suggestions,
        messages=analysis.messages,
    )


@router.post("/apply-suggestions", response_model=ApplySuggestionsResponse)
async def apply_selected_suggestions(
    body: ApplySuggestionsRequest,
    validator: Validator = Depends(get_validator),
) -> ApplySuggestionsResponse:
    """Apply selected suggestion indexes and return the new content with a diff."""
    try:
        result = apply_suggestions(
            body.content,
            body.selected,
            body.provider,
            resource_spec=load_resource_spec(validator.config.template_spec_path),
            step_schema=load_step_schema(validator.config.pipeline_schema_path),
        )
    except ParseFailed as e:
        raise HTTPException(status_code=400, detail=f"Invalid YAML: {e}")

    return ApplySuggestionsResponse(
        content=result.content,
        applied=result.applied,
        diff=unified_diff(body.content, result.content),
    )


@router.post("/autofix", response_model=AutoFixResult)
async def autofix(
    body: AutoFixRequest,
    validator: Validator = Depends(get_validator),
) -> AutoFixResult:
    """Apply safe formatting and typo fixes."""
    options = AutoFixOptions(
        rename_typos=body.rename_typos,
        rules_fix=body.rules_fix,
        ruleset_path=body.ruleset_path or validator.config.ruleset_path,
        rules_checker_command=validator.config.rules_checker_command,
        tool_runner=validator.tool_runner,
        resource_spec=load_resource_spec(validator.config.template_spec_path),
        step_schema=load_step_schema(validator.config.pipeline_schema_path),
    )
    try:
        return await auto_fix(body.content, options)
    except SecurityRejected as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/convert", response_model=ConvertResponse)
async def convert(body: ConvertRequest) -> ConvertResponse:
    """Convert between YAML and JSON."""
    try:
        if body.direction == "yaml-to-json":
            return ConvertResponse(content=yaml_to_json(body.content))
        return ConvertResponse(content=json_to_yaml(body.content))
    except (ParseFailed, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Conversion failed: {e}")


@router.post("/diff-preview", response_model=DiffPreview)
async def preview_diff(body: DiffPreviewRequest) -> DiffPreview:
    return diff_preview(body.before, body.after, body.filename)


@router.post("/schema-validate", response_model=SchemaValidationResult)
async def validate_against_schema(body: SchemaValidateRequest) -> SchemaValidationResult:
    """Validate the document against a caller-supplied JSON Schema."""
    return schema_validate(body.content, body.schema_)
