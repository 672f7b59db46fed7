"""Validation data models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LintSource(str, Enum):
    """Which stage or checker produced a message."""

    style_checker = "style-checker"
    template_checker = "template-checker"
    rules_checker = "rules-checker"
    parser = "parser"
    dialect_schema = "dialect-schema"


class ValidationSeverity(str, Enum):
    """Severity level for validation messages."""

    error = "error"
    warning = "warning"
    info = "info"


class MessageKind(str, Enum):
    syntax = "syntax"
    semantic = "semantic"
    style = "style"


class Dialect(str, Enum):
    """Document flavours the engine understands."""

    template = "template"
    pipeline = "pipeline"
    generic = "generic"


class LintMessage(BaseModel):
    """A single validation finding, immutable once created."""

    model_config = ConfigDict(frozen=True)

    source: LintSource
    severity: ValidationSeverity
    message: str
    path: str | None = None
    line: int | None = None
    column: int | None = None
    rule_id: str | None = None
    kind: MessageKind | None = None
    suggestion: str | None = None


class SourceCounts(BaseModel):
    errors: int = 0
    warnings: int = 0
    infos: int = 0


class ProviderSummary(BaseModel):
    """Per-source tallies plus the inputs that shaped a validation run."""

    provider: Dialect
    sources: dict[str, str | None] = Field(default_factory=dict)
    counts: dict[LintSource, SourceCounts] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """Aggregated result from the validation pipeline."""

    ok: bool = True
    messages: list[LintMessage] = Field(default_factory=list)
    provider_summary: ProviderSummary | None = None


class ValidateOptions(BaseModel):
    """Per-call options accepted by the orchestrator."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filename: str | None = None
    mime_type: str | None = None
    provider: Dialect | None = None
    tool_runner: Any = None
    ruleset_path: str | None = None
    parse_timeout_ms: int | None = None
    relax_security: bool = False
    allow_anchors: bool = False
    allow_aliases: bool = False
    allowed_tags: set[str] = Field(default_factory=set)


class FileResult(BaseModel):
    file: str
    ok: bool
    messages: list[LintMessage] = Field(default_factory=list)


class DirectoryResult(BaseModel):
    """Result of validating every YAML file under a directory."""

    ok: bool = True
    results: list[FileResult] = Field(default_factory=list)


def has_errors(messages: list[LintMessage]) -> bool:
    return any(m.severity == ValidationSeverity.error for m in messages)
