"""Explicit configuration for the validation core."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class GuardianConfig(BaseModel):
    """Process-wide settings handed to the Validator at construction time."""

    template_spec_path: str | None = None
    pipeline_schema_path: str | None = None
    ruleset_path: str | None = None
    parse_timeout_ms: int = 5000
    parse_simulate_delay_ms: int = 0
    tool_timeout_ms: int = 10_000
    style_checker_image: str = "cytopia/yamllint"
    template_checker_image: str = "giammbo/cfn-lint:latest"
    rules_checker_command: list[str] = Field(
        default_factory=lambda: ["npx", "-y", "@stoplight/spectral-cli"]
    )
    disable_template_checker: bool = False
    batch_concurrency: int = Field(4, ge=1)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def load_config() -> GuardianConfig:
    """Load settings from the options file, or fall back to the environment."""
    opts_path = os.environ.get("GUARDIAN_OPTIONS_PATH", "/data/options.json")
    if Path(opts_path).exists():
        return GuardianConfig.model_validate(json.loads(Path(opts_path).read_text()))
    return GuardianConfig(
        template_spec_path=os.environ.get("CFN_SPEC_PATH") or None,
        pipeline_schema_path=os.environ.get("AZURE_PIPELINES_SCHEMA_PATH") or None,
        ruleset_path=os.environ.get("SPECTRAL_RULESET") or None,
        parse_timeout_ms=_env_int("YAML_PARSE_TIMEOUT_MS", 5000),
        batch_concurrency=max(1, _env_int("YAML_CONCURRENCY", 4)),
        disable_template_checker=bool(os.environ.get("DISABLE_CFN_LINT")),
    )
