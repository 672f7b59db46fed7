"""External checkers: YAML style, template rules and declarative rulesets.

Each checker turns its tool's native output into LintMessages. A checker that
cannot run degrades to one info message; output that cannot be decoded
degrades to one warning. Neither ever produces an error on its own behalf.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from guardian.errors import CheckerOutputMalformed, CheckerUnavailable
from guardian.tools.runner import ToolResult, ToolRunner
from guardian.validator.models import (
    LintMessage,
    LintSource,
    MessageKind,
    ValidationSeverity,
)

logger = logging.getLogger(__name__)

# <stdin>:3:1: [error] wrong indentation: expected 2 but found 4 (indentation)
_PARSABLE_RE = re.compile(
    r"^(?:<stdin>|[^:]+):(\d+):(\d+):\s*\[(\w+)\]\s*(.*?)\s*(?:\(([^)]+)\))?$"
)

_LEVELS = {
    "error": ValidationSeverity.error,
    "warning": ValidationSeverity.warning,
}


def _skipped(source: LintSource, message: str) -> LintMessage:
    return LintMessage(source=source, severity=ValidationSeverity.info, message=message)


def _malformed(source: LintSource, label: str) -> LintMessage:
    return LintMessage(
        source=source,
        severity=ValidationSeverity.warning,
        message=f"Failed to parse {label} output",
    )


def _decode_json(stdout: str, label: str) -> Any:
    try:
        return json.loads(stdout)
    except ValueError as e:
        raise CheckerOutputMalformed(f"{label} produced non-JSON output") from e


# -- style checker (yamllint) --


def parse_style_output(stdout: str) -> list[LintMessage]:
    """Parse yamllint's ``parsable`` format; unrecognised lines are ignored."""
    messages: list[LintMessage] = []
    for raw in stdout.strip().splitlines():
        match = _PARSABLE_RE.match(raw.strip())
        if not match:
            continue
        line, column, level, text, rule = match.groups()
        messages.append(
            LintMessage(
                source=LintSource.style_checker,
                severity=_LEVELS.get(level.lower(), ValidationSeverity.info),
                message=text,
                line=int(line),
                column=int(column),
                rule_id=rule,
                kind=MessageKind.style,
            )
        )
    return messages


async def _run_style_tool(
    runner: ToolRunner, content: str, image: str, timeout_ms: int | None,
) -> ToolResult:
    args = ["-f", "parsable", "-"]
    result = await runner.run("yamllint", args, input=content, timeout_ms=timeout_ms)
    if not result.launch_failed:
        return result

    logger.info("yamllint unavailable locally (exit %d); trying container", result.exit_code)
    result = await runner.run(
        "docker",
        ["run", "--rm", "-i", image, "yamllint", *args],
        input=content,
        timeout_ms=timeout_ms,
    )
    if result.launch_failed:
        raise CheckerUnavailable(result.stderr.strip() or f"exit code {result.exit_code}")
    return result


async def run_style_checker(
    runner: ToolRunner,
    content: str,
    *,
    image: str = "cytopia/yamllint",
    timeout_ms: int | None = None,
) -> list[LintMessage]:
    """Lint general YAML style: local yamllint first, then the container image."""
    try:
        result = await _run_style_tool(runner, content, image, timeout_ms)
    except CheckerUnavailable as e:
        logger.info("Style checker skipped: %s", e)
        return [_skipped(LintSource.style_checker, "yamllint not available; skipped")]
    return parse_style_output(result.stdout)


# -- template rules checker (cfn-lint) --


def parse_template_findings(stdout: str) -> list[LintMessage]:
    """Map cfn-lint JSON findings to messages."""
    findings = _decode_json(stdout, "cfn-lint")
    if not isinstance(findings, list):
        raise CheckerOutputMalformed("cfn-lint output is not a list of findings")

    messages: list[LintMessage] = []
    for finding in findings:
        if not isinstance(finding, dict):
            raise CheckerOutputMalformed("cfn-lint finding is not an object")
        start = (finding.get("Location") or {}).get("Start") or {}
        level = str(finding.get("Level", ""))
        messages.append(
            LintMessage(
                source=LintSource.template_checker,
                severity=_LEVELS.get(level.lower(), ValidationSeverity.info),
                message=str(finding.get("Message", "")),
                path=finding.get("Filename"),
                line=start.get("LineNumber", start.get("Line")),
                column=start.get("ColumnNumber", start.get("Column")),
                rule_id=(finding.get("Rule") or {}).get("Id"),
                kind=MessageKind.semantic,
            )
        )
    return messages


async def run_template_checker(
    runner: ToolRunner,
    filename: str | None,
    *,
    image: str = "giammbo/cfn-lint:latest",
    timeout_ms: int | None = None,
) -> list[LintMessage]:
    """Run cfn-lint in a network-less container against *filename*.

    cfn-lint reads from disk, so without a path there is nothing to check.
    """
    if not filename:
        return [
            _skipped(
                LintSource.template_checker,
                "Template detected but no filename provided; cfn-lint requires a file path. Skipped.",
            )
        ]

    target = Path(filename).resolve()
    workdir = str(target.parent)
    result = await runner.run(
        "docker",
        [
            "run", "--rm", "--network=none",
            "-v", f"{workdir}:{workdir}:ro",
            "-w", workdir,
            image,
            "cfn-lint", "-f", "json", target.name,
        ],
        timeout_ms=timeout_ms,
    )
    if result.launch_failed:
        logger.info("cfn-lint container unavailable (exit %d)", result.exit_code)
        return [_skipped(LintSource.template_checker, "cfn-lint not available; skipped")]
    if not result.stdout.strip():
        return []

    try:
        return parse_template_findings(result.stdout)
    except (CheckerOutputMalformed, ValueError, TypeError, AttributeError) as e:
        logger.warning("Could not decode cfn-lint output: %s", e)
        return [_malformed(LintSource.template_checker, "cfn-lint JSON")]


# -- declarative rules checker (spectral) --


def _rules_severity(value: Any) -> ValidationSeverity:
    if value == 0:
        return ValidationSeverity.error
    if value == 1:
        return ValidationSeverity.warning
    return ValidationSeverity.info


def parse_rules_findings(stdout: str) -> list[LintMessage]:
    """Map spectral JSON results to messages; ranges are 0-based."""
    findings = _decode_json(stdout, "spectral")
    if not isinstance(findings, list):
        raise CheckerOutputMalformed("spectral output is not a list of results")

    messages: list[LintMessage] = []
    for finding in findings:
        if not isinstance(finding, dict):
            raise CheckerOutputMalformed("spectral result is not an object")
        start = (finding.get("range") or {}).get("start")
        path = finding.get("path")
        messages.append(
            LintMessage(
                source=LintSource.rules_checker,
                severity=_rules_severity(finding.get("severity")),
                message=str(finding.get("message", "")),
                rule_id=finding.get("code"),
                path=".".join(str(p) for p in path) if isinstance(path, list) and path else None,
                line=start["line"] + 1 if start else None,
                column=start["character"] + 1 if start else None,
                kind=MessageKind.semantic,
            )
        )
    return messages


async def run_rules_checker(
    runner: ToolRunner,
    content: str,
    ruleset_path: str,
    *,
    command: list[str] | None = None,
    timeout_ms: int | None = None,
) -> list[LintMessage]:
    """Lint *content* (via stdin) against a custom declarative ruleset."""
    cmd = command or ["npx", "-y", "@stoplight/spectral-cli"]
    result = await runner.run(
        cmd[0],
        [*cmd[1:], "lint", "--stdin", "-r", ruleset_path, "-f", "json"],
        input=content,
        timeout_ms=timeout_ms,
    )
    if result.launch_failed:
        logger.info("spectral unavailable (exit %d)", result.exit_code)
        return [_skipped(LintSource.rules_checker, "spectral not available; skipped")]
    if not result.stdout.strip():
        return []

    try:
        return parse_rules_findings(result.stdout)
    except (CheckerOutputMalformed, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning("Could not decode spectral output: %s", e)
        return [_malformed(LintSource.rules_checker, "spectral JSON")]
