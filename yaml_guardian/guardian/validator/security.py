"""Preflight guards run against raw content before any parser sees it.

Every check is evaluated so the caller gets the full list of violations in a
single pass. Oversized documents, alias bombs and language-specific tags are
parser attack vectors, which is why none of this can wait until after
parsing.
"""

from __future__ import annotations

import json
import re

from pydantic import BaseModel, Field

from guardian.validator.models import (
    LintMessage,
    LintSource,
    MessageKind,
    ValidationSeverity,
)

MAX_BYTES = 2_097_152  # 2 MiB
MAX_LINES = 15_000
MAX_CONTROL_RATIO = 0.01

YAML_MIME_WHITELIST = {
    "application/yaml",
    "application/x-yaml",
    "text/yaml",
    "text/x-yaml",
}

_EXTENSION_RE = re.compile(r"\.ya?ml$", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_NON_PRINTABLE_RE = re.compile(r"[^\x09\x0A\x0D\x20-\x7E]")

_ANCHOR_RE = re.compile(r"(?:^|[\s\[{,])&([A-Za-z0-9_][A-Za-z0-9_.-]*)", re.MULTILINE)
_ALIAS_RE = re.compile(r"(?:^|[\s\[{,])\*([A-Za-z0-9_][A-Za-z0-9_.-]*)", re.MULTILINE)
_DOUBLE_BANG_RE = re.compile(r"(?:^|[\s\[{,:-])(!![^\s,\[\]{}]*)", re.MULTILINE)
_VERBATIM_TAG_RE = re.compile(r"(?:^|[\s\[{,:-])(!<[^>\s]*>?)", re.MULTILINE)
_LINE_TAG_RE = re.compile(r"^[ \t-]*(![A-Za-z][\w./:-]*)", re.MULTILINE)


class GuardOptions(BaseModel):
    """Metadata and allowances consulted by the preflight guard."""

    filename: str | None = None
    mime_type: str | None = None
    relax_security: bool = False
    allow_anchors: bool = False
    allow_aliases: bool = False
    allowed_tags: set[str] = Field(default_factory=set)


def sanitize_snippet(text: str, max_len: int = 200) -> str:
    """Replace non-printable characters and truncate for safe echoing."""
    return _NON_PRINTABLE_RE.sub("�", text)[:max_len]


def _issue(
    message: str,
    suggestion: str,
    filename: str | None,
    severity: ValidationSeverity = ValidationSeverity.error,
) -> LintMessage:
    return LintMessage(
        source=LintSource.parser,
        severity=severity,
        message=message,
        kind=MessageKind.syntax,
        suggestion=suggestion,
        path=filename,
    )


def check_file_meta(filename: str | None, mime_type: str | None) -> list[LintMessage]:
    """Extension and MIME allow-list."""
    issues: list[LintMessage] = []
    if filename and not _EXTENSION_RE.search(filename):
        issues.append(
            _issue(
                f"Unsupported file extension for {sanitize_snippet(filename)}. "
                "Only .yaml/.yml allowed",
                "Rename the file to .yaml or .yml",
                filename,
            )
        )
    if mime_type and mime_type.lower() not in YAML_MIME_WHITELIST:
        issues.append(
            _issue(
                f"Unsupported MIME type {sanitize_snippet(mime_type)}.",
                "Use application/yaml or text/yaml",
                filename,
            )
        )
    return issues


def count_lines(content: str) -> int:
    return len(_LINE_BREAK_RE.split(content))


def control_char_ratio(content: str) -> float:
    if not content:
        return 0.0
    control = sum(
        1 for ch in content
        if (ord(ch) < 0x20 and ch not in "\t\n\r") or ord(ch) == 0x7F
    )
    return control / len(content)


def looks_binary(content: str) -> bool:
    return "\x00" in content or control_char_ratio(content) > MAX_CONTROL_RATIO


def looks_like_json(content: str) -> bool:
    trimmed = content.strip()
    if not trimmed or trimmed[0] not in "{[":
        return False
    try:
        json.loads(trimmed)
    except ValueError:
        return False
    return True


def _normalize_tag(tag: str) -> str:
    return tag if tag.startswith("!") else f"!{tag}"


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def check_limits(content: str, filename: str | None = None) -> list[LintMessage]:
    """Size, line-count and binary checks; these never relax."""
    issues: list[LintMessage] = []

    byte_len = len(content.encode("utf-8"))
    if byte_len > MAX_BYTES:
        issues.append(
            _issue(
                f"YAML exceeds max size of 2 MiB ({byte_len} bytes)",
                "Split the file or reduce content size",
                filename,
            )
        )

    line_count = count_lines(content)
    if line_count > MAX_LINES:
        issues.append(
            _issue(
                f"YAML exceeds max lines of {MAX_LINES} ({line_count} lines)",
                "Split the file or reduce line count",
                filename,
            )
        )

    if looks_binary(content):
        issues.append(
            _issue(
                "Binary or non-text content detected",
                "Upload a UTF-8 text YAML document",
                filename,
            )
        )
    return issues


def check_content(content: str, options: GuardOptions) -> list[LintMessage]:
    """Limits, then JSON, anchor/alias and tag checks."""
    filename = options.filename
    issues = check_limits(content, filename)
    relaxed = (
        ValidationSeverity.warning if options.relax_security else ValidationSeverity.error
    )

    if looks_like_json(content):
        issues.append(
            _issue(
                "JSON detected; only YAML content is accepted",
                "Convert the document to YAML before validating",
                filename,
                severity=relaxed,
            )
        )

    if not options.allow_anchors:
        anchors = _unique(_ANCHOR_RE.findall(content))
        if anchors:
            names = ", ".join(f"&{sanitize_snippet(a, 40)}" for a in anchors[:5])
            issues.append(
                _issue(
                    f"YAML anchors are not allowed for security reasons ({names})",
                    "Inline values instead of using &anchor definitions",
                    filename,
                    severity=relaxed,
                )
            )

    if not options.allow_aliases:
        aliases = _unique(_ALIAS_RE.findall(content))
        if aliases:
            names = ", ".join(f"*{sanitize_snippet(a, 40)}" for a in aliases[:5])
            issues.append(
                _issue(
                    f"YAML aliases are not allowed for security reasons ({names})",
                    "Inline the referenced values instead of using *alias",
                    filename,
                    severity=relaxed,
                )
            )

    forbidden = _unique(
        _DOUBLE_BANG_RE.findall(content) + _VERBATIM_TAG_RE.findall(content)
    )
    if forbidden:
        issues.append(
            _issue(
                "Custom YAML tags are not allowed: "
                + ", ".join(sanitize_snippet(t, 40) for t in forbidden[:5]),
                "Remove tag prefixes like !! or !<tag>",
                filename,
            )
        )

    allowed = {_normalize_tag(t) for t in options.allowed_tags}
    custom = [t for t in _unique(_LINE_TAG_RE.findall(content)) if t not in allowed]
    if custom:
        issues.append(
            _issue(
                "Custom YAML tag not in allow-list: "
                + ", ".join(sanitize_snippet(t, 40) for t in custom[:5]),
                "Remove the tag or add it to allowed_tags",
                filename,
            )
        )

    return issues


def guard(content: str, options: GuardOptions | None = None) -> list[LintMessage]:
    """Run every preflight check and return all violations found.

    Any error-severity message means the content must not be parsed.
    """
    if options is None:
        options = GuardOptions()
    return [
        *check_file_meta(options.filename, options.mime_type),
        *check_content(content, options),
    ]
