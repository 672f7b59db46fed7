"""Tests for the preflight guard."""

from __future__ import annotations

from guardian.validator.models import LintSource, MessageKind, ValidationSeverity
from guardian.validator.security import (
    MAX_LINES,
    GuardOptions,
    check_file_meta,
    control_char_ratio,
    count_lines,
    guard,
    looks_like_json,
    sanitize_snippet,
)


def _errors(messages):
    return [m for m in messages if m.severity == ValidationSeverity.error]


class TestFileMeta:
    def test_yaml_extensions_accepted(self) -> None:
        assert check_file_meta("a.yaml", None) == []
        assert check_file_meta("B.YML", None) == []

    def test_other_extension_rejected(self) -> None:
        issues = check_file_meta("template.json", None)
        assert len(issues) == 1
        assert "extension" in issues[0].message

    def test_mime_whitelist(self) -> None:
        assert check_file_meta(None, "application/x-yaml") == []
        issues = check_file_meta(None, "text/plain")
        assert len(issues) == 1
        assert "MIME" in issues[0].message


class TestLimits:
    def test_oversized_document_rejected(self) -> None:
        content = "a: " + "x" * (2 * 1024 * 1024) + "\n"
        errors = _errors(guard(content))
        assert any("max size" in m.message for m in errors)

    def test_too_many_lines_rejected(self) -> None:
        content = "a: 1\n" * (MAX_LINES + 1)
        errors = _errors(guard(content))
        assert any("max lines" in m.message for m in errors)

    def test_count_lines_handles_all_breaks(self) -> None:
        assert count_lines("a\r\nb\rc\nd") == 4

    def test_nul_byte_is_binary(self) -> None:
        errors = _errors(guard("a: 1\x00\n"))
        assert [m.message for m in errors] == ["Binary or non-text content detected"]

    def test_control_ratio(self) -> None:
        assert control_char_ratio("") == 0.0
        assert control_char_ratio("\t\n\r") == 0.0
        assert control_char_ratio("\x01abc") == 0.25


class TestJsonDetection:
    def test_json_object_detected(self) -> None:
        assert looks_like_json('{"a": 1}')
        errors = _errors(guard('{"a": 1}'))
        assert errors[0].message.startswith("JSON detected")

    def test_flow_yaml_is_not_json(self) -> None:
        assert not looks_like_json("{a: 1}")
        assert guard("{a: 1}") == []

    def test_relaxed_json_is_warning(self) -> None:
        messages = guard("[1, 2]", GuardOptions(relax_security=True))
        assert len(messages) == 1
        assert messages[0].severity == ValidationSeverity.warning


class TestAnchorsAndAliases:
    def test_anchor_is_single_error(self) -> None:
        messages = guard("base: &anchor\n  a: 1\n")
        assert len(messages) == 1
        assert messages[0].severity == ValidationSeverity.error
        assert "anchor" in messages[0].message
        assert messages[0].source == LintSource.parser
        assert messages[0].kind == MessageKind.syntax

    def test_alias_reported_independently_of_anchor(self) -> None:
        content = "base: &b\n  a: 1\nother: *b\n"
        messages = guard(content)
        assert len(messages) == 2
        assert "anchors" in messages[0].message
        assert "aliases" in messages[1].message

    def test_alias_without_anchor(self) -> None:
        messages = guard("other: *b\n")
        assert len(messages) == 1
        assert "aliases" in messages[0].message

    def test_relaxed_downgrades_to_warning(self) -> None:
        content = "base: &b\n  a: 1\nother: *b\n"
        messages = guard(content, GuardOptions(relax_security=True))
        assert {m.severity for m in messages} == {ValidationSeverity.warning}

    def test_allow_flags(self) -> None:
        content = "base: &b\n  a: 1\nother: *b\n"
        options = GuardOptions(allow_anchors=True, allow_aliases=True)
        assert guard(content, options) == []

    def test_ampersand_inside_scalar_ignored(self) -> None:
        assert guard("url: http://x/?a=1&b=2\n") == []


class TestTags:
    def test_double_bang_always_error(self) -> None:
        messages = guard("a: !!python/object:os.system x\n", GuardOptions(relax_security=True))
        assert len(_errors(messages)) == 1
        assert "Custom YAML tags are not allowed" in messages[0].message

    def test_verbatim_tag_error(self) -> None:
        messages = guard("a: !<tag:yaml.org,2002:str> x\n")
        assert any("not allowed" in m.message for m in _errors(messages))

    def test_line_tag_needs_allow_list(self) -> None:
        content = "Resources:\n  - !Ref Bucket\n"
        messages = guard(content)
        assert "not in allow-list: !Ref" in messages[0].message

    def test_allowed_tag_with_or_without_bang(self) -> None:
        content = "Resources:\n  - !Ref Bucket\n"
        assert guard(content, GuardOptions(allowed_tags={"Ref"})) == []
        assert guard(content, GuardOptions(allowed_tags={"!Ref"})) == []

    def test_anchor_and_tag_both_reported(self) -> None:
        content = "a: &x 1\nb:\n  - !Custom 2\n"
        messages = guard(content)
        assert len(messages) == 2


def test_sanitize_snippet() -> None:
    assert sanitize_snippet("ab\x01c") == "ab�c"
    assert len(sanitize_snippet("x" * 500)) == 200
