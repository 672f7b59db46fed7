"""Tests for the bounded YAML parser."""

from __future__ import annotations

import math

import pytest

from guardian.errors import ParseFailed, ParseSyntaxError, ParseTimeout
from guardian.validator.parser import clamp_timeout, dump_document, load_document, parse_bounded


class TestClampTimeout:
    def test_default(self) -> None:
        assert clamp_timeout(None) == 5000
        assert clamp_timeout(math.inf) == 5000
        assert clamp_timeout(math.nan) == 5000

    def test_bounds(self) -> None:
        assert clamp_timeout(0) == 1
        assert clamp_timeout(-50) == 1
        assert clamp_timeout(60_000) == 10_000
        assert clamp_timeout(250) == 250


class TestParseBounded:
    @pytest.mark.asyncio
    async def test_parses_mapping(self) -> None:
        doc = await parse_bounded("a: 1\nb: [x, y]\n")
        assert doc["a"] == 1
        assert list(doc["b"]) == ["x", "y"]

    @pytest.mark.asyncio
    async def test_empty_document_is_none(self) -> None:
        assert await parse_bounded("") is None

    @pytest.mark.asyncio
    async def test_syntax_error_has_position(self) -> None:
        with pytest.raises(ParseSyntaxError) as exc_info:
            await parse_bounded("foo: [1\n")
        assert exc_info.value.line is not None
        assert exc_info.value.line >= 1

    @pytest.mark.asyncio
    async def test_duplicate_keys_rejected(self) -> None:
        with pytest.raises(ParseFailed):
            await parse_bounded("a: 1\na: 2\n")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        with pytest.raises(ParseTimeout) as exc_info:
            await parse_bounded("a: 1\n", timeout_ms=10, simulate_delay_ms=300)
        assert exc_info.value.timeout_ms == 10
        assert isinstance(exc_info.value, ParseFailed)

    @pytest.mark.asyncio
    async def test_core_schema_booleans(self) -> None:
        doc = await parse_bounded("a: yes\nb: true\n")
        assert doc["a"] == "yes"
        assert doc["b"] is True


class TestRoundTrip:
    def test_comments_and_order_survive(self) -> None:
        content = "# header\nz: 1  # trailing\na:\n  - x\n"
        assert dump_document(load_document(content)) == content

    def test_sequence_indentation(self) -> None:
        content = "steps:\n  - script: echo hi\n"
        assert dump_document(load_document(content)) == content
