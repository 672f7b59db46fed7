"""Tests for the subprocess tool runner."""

from __future__ import annotations

import sys

import pytest

from guardian.tools.runner import SubprocessToolRunner, ToolResult


class TestToolResult:
    def test_launch_failed_codes(self) -> None:
        for code in (124, 125, 126, 127):
            assert ToolResult(exit_code=code).launch_failed
        for code in (0, 1, 2):
            assert not ToolResult(exit_code=code).launch_failed


class TestSubprocessToolRunner:
    @pytest.mark.asyncio
    async def test_stdin_round_trip(self) -> None:
        runner = SubprocessToolRunner()
        result = await runner.run(
            sys.executable,
            ["-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"],
            input="hello",
        )
        assert result.exit_code == 0
        assert result.stdout == "HELLO"

    @pytest.mark.asyncio
    async def test_exit_code_and_stderr(self) -> None:
        runner = SubprocessToolRunner()
        result = await runner.run(
            sys.executable, ["-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
        )
        assert result.exit_code == 3
        assert result.stderr == "bad"

    @pytest.mark.asyncio
    async def test_missing_command_is_127(self) -> None:
        result = await SubprocessToolRunner().run("definitely-not-a-real-tool-xyz", [])
        assert result.exit_code == 127
        assert result.launch_failed

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self) -> None:
        runner = SubprocessToolRunner(default_timeout_ms=200)
        result = await runner.run(sys.executable, ["-c", "import time; time.sleep(10)"])
        assert result.exit_code == 124
        assert "timed out" in result.stderr
