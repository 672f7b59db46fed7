"""Shared test fixtures and configuration."""

import json
import os
import sys
from pathlib import Path

# Add yaml_guardian/ to Python path so `from guardian.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "yaml_guardian"))

import pytest

from guardian.tools.runner import ToolResult, ToolRunner

os.environ["GUARDIAN_DEV_MODE"] = "true"


class FakeToolRunner(ToolRunner):
    """Records every call and answers from a command -> ToolResult table.

    Commands without an entry behave like a missing binary (exit 127).
    """

    def __init__(self, responses: dict[str, ToolResult] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, list[str], str | None]] = []

    async def run(
        self,
        command: str,
        args: list[str],
        *,
        cwd: str | None = None,
        input: str | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResult:
        self.calls.append((command, list(args), input))
        return self.responses.get(command, ToolResult(exit_code=127, stderr="not found"))

    def commands(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def missing_tools() -> FakeToolRunner:
    """A runner on which no external tool exists."""
    return FakeToolRunner()


@pytest.fixture
def template_spec_file(tmp_path: Path) -> Path:
    spec = {
        "ResourceTypes": {
            "AWS::S3::Bucket": {
                "Properties": {
                    "BucketName": {"Required": True, "PrimitiveType": "String"},
                    "Tags": {"Type": "List"},
                    "VersioningConfiguration": {"Type": "VersioningConfiguration"},
                },
            },
            "AWS::SQS::Queue": {
                "Properties": {
                    "DelaySeconds": {"PrimitiveType": "Integer"},
                    "FifoQueue": {"PrimitiveType": "Boolean"},
                },
            },
        }
    }
    path = tmp_path / "resource-spec.json"
    path.write_text(json.dumps(spec))
    return path
