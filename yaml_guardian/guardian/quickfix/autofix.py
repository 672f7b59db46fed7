"""Deterministic, non-semantic auto-fixes for YAML documents."""

from __future__ import annotations

import logging
import re
from io import StringIO
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.constructor import SafeConstructor

from guardian.errors import SecurityRejected
from guardian.specs import ResourceSpec, StepSchema
from guardian.suggest import analyze_suggestions, apply_suggestions
from guardian.suggest.models import SuggestionKind
from guardian.tools.runner import SubprocessToolRunner, ToolRunner
from guardian.validator.detect import detect_document
from guardian.validator.parser import load_document, round_trip_yaml
from guardian.validator.security import check_limits

logger = logging.getLogger(__name__)

_DOCUMENT_START_RE = re.compile(r"^---(\s|$)", re.MULTILINE)

# Nodes that alias expansion may add on top of the document's own nodes.
MAX_ALIAS_EXPANSION = 10_000


class AutoFixOptions(BaseModel):
    """Which optional passes run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    rename_typos: bool = True
    rules_fix: bool = False
    ruleset_path: str | None = None
    rules_checker_command: list[str] = Field(
        default_factory=lambda: ["npx", "-y", "@stoplight/spectral-cli"]
    )
    tool_runner: Any = None
    resource_spec: ResourceSpec | None = None
    step_schema: StepSchema | None = None


class AutoFixResult(BaseModel):
    content: str
    fixes_applied: list[str] = Field(default_factory=list)


class _LastKeyWinsConstructor(SafeConstructor):
    """Duplicate keys keep their first position but take the last value."""

    def check_mapping_key(self, node, key_node, mapping, key, value):
        if key in mapping:
            mapping[key] = value
            return False
        return True


def _plain_load(content: str) -> Any:
    """Load without round-trip metadata, collapsing duplicate keys."""
    yaml = YAML(typ="safe", pure=True)
    yaml.Constructor = _LastKeyWinsConstructor
    return yaml.load(content)


def _dump_inline(data: Any, explicit_start: bool = False) -> str:
    """Dump with anchors/aliases expanded in place."""
    yaml = round_trip_yaml()
    yaml.explicit_start = explicit_start
    yaml.representer.ignore_aliases = lambda *args: True
    buf = StringIO()
    yaml.dump(data, buf)
    return buf.getvalue()


def _children(node: Any) -> list:
    if isinstance(node, dict):
        return [*node.keys(), *node.values()]
    if isinstance(node, list):
        return node
    return []


def _distinct_nodes(data: Any) -> int:
    """Node count with each shared mapping or sequence walked once."""
    seen: set[int] = set()
    count = 0
    stack = [data]
    while stack:
        node = stack.pop()
        count += 1
        if isinstance(node, (dict, list)):
            if id(node) in seen:
                continue
            seen.add(id(node))
        stack.extend(_children(node))
    return count


def _expands_within(data: Any, budget: int) -> bool:
    """Whether *data* with every alias expanded in place has at most *budget* nodes."""
    count = 0
    stack = [data]
    while stack:
        node = stack.pop()
        count += 1
        if count > budget:
            return False
        stack.extend(_children(node))
    return True


def normalize_structure(content: str) -> str | None:
    """Re-serialise through a plain load.

    Returns None when the content won't parse or when inlining its aliases
    would grow the document past ``MAX_ALIAS_EXPANSION`` extra nodes.
    """
    try:
        data = _plain_load(content)
    except YAMLError as e:
        logger.debug("Skipping structural fixes: %s", e)
        return None
    if data is None:
        return content
    if not _expands_within(data, _distinct_nodes(data) + MAX_ALIAS_EXPANSION):
        logger.warning(
            "Skipping structural fixes: aliases expand past %d extra nodes",
            MAX_ALIAS_EXPANSION,
        )
        return None
    return _dump_inline(data, explicit_start=content.lstrip().startswith("---"))


def rename_typos(
    content: str,
    resource_spec: ResourceSpec | None = None,
    step_schema: StepSchema | None = None,
) -> str:
    """Apply every fixable ``rename`` suggestion for the detected dialect."""
    document = load_document(content)
    dialect = detect_document(document)
    analysis = analyze_suggestions(
        document, dialect, resource_spec=resource_spec, step_schema=step_schema,
    )
    selected = [
        i for i, s in enumerate(analysis.suggestions)
        if s.kind == SuggestionKind.rename and s.fixable
    ]
    if not selected:
        return content
    return apply_suggestions(
        content, selected, dialect, resource_spec=resource_spec, step_schema=step_schema,
    ).content


async def _rules_fix(content: str, options: AutoFixOptions) -> str | None:
    runner: ToolRunner = options.tool_runner or SubprocessToolRunner()
    cmd = options.rules_checker_command
    args = [*cmd[1:], "lint", "--stdin", "--fix"]
    if options.ruleset_path:
        args += ["-r", options.ruleset_path]
    result = await runner.run(cmd[0], args, input=content)
    # 0 = clean, 1 = issues found and fixed
    if result.stdout and result.exit_code <= 1:
        return result.stdout
    logger.info("Rules fix pass produced nothing (exit %d)", result.exit_code)
    return None


async def auto_fix(content: str, options: AutoFixOptions | None = None) -> AutoFixResult:
    """Run the fix passes in order and report which ones changed the content.

    Raises SecurityRejected for oversized or binary input.
    """
    options = options or AutoFixOptions()
    rejected = check_limits(content)
    if rejected:
        raise SecurityRejected(rejected)

    fixes: list[str] = []
    current = content

    if "\r\n" in current:
        current = current.replace("\r\n", "\n")
        fixes.append("normalize-eol")

    if "\t" in current:
        current = current.replace("\t", "  ")
        fixes.append("tabs-to-spaces")

    normalized = normalize_structure(current)
    if normalized is not None:
        if normalized != current:
            current = normalized
            fixes.append("normalize-structure")

        if options.rename_typos:
            renamed = rename_typos(current, options.resource_spec, options.step_schema)
            if renamed != current:
                current = renamed
                fixes.append("rename-typos")

    if options.rules_fix:
        fixed = await _rules_fix(current, options)
        if fixed is not None and fixed != current:
            current = fixed
            fixes.append("rules-fix")

    if not _DOCUMENT_START_RE.search(current):
        current = f"---\n{current}"
        fixes.append("add-document-start")

    if not current.endswith("\n"):
        current += "\n"
        fixes.append("ensure-trailing-newline")

    logger.debug("Auto-fix applied: %s", ", ".join(fixes) or "nothing")
    return AutoFixResult(content=current, fixes_applied=fixes)
