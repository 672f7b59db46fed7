"""Suggestion engine for CI-pipeline documents."""

from __future__ import annotations

from typing import Any

from guardian.specs.pipeline_spec import StepSchema, load_step_schema
from guardian.suggest.base import Findings, apply_with
from guardian.suggest.fuzzy import best_match
from guardian.suggest.models import (
    AnalysisResult,
    AppliedSuggestions,
    RenameField,
    SetField,
    SuggestionKind,
)
from guardian.suggest.nodes import (
    NodeKind,
    PathSegment,
    as_mapping,
    as_sequence,
    is_addressable,
    node_kind,
)

SCRIPT_STEP_KEYS = ("script", "bash", "powershell", "pwsh")


def _check_root_keys(findings: Findings, root: dict, schema: StepSchema) -> None:
    for key in root:
        if key in schema.allowed_root_keys:
            continue
        guess = best_match(str(key), schema.allowed_root_keys)
        if guess is None:
            findings.warn([key], f"Unknown root key {key}")
            continue
        findings.suggest(
            [key],
            f"Unknown root key {key}. Did you mean {guess}?",
            SuggestionKind.rename,
            fix=(
                RenameField(path=[], from_key=key, to_key=guess)
                if is_addressable([key]) else None
            ),
        )


def _sequence_field(
    findings: Findings, container: dict, key: str, base: list[PathSegment],
) -> list | None:
    """Return ``container[key]`` when it is a sequence; flag it when present
    with any other shape."""
    if key not in container:
        return None
    value = as_sequence(container[key])
    if value is None:
        findings.suggest([*base, key], f"{key} should be an array", SuggestionKind.type)
    return value


def _check_step_types(
    findings: Findings, step: dict, discriminator: str, path: list[PathSegment],
) -> None:
    value = step[discriminator]
    if discriminator in SCRIPT_STEP_KEYS and node_kind(value) != NodeKind.string:
        findings.suggest(
            [*path, discriminator], f"{discriminator} should be a string", SuggestionKind.type,
        )
    if discriminator != "task":
        return
    if node_kind(value) != NodeKind.string:
        findings.suggest(
            [*path, "task"],
            "task should be a string identifier like AzureCLI@2",
            SuggestionKind.type,
        )
    if "inputs" in step and as_mapping(step["inputs"]) is None:
        findings.suggest([*path, "inputs"], "inputs should be an object", SuggestionKind.type)


def _check_steps(
    findings: Findings, steps: list, base: list[PathSegment], schema: StepSchema,
) -> None:
    for i, raw_step in enumerate(steps):
        path = [*base, i]
        if raw_step is None:
            findings.suggest(
                path, "empty step - add a step key like script/task", SuggestionKind.add,
            )
            continue
        step = as_mapping(raw_step)
        if step is None:
            findings.suggest(path, "step should be an object", SuggestionKind.type)
            continue
        if not step:
            findings.suggest(
                path, "empty step - add a step key like script/task", SuggestionKind.add,
            )
            continue

        present = [k for k in step if k in schema.known_step_keys]
        if present:
            _check_step_types(findings, step, present[0], path)
            continue

        if len(step) > 1:
            findings.warn(path, "No known step discriminator found")
            continue
        key = next(iter(step))
        guess = best_match(str(key), schema.known_step_keys)
        if guess is None:
            findings.warn([*path, key], f"Unknown step key {key}")
            continue
        findings.suggest(
            [*path, key],
            f"Unknown step key {key}. Did you mean {guess}?",
            SuggestionKind.rename,
            fix=(
                RenameField(path=path, from_key=key, to_key=guess)
                if is_addressable([key]) else None
            ),
        )


def _check_jobs(
    findings: Findings, jobs: list, base: list[PathSegment], schema: StepSchema,
) -> None:
    for j, raw_job in enumerate(jobs):
        path = [*base, j]
        job = as_mapping(raw_job)
        if job is None:
            findings.suggest(path, "job should be an object", SuggestionKind.type)
            continue
        steps = _sequence_field(findings, job, "steps", path)
        if steps is not None:
            _check_steps(findings, steps, [*path, "steps"], schema)
        elif job.get("steps") is None:
            findings.suggest(
                [*path, "steps"],
                "Job missing steps array",
                SuggestionKind.add,
                fix=SetField(path=[*path, "steps"], value=[]),
            )


def analyze(document: Any, schema: StepSchema | None = None) -> AnalysisResult:
    """Check root keys, steps, jobs and stage jobs against *schema*."""
    if schema is None:
        schema = load_step_schema()
    findings = Findings()

    root = as_mapping(document)
    if root is None:
        return findings.result()

    _check_root_keys(findings, root, schema)

    steps = _sequence_field(findings, root, "steps", [])
    if steps is not None:
        _check_steps(findings, steps, ["steps"], schema)

    jobs = _sequence_field(findings, root, "jobs", [])
    if jobs is not None:
        _check_jobs(findings, jobs, ["jobs"], schema)

    stages = _sequence_field(findings, root, "stages", [])
    for s, raw_stage in enumerate(stages or []):
        stage = as_mapping(raw_stage)
        if stage is None:
            findings.suggest(["stages", s], "stage should be an object", SuggestionKind.type)
            continue
        stage_jobs = _sequence_field(findings, stage, "jobs", ["stages", s])
        if stage_jobs is not None:
            _check_jobs(findings, stage_jobs, ["stages", s, "jobs"], schema)

    return findings.result()


def apply_suggestions(
    content: str, selected: list[int], schema: StepSchema | None = None,
) -> AppliedSuggestions:
    return apply_with(content, selected, lambda doc: analyze(doc, schema))
