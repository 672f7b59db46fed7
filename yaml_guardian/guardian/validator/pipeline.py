"""Validation pipeline: runs guard, parser, checkers and dialect engine in order."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from pathlib import Path

from guardian.config import GuardianConfig
from guardian.errors import ParseFailed, ParseSyntaxError
from guardian.specs import load_resource_spec, load_step_schema
from guardian.suggest import analyze_suggestions
from guardian.tools import (
    SubprocessToolRunner,
    ToolRunner,
    run_rules_checker,
    run_style_checker,
    run_template_checker,
)
from guardian.validator.batch import cache_key, find_yaml_files
from guardian.validator.detect import detect_document
from guardian.validator.models import (
    Dialect,
    DirectoryResult,
    FileResult,
    LintMessage,
    LintSource,
    MessageKind,
    ProviderSummary,
    SourceCounts,
    ValidateOptions,
    ValidationResult,
    ValidationSeverity,
    has_errors,
)
from guardian.validator.parser import parse_bounded
from guardian.validator.security import GuardOptions, guard

logger = logging.getLogger(__name__)


def _parse_error(error: ParseFailed) -> LintMessage:
    line = column = None
    if isinstance(error, ParseSyntaxError):
        line, column = error.line, error.column
    return LintMessage(
        source=LintSource.parser,
        severity=ValidationSeverity.error,
        message=str(error),
        line=line,
        column=column,
        kind=MessageKind.syntax,
    )


def summarize(
    provider: Dialect,
    messages: list[LintMessage],
    sources: dict[str, str | None] | None = None,
) -> ProviderSummary:
    """Tally messages per source."""
    tally: Counter = Counter((m.source, m.severity) for m in messages)
    counts: dict[LintSource, SourceCounts] = {}
    for source in dict.fromkeys(m.source for m in messages):
        counts[source] = SourceCounts(
            errors=tally[(source, ValidationSeverity.error)],
            warnings=tally[(source, ValidationSeverity.warning)],
            infos=tally[(source, ValidationSeverity.info)],
        )
    return ProviderSummary(provider=provider, sources=sources or {}, counts=counts)


class Validator:
    """Runs guard, parser, checkers and the dialect engine over one document.

    The config and tool runner are fixed at construction; ``ValidateOptions``
    may override the runner and ruleset per call.
    """

    def __init__(
        self,
        config: GuardianConfig | None = None,
        tool_runner: ToolRunner | None = None,
    ) -> None:
        self.config = config or GuardianConfig()
        self.tool_runner = tool_runner or SubprocessToolRunner(self.config.tool_timeout_ms)
        self._cache: dict[str, FileResult] = {}

    def _sources(self, ruleset_path: str | None) -> dict[str, str | None]:
        return {
            "template_spec_path": self.config.template_spec_path,
            "pipeline_schema_path": self.config.pipeline_schema_path,
            "ruleset_path": ruleset_path,
            "style_checker_image": self.config.style_checker_image,
            "template_checker_image": (
                None if self.config.disable_template_checker
                else self.config.template_checker_image
            ),
        }

    def _finish(
        self,
        provider: Dialect,
        messages: list[LintMessage],
        ruleset_path: str | None,
    ) -> ValidationResult:
        return ValidationResult(
            ok=not has_errors(messages),
            messages=messages,
            provider_summary=summarize(provider, messages, self._sources(ruleset_path)),
        )

    async def validate(
        self, content: str, options: ValidateOptions | None = None,
    ) -> ValidationResult:
        """Run the full validation pipeline on *content*.

        Order: 1. guard → 2. parse → 3. detect → 4. style checker →
        5. template checker → 6. dialect engine → 7. rules checker.
        Guard or parse errors return immediately; checker trouble never
        raises, it shows up as info/warning messages.
        """
        options = options or ValidateOptions()
        runner = options.tool_runner or self.tool_runner
        ruleset_path = options.ruleset_path or self.config.ruleset_path
        provider = options.provider or Dialect.generic

        # Step 1: preflight guard
        messages = guard(
            content,
            GuardOptions(
                filename=options.filename,
                mime_type=options.mime_type,
                relax_security=options.relax_security,
                allow_anchors=options.allow_anchors,
                allow_aliases=options.allow_aliases,
                allowed_tags=options.allowed_tags,
            ),
        )
        if has_errors(messages):
            logger.debug("Guard rejected content with %d messages", len(messages))
            return self._finish(provider, messages, ruleset_path)

        # Step 2: bounded parse
        timeout_ms = (
            options.parse_timeout_ms
            if options.parse_timeout_ms is not None
            else self.config.parse_timeout_ms
        )
        try:
            document = await parse_bounded(
                content,
                timeout_ms,
                simulate_delay_ms=self.config.parse_simulate_delay_ms,
            )
        except ParseFailed as e:
            messages.append(_parse_error(e))
            return self._finish(provider, messages, ruleset_path)

        # Step 3: dialect
        provider = options.provider or detect_document(document)
        logger.debug("Validating as %s", provider.value)

        # Step 4: style checker
        messages.extend(
            await run_style_checker(
                runner,
                content,
                image=self.config.style_checker_image,
                timeout_ms=self.config.tool_timeout_ms,
            )
        )

        # Step 5: template rules checker
        if provider == Dialect.template and not self.config.disable_template_checker:
            messages.extend(
                await run_template_checker(
                    runner,
                    options.filename,
                    image=self.config.template_checker_image,
                    timeout_ms=self.config.tool_timeout_ms,
                )
            )

        # Step 6: dialect engine
        analysis = analyze_suggestions(
            document,
            provider,
            resource_spec=(
                load_resource_spec(self.config.template_spec_path)
                if provider == Dialect.template else None
            ),
            step_schema=(
                load_step_schema(self.config.pipeline_schema_path)
                if provider == Dialect.pipeline else None
            ),
        )
        messages.extend(analysis.messages)

        # Step 7: declarative rules checker
        if ruleset_path:
            messages.extend(
                await run_rules_checker(
                    runner,
                    content,
                    ruleset_path,
                    command=self.config.rules_checker_command,
                    timeout_ms=self.config.tool_timeout_ms,
                )
            )

        logger.debug("Validation produced %d messages", len(messages))
        return self._finish(provider, messages, ruleset_path)

    async def _validate_file(
        self, path: Path, options: ValidateOptions, semaphore: asyncio.Semaphore,
    ) -> FileResult:
        async with semaphore:
            content = path.read_text(encoding="utf-8", errors="replace")
            file_options = options.model_copy(update={"filename": str(path)})
            key = cache_key(content, file_options)
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            result = await self.validate(content, file_options)
            file_result = FileResult(file=str(path), ok=result.ok, messages=result.messages)
            self._cache[key] = file_result
            return file_result

    async def validate_directory(
        self, path: str | Path, options: ValidateOptions | None = None,
    ) -> DirectoryResult:
        """Validate every YAML file under *path* with bounded concurrency.

        Results are cached per instance, keyed on content and options, so
        re-validating an unchanged tree is cheap.
        """
        options = options or ValidateOptions()
        files = find_yaml_files(path)
        semaphore = asyncio.Semaphore(self.config.batch_concurrency)
        results = await asyncio.gather(
            *(self._validate_file(f, options, semaphore) for f in files)
        )
        logger.info("Validated %d files under %s", len(results), path)
        return DirectoryResult(ok=all(r.ok for r in results), results=list(results))


async def validate(
    content: str, options: ValidateOptions | None = None,
) -> ValidationResult:
    """Validate with a default-configured Validator."""
    return await Validator().validate(content, options)
