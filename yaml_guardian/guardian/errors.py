"""Exception hierarchy shared by the validation core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from guardian.validator.models import LintMessage


class GuardianError(Exception):
    """Base class for all yaml-guardian errors."""


class SecurityRejected(GuardianError):
    """Raised when preflight guards refuse the input outright."""

    def __init__(self, messages: list[LintMessage]) -> None:
        self.messages = messages
        summary = "; ".join(m.message for m in messages) or "content rejected"
        super().__init__(summary)


class ParseFailed(GuardianError):
    """YAML could not be turned into a document."""


class ParseTimeout(ParseFailed):
    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"YAML parse exceeded time budget of {timeout_ms} ms")


class ParseSyntaxError(ParseFailed):
    def __init__(
        self, message: str, line: int | None = None, column: int | None = None,
    ) -> None:
        self.line = line
        self.column = column
        super().__init__(message)


class CheckerUnavailable(GuardianError):
    """An external checker could not be launched at all."""


class CheckerOutputMalformed(GuardianError):
    """An external checker ran but its output could not be decoded."""


class SpecUnavailable(GuardianError):
    """A reference spec override could not be read or understood."""
