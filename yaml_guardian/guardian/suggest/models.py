"""Suggestion and edit-operation models."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from guardian.validator.models import LintMessage


class SetField(BaseModel):
    """Set ``path`` to ``value``, creating missing intermediate mappings."""

    model_config = ConfigDict(frozen=True)

    op: Literal["set"] = "set"
    path: list[str | int]
    value: Any = None


class RenameField(BaseModel):
    """Rename key ``from_key`` to ``to_key`` in the mapping at ``path``."""

    model_config = ConfigDict(frozen=True)

    op: Literal["rename"] = "rename"
    path: list[str | int] = Field(default_factory=list)
    from_key: str | int
    to_key: str


class InsertElement(BaseModel):
    """Insert ``value`` at ``index`` in the sequence at ``path``."""

    model_config = ConfigDict(frozen=True)

    op: Literal["insert"] = "insert"
    path: list[str | int]
    index: int
    value: Any = None


EditOperation = Annotated[
    Union[SetField, RenameField, InsertElement],
    Field(discriminator="op"),
]


class SuggestionKind(str, Enum):
    add = "add"
    rename = "rename"
    type = "type"


class Suggestion(BaseModel):
    """A repair proposal, addressable by its index in one analysis."""

    path: str
    message: str
    kind: SuggestionKind
    fix: EditOperation | None = None

    @property
    def fixable(self) -> bool:
        return self.fix is not None


class AnalysisResult(BaseModel):
    suggestions: list[Suggestion] = Field(default_factory=list)
    messages: list[LintMessage] = Field(default_factory=list)


class AppliedSuggestions(BaseModel):
    content: str
    applied: list[int] = Field(default_factory=list)
