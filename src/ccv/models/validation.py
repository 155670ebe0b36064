"""Validation outcome models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from ccv.models.conversation import Conversation


class ValidationIssue(BaseModel):
    """One schema violation, located by a dot-joined field path."""

    model_config = ConfigDict(frozen=True)

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class BatchFailure:
    """A conversation of a batch that failed validation."""

    index: int
    name: str
    issues: tuple[ValidationIssue, ...] = ()


@dataclass(frozen=True, slots=True)
class BatchValidation:
    """Partial-success result of validating a list of conversations."""

    total: int = 0
    valid: tuple[Conversation, ...] = ()
    failures: tuple[BatchFailure, ...] = ()

    @property
    def valid_count(self) -> int:
        return len(self.valid)

    @property
    def invalid_count(self) -> int:
        return len(self.failures)

    def __str__(self) -> str:
        return f"{self.valid_count} of {self.total} conversations valid"
