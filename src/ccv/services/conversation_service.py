"""Conversation loading service — JSON text to validated conversations."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from ccv.data.diagnostics import (
    format_batch_report,
    format_validation_errors,
    validation_error_details,
)
from ccv.data.line_index import pretty_json
from ccv.data.validation import validate_batch, validate_conversation

if TYPE_CHECKING:
    from pathlib import Path

    from ccv.config import Config
    from ccv.models.conversation import Conversation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Conversations that loaded, plus a warning when some were skipped."""

    conversations: tuple[Conversation, ...]
    total: int
    warning: str = ""
    detail: str = ""

    @property
    def skipped(self) -> int:
        return self.total - len(self.conversations)


@dataclass(frozen=True, slots=True)
class LoadFailure:
    """Why nothing could be loaded: a short summary and the full detail."""

    summary: str
    detail: str = ""

    def __str__(self) -> str:
        return self.summary


class ConversationService:
    """Service for loading conversation exports."""

    def __init__(self, config: Config) -> None:
        self._config = config

    def load_file(self, path: Path) -> Result[LoadResult, LoadFailure]:
        """Read and load a JSON export from ``path``."""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", path, exc)
            return Err(LoadFailure(f"Could not read {path}: {exc}"))
        return self.load_text(text)

    def load_text(self, text: str) -> Result[LoadResult, LoadFailure]:
        """Decode JSON ``text`` and validate the conversation(s) it holds."""
        if not text.strip():
            return Err(LoadFailure("No JSON data provided."))
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            if exc.pos >= len(text.rstrip()):
                summary = (
                    "The JSON appears to be incomplete. "
                    "Check that the entire export was copied."
                )
            else:
                summary = f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})"
            return Err(LoadFailure(summary, detail=str(exc)))
        return self.load_value(data)

    def load_value(self, data: object) -> Result[LoadResult, LoadFailure]:
        """Validate an already decoded JSON value (one conversation or a list)."""
        if isinstance(data, list):
            return self._load_batch(data)

        result = validate_conversation(data)
        if isinstance(result, Ok):
            return Ok(LoadResult(conversations=(result.ok_value,), total=1))

        issues = result.err_value
        text = pretty_json(data, self._config.json_indent)
        summary = format_validation_errors(text, issues, self._config.max_displayed_errors)
        return Err(
            LoadFailure(
                summary="This file cannot be loaded due to validation errors:\n" + summary,
                detail=validation_error_details(text, issues),
            )
        )

    def _load_batch(self, data: list[object]) -> Result[LoadResult, LoadFailure]:
        if not data:
            return Err(LoadFailure("JSON array is empty."))

        batch = validate_batch(data)
        logger.info("Validated %s", batch)
        if not batch.failures:
            return Ok(LoadResult(conversations=batch.valid, total=batch.total))

        text = pretty_json(data, self._config.json_indent)
        summary = format_batch_report(
            text,
            batch,
            max_failures=self._config.max_reported_failures,
            errors_per_failure=self._config.errors_per_failure,
        )
        detail = format_batch_report(text, batch, max_failures=None, errors_per_failure=None)
        if not batch.valid:
            return Err(LoadFailure(summary, detail))
        return Ok(
            LoadResult(conversations=batch.valid, total=batch.total, warning=summary, detail=detail)
        )
