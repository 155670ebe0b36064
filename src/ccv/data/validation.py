"""Validate decoded JSON against the accepted conversation export shapes."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails
from result import Err, Ok, Result

from ccv.models.conversation import (
    Conversation,
    ConversationListItem,
    IndividualConversation,
)
from ccv.models.validation import BatchFailure, BatchValidation, ValidationIssue

logger = logging.getLogger(__name__)

# Tried in order; on a tie in error count the earlier shape is reported.
_SHAPES: tuple[type[IndividualConversation] | type[ConversationListItem], ...] = (
    IndividualConversation,
    ConversationListItem,
)

# pydantic inserts the discriminator tag into error locations of
# ``chat_messages.<i>.content.<j>``; it is not part of the document.
_CONTENT_ITEM_PREFIX = ("chat_messages", None, "content", None)

_INDEX_PART = re.compile(r"^\d+$")

_FRIENDLY_MESSAGES: dict[tuple[str, str], str] = {
    ("uuid", "missing"): "Conversation UUID is required",
    ("name", "missing"): "Conversation name is required",
    ("created_at", "missing"): "Creation date is required",
    ("updated_at", "missing"): "Update date is required",
    ("chat_messages", "missing"): "chat_messages array is required",
    ("chat_messages", "list_type"): "chat_messages must be an array of messages",
    ("chat_messages.*.content", "missing"): "Message content is required",
    ("chat_messages.*.content", "list_type"): "Message content must be an array",
}


def validate_conversation(raw: object) -> Result[Conversation, list[ValidationIssue]]:
    """Validate one decoded conversation against every accepted shape.

    Returns:
        Ok with the first shape that accepts ``raw``, or Err with the issues
        of the shape that came closest (fewest issues).
    """
    if not isinstance(raw, dict):
        message = f"Expected a conversation object, got {_kind(raw)}"
        return Err([ValidationIssue(path="", message=message)])

    attempts: list[list[ValidationIssue]] = []
    for shape in _SHAPES:
        try:
            return Ok(shape.model_validate(raw))
        except PydanticValidationError as exc:
            attempts.append(issues_from_error(exc, raw))

    return Err(min(attempts, key=len))


def validate_batch(raw_items: Sequence[object]) -> BatchValidation:
    """Validate each conversation independently, keeping the valid ones."""
    valid: list[Conversation] = []
    failures: list[BatchFailure] = []

    for index, raw in enumerate(raw_items):
        result = validate_conversation(raw)
        if isinstance(result, Ok):
            valid.append(result.ok_value)
            continue
        name = _display_name(raw, index)
        logger.warning(
            "Conversation %d (%s) failed validation with %d issue(s)",
            index,
            name,
            len(result.err_value),
        )
        failures.append(BatchFailure(index=index, name=name, issues=tuple(result.err_value)))

    return BatchValidation(total=len(raw_items), valid=tuple(valid), failures=tuple(failures))


def issues_from_error(
    exc: PydanticValidationError, raw: object = None
) -> list[ValidationIssue]:
    """Convert a pydantic error into deduplicated document-path issues."""
    issues: list[ValidationIssue] = []
    seen: set[ValidationIssue] = set()
    for error in exc.errors(include_url=False):
        path = document_path(error["loc"], raw)
        issue = ValidationIssue(path=path, message=_message_for(path, error))
        if issue not in seen:
            seen.add(issue)
            issues.append(issue)
    return issues


def document_path(loc: tuple[int | str, ...], raw: object = None) -> str:
    """Turn a pydantic error location into a dot-joined document path."""
    parts: list[str] = []
    node: object = raw
    for element in loc:
        if _is_union_tag(parts, node, element):
            continue
        parts.append(str(element))
        node = _child(node, element)
    return ".".join(parts)


def _is_union_tag(parts: list[str], node: object, element: int | str) -> bool:
    if len(parts) != len(_CONTENT_ITEM_PREFIX):
        return False
    for part, expected in zip(parts, _CONTENT_ITEM_PREFIX, strict=True):
        if expected is None:
            if not _INDEX_PART.match(part):
                return False
        elif part != expected:
            return False
    return isinstance(node, dict) and node.get("type") == element


def _child(node: object, element: int | str) -> object:
    if isinstance(node, dict):
        return node.get(element)
    if isinstance(node, list) and isinstance(element, int) and 0 <= element < len(node):
        return node[element]
    return None


def _message_for(path: str, error: ErrorDetails) -> str:
    pattern = ".".join("*" if _INDEX_PART.match(part) else part for part in path.split("."))
    return _FRIENDLY_MESSAGES.get((pattern, error["type"]), error["msg"])


def _display_name(raw: object, index: int) -> str:
    if isinstance(raw, dict):
        name = raw.get("name")
        if isinstance(name, str) and name:
            return name
    return f"Conversation {index + 1}"


def _kind(value: object) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list():
            return "array"
        case _:
            return type(value).__name__

