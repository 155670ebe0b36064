"""Search service — find and filter conversations by text."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from result import Err, Ok, Result

from ccv.models.conversation import TextContent
from ccv.models.search import SearchMatch, SearchResults

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ccv.config import Config
    from ccv.models.conversation import Conversation

logger = logging.getLogger(__name__)

type SortField = Literal["created_at", "updated_at"]
type SortOrder = Literal["asc", "desc"]
type SearchMode = Literal["title", "full"]

_UNTITLED = "Untitled Conversation"


class SearchService:
    """Service for searching loaded conversations."""

    def __init__(self, config: Config) -> None:
        self._config = config

    def find_matches(
        self,
        conversation: Conversation,
        query: str,
        *,
        use_regex: bool = False,
        case_sensitive: bool = False,
        max_matches: int | None = None,
    ) -> Result[list[SearchMatch], str]:
        """Find up to ``max_matches`` occurrences of ``query`` in text content."""
        if not query.strip():
            return Ok([])
        pattern = _compile(query, use_regex=use_regex, case_sensitive=case_sensitive)
        if isinstance(pattern, Err):
            return pattern
        limit = self._config.max_search_matches if max_matches is None else max_matches
        return Ok(self._matches(conversation, pattern.ok_value, limit))

    def filter_conversations(
        self,
        conversations: Iterable[Conversation],
        query: str,
        *,
        mode: SearchMode = "full",
        use_regex: bool = False,
        case_sensitive: bool = False,
    ) -> Result[SearchResults, str]:
        """Filter conversations (newest first) whose title or content matches.

        In ``title`` mode only the name and summary are searched. In ``full``
        mode message text is searched too and match excerpts are collected.
        """
        ordered = sort_conversations(conversations, "updated_at", "desc")
        if not query.strip():
            return Ok(SearchResults(conversations=ordered, total_count=len(ordered)))

        compiled = _compile(query, use_regex=use_regex, case_sensitive=case_sensitive)
        if isinstance(compiled, Err):
            return compiled
        pattern = compiled.ok_value

        selected: list[Conversation] = []
        matches: dict[str, list[SearchMatch]] = {}
        for conversation in ordered:
            heading = f"{conversation.name or _UNTITLED} {conversation.summary or ''}"
            if mode == "title":
                if pattern.search(heading):
                    selected.append(conversation)
                continue
            found = self._matches(conversation, pattern, self._config.max_search_matches)
            if found:
                matches[conversation.uuid] = found
            if found or pattern.search(heading):
                selected.append(conversation)

        return Ok(
            SearchResults(
                conversations=selected,
                matches=matches,
                total_count=len(selected),
                query=query,
            )
        )

    def _matches(
        self, conversation: Conversation, pattern: re.Pattern[str], limit: int
    ) -> list[SearchMatch]:
        context = self._config.search_context_chars
        matches: list[SearchMatch] = []
        for message_index, message in enumerate(conversation.chat_messages):
            for item in message.content:
                if not isinstance(item, TextContent):
                    continue
                text = item.text
                for found in pattern.finditer(text):
                    if len(matches) >= limit:
                        return matches
                    if not found.group(0):
                        continue
                    start, end = found.span()
                    before_start = max(0, start - context)
                    after_end = min(len(text), end + context)
                    before = text[before_start:start]
                    after = text[end:after_end]
                    matches.append(
                        SearchMatch(
                            text=text,
                            before=("..." + before) if before_start > 0 else before,
                            match=found.group(0),
                            after=(after + "...") if after_end < len(text) else after,
                            message_index=message_index,
                            message_sender=message.sender,
                        )
                    )
        return matches


def sort_conversations(
    conversations: Iterable[Conversation],
    field: SortField = "updated_at",
    order: SortOrder = "desc",
) -> list[Conversation]:
    """Return conversations sorted by a timestamp field.

    Unparseable timestamps sort as the oldest.
    """
    return sorted(
        conversations,
        key=lambda conversation: _timestamp(getattr(conversation, field)),
        reverse=order == "desc",
    )


def _compile(
    query: str, *, use_regex: bool, case_sensitive: bool
) -> Result[re.Pattern[str], str]:
    source = query if use_regex else re.escape(query)
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return Ok(re.compile(source, flags))
    except re.error as exc:
        logger.info("Invalid search pattern %r: %s", query, exc)
        return Err(f"Invalid regular expression: {exc}")


def _timestamp(value: str) -> float:
    try:
        return datetime.fromisoformat(value).timestamp()
    except ValueError:
        return float("-inf")
