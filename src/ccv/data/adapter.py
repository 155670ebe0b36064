"""Normalize message content items into the segment vocabulary."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ccv.data.segmenter import parse_segments
from ccv.models.conversation import (
    Conversation,
    Message,
    TextContent,
    ThinkingContent,
    ToolUseContent,
    VoiceNoteContent,
)
from ccv.models.segments import ArtifactSegment, Segment, TextSegment, ThinkingSegment

logger = logging.getLogger(__name__)

type ArtifactKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class ArtifactNumbering:
    """1-based artifact numbers keyed by (message uuid, artifact identifier)."""

    numbers: Mapping[ArtifactKey, int]

    def number_for(self, message_uuid: str, identifier: str) -> int | None:
        return self.numbers.get((message_uuid, identifier))

    def __len__(self) -> int:
        return len(self.numbers)

    def __iter__(self) -> Iterator[ArtifactKey]:
        return iter(self.numbers)


def message_segments(message: Message) -> list[Segment]:
    """Return every renderable segment of ``message`` in content order.

    Text from human senders, and placeholder text for unknown content types,
    is kept verbatim as one segment per content item; only other assistant
    text goes through the segment parser.
    """
    segments: list[Segment] = []
    for position, item in enumerate(message.content):
        match item:
            case ToolUseContent():
                segments.append(_tool_use_artifact(item, message.uuid, position))
            case TextContent():
                if message.is_human or item.coerced_from is not None:
                    if item.text:
                        segments.append(TextSegment(content=item.text))
                else:
                    segments.extend(parse_segments(item.text))
            case ThinkingContent():
                if item.thinking.strip():
                    segments.append(ThinkingSegment(content=item.thinking.strip()))
            case VoiceNoteContent():
                if item.text:
                    segments.append(TextSegment(content=item.text))
            case _:
                logger.debug("Skipping %s content in message %s", item.type, message.uuid)
    return segments


def conversation_segments(conversation: Conversation) -> list[tuple[Message, list[Segment]]]:
    """Pair each message of ``conversation`` with its segments."""
    return [(message, message_segments(message)) for message in conversation.chat_messages]


def number_artifacts(
    conversation: Conversation,
    segmented: list[tuple[Message, list[Segment]]] | None = None,
) -> ArtifactNumbering:
    """Assign artifact numbers in first-occurrence order across the document.

    Args:
        conversation: The validated conversation.
        segmented: Precomputed ``conversation_segments`` output, if available.
    """
    if segmented is None:
        segmented = conversation_segments(conversation)
    numbers: dict[ArtifactKey, int] = {}
    for message, segments in segmented:
        for segment in segments:
            if not isinstance(segment, ArtifactSegment):
                continue
            key = (message.uuid, segment.identifier)
            if key not in numbers:
                numbers[key] = len(numbers) + 1
    return ArtifactNumbering(numbers=MappingProxyType(numbers))


def _tool_use_artifact(item: ToolUseContent, message_uuid: str, position: int) -> ArtifactSegment:
    payload = item.input
    return ArtifactSegment(
        identifier=payload.id or _fallback_tool_id(message_uuid, position),
        title=payload.title or item.name,
        artifact_type=payload.type or "",
        content=payload.content or "",
        language=payload.language,
    )


def _fallback_tool_id(message_uuid: str, position: int) -> str:
    return f"{message_uuid}:tool:{position}"
