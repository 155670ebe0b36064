"""Pydantic models for CCV."""

from ccv.models.conversation import (
    KNOWN_CONTENT_TYPES,
    Attachment,
    ChatMessage,
    ContentItem,
    ConversationListItem,
    ConversationMessage,
    FileRef,
    IndividualConversation,
    Settings,
    TextContent,
    ThinkingContent,
    ToolResultContent,
    ToolUseContent,
    ToolUseInput,
    VoiceNoteContent,
)
from ccv.models.search import SearchMatch, SearchResults
from ccv.models.segments import (
    ArtifactSegment,
    CodeSegment,
    Segment,
    TextSegment,
    ThinkingSegment,
)
from ccv.models.validation import BatchFailure, BatchValidation, ValidationIssue

__all__ = [
    "ArtifactSegment",
    "Attachment",
    "BatchFailure",
    "BatchValidation",
    "ChatMessage",
    "CodeSegment",
    "ContentItem",
    "ConversationListItem",
    "ConversationMessage",
    "FileRef",
    "IndividualConversation",
    "SearchMatch",
    "SearchResults",
    "Segment",
    "Settings",
    "TextContent",
    "TextSegment",
    "ThinkingContent",
    "ThinkingSegment",
    "ToolResultContent",
    "ToolUseContent",
    "ToolUseInput",
    "ValidationIssue",
    "VoiceNoteContent",
    "KNOWN_CONTENT_TYPES",
]
