"""Pydantic models for Claude conversation exports.

Two export shapes are accepted for the same logical conversation: the
single-conversation export (``IndividualConversation``) and an item of the
bulk ``conversations.json`` list (``ConversationListItem``). Every model keeps
unknown fields (``extra="allow"``) so newer exports still load.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

KNOWN_CONTENT_TYPES: frozenset[str] = frozenset(
    {"text", "thinking", "voice_note", "tool_use", "tool_result"}
)

_PASSTHROUGH = ConfigDict(extra="allow", frozen=True)


class TextContent(BaseModel):
    """Inline text, possibly carrying embedded pseudo-tags."""

    model_config = _PASSTHROUGH

    type: Literal["text"]
    text: str
    start_timestamp: str | None = None
    stop_timestamp: str | None = None
    citations: list[Any] | None = None
    coerced_from: str | None = None


class ThinkingContent(BaseModel):
    """Structured reasoning block."""

    model_config = _PASSTHROUGH

    type: Literal["thinking"]
    thinking: str
    start_timestamp: str | None = None
    stop_timestamp: str | None = None
    summaries: list[Any] | None = None
    cut_off: bool | None = None


class VoiceNoteContent(BaseModel):
    model_config = _PASSTHROUGH

    type: Literal["voice_note"]
    title: str | None = None
    text: str
    start_timestamp: str | None = None
    stop_timestamp: str | None = None


class ToolUseInput(BaseModel):
    """Artifact-like payload of a tool invocation."""

    model_config = _PASSTHROUGH

    id: str | None = None
    type: str | None = None
    title: str | None = None
    command: str | None = None
    content: str | None = None
    language: str | None = None
    version_uuid: str | None = None
    source: str | None = None
    md_citations: list[Any] | None = None


class ToolUseContent(BaseModel):
    """A tool-invocation record."""

    model_config = _PASSTHROUGH

    type: Literal["tool_use"]
    name: str
    input: ToolUseInput
    start_timestamp: str | None = None
    stop_timestamp: str | None = None
    message: str | None = None
    integration_name: str | None = None
    integration_icon_url: str | None = None
    context: Any = None
    display_content: Any = None
    approval_options: Any = None
    approval_key: str | None = None


class ToolResultPart(BaseModel):
    model_config = _PASSTHROUGH

    type: str
    text: str
    uuid: str | None = None


class ToolResultContent(BaseModel):
    """Output of a tool invocation. Carried through, never rendered."""

    model_config = _PASSTHROUGH

    type: Literal["tool_result"]
    name: str
    content: list[ToolResultPart]
    is_error: bool
    start_timestamp: str | None = None
    stop_timestamp: str | None = None
    message: str | None = None
    integration_name: str | None = None
    integration_icon_url: str | None = None
    display_content: Any = None


ContentItem = Annotated[
    TextContent | ThinkingContent | VoiceNoteContent | ToolUseContent | ToolResultContent,
    Field(discriminator="type"),
]


def unknown_content_placeholder(item: dict[str, Any]) -> dict[str, Any]:
    """Return a text content item standing in for an unrecognized one."""
    kind = item.get("type")
    label = kind if isinstance(kind, str) else repr(kind)
    raw = json.dumps(item, indent=2, ensure_ascii=False, default=str)
    return {
        "type": "text",
        "text": f"[Unknown content type: {label}]\n{raw}",
        "coerced_from": label,
    }


def coerce_unknown_content(value: object) -> object:
    """Replace content items of unknown ``type`` with placeholder text items.

    Non-list values and non-dict items are returned untouched so that normal
    validation reports them.
    """
    if not isinstance(value, list):
        return value
    coerced: list[object] = []
    for item in value:
        kind = item.get("type") if isinstance(item, dict) else None
        if not isinstance(item, dict) or (isinstance(kind, str) and kind in KNOWN_CONTENT_TYPES):
            coerced.append(item)
            continue
        logger.debug("Coercing unknown content type %r to text", kind)
        coerced.append(unknown_content_placeholder(item))
    return coerced


class ImageAsset(BaseModel):
    model_config = _PASSTHROUGH

    url: str
    file_variant: str
    primary_color: str
    image_width: float
    image_height: float


class Attachment(BaseModel):
    """A file pasted or uploaded into a message."""

    model_config = _PASSTHROUGH

    id: str | None = None
    file_name: str | None = None
    file_size: float | None = None
    file_type: str | None = None
    extracted_content: str | None = None
    created_at: str | None = None


class FileRef(BaseModel):
    model_config = _PASSTHROUGH

    file_kind: str | None = None
    file_uuid: str | None = None
    file_name: str | None = None
    created_at: str | None = None
    thumbnail_url: str | None = None
    preview_url: str | None = None
    thumbnail_asset: ImageAsset | None = None
    preview_asset: ImageAsset | None = None


class _MessageBase(BaseModel):
    model_config = _PASSTHROUGH

    uuid: str
    sender: Literal["human", "assistant"]
    content: list[ContentItem]
    created_at: str
    updated_at: str
    text: str | None = None
    index: int = 0
    truncated: bool = False
    parent_message_uuid: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_unknown_content(cls, value: object) -> object:
        return coerce_unknown_content(value)

    @property
    def is_human(self) -> bool:
        return self.sender == "human"


class ChatMessage(_MessageBase):
    """Message of a single-conversation export."""

    attachments: list[Attachment] | None = None
    files: list[FileRef] | None = None
    files_v2: list[FileRef] | None = None
    sync_sources: list[Any] | None = None


class ConversationMessage(_MessageBase):
    """Message of a bulk ``conversations.json`` item."""

    attachments: list[Any] | None = None
    files: list[Any] | None = None


class Settings(BaseModel):
    """Per-conversation feature flags."""

    model_config = _PASSTHROUGH

    preview_feature_uses_artifacts: bool | None = None
    preview_feature_uses_latex: bool | None = None
    preview_feature_uses_citations: bool | None = None
    enabled_artifacts_attachments: bool | None = None
    enabled_turmeric: bool | None = None


class AccountRef(BaseModel):
    model_config = _PASSTHROUGH

    uuid: str


class _ConversationBase(BaseModel):
    model_config = _PASSTHROUGH

    uuid: str
    name: str
    created_at: str
    updated_at: str
    summary: str | None = None
    settings: Settings | None = None
    current_leaf_message_uuid: str | None = None
    conversation_id: str | None = None
    model: str | None = None
    project_uuid: str | None = None
    project: Any = None
    workspace_id: str | None = None


class IndividualConversation(_ConversationBase):
    """A single exported conversation."""

    is_starred: bool = False
    chat_messages: list[ChatMessage]


class ConversationListItem(_ConversationBase):
    """One conversation of a bulk export list."""

    account: AccountRef | None = None
    is_starred: bool | None = None
    chat_messages: list[ConversationMessage]


type Conversation = IndividualConversation | ConversationListItem
type Message = ChatMessage | ConversationMessage
