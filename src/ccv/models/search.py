"""Search models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ccv.models.conversation import ConversationListItem, IndividualConversation


class SearchMatch(BaseModel):
    """A single match inside a conversation, with surrounding context."""

    model_config = ConfigDict(frozen=True)

    text: str
    before: str = ""
    match: str
    after: str = ""
    message_index: int
    message_sender: Literal["human", "assistant"]


class SearchResults(BaseModel):
    """Conversations matching a query, with per-conversation matches."""

    model_config = ConfigDict(frozen=True)

    conversations: list[IndividualConversation | ConversationListItem] = Field(
        default_factory=list
    )
    matches: dict[str, list[SearchMatch]] = Field(default_factory=dict)
    total_count: int = 0
    query: str = ""
