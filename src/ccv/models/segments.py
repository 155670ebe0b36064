"""Segment models produced by the message parser."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextSegment(BaseModel):
    """Plain prose."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    content: str


class ThinkingSegment(BaseModel):
    """Internal reasoning, hidden unless revealed."""

    model_config = ConfigDict(frozen=True)

    type: Literal["thinking"] = "thinking"
    content: str


class CodeSegment(BaseModel):
    """A fenced code block, optionally annotated with a file path."""

    model_config = ConfigDict(frozen=True)

    type: Literal["code"] = "code"
    content: str
    language: str = "text"
    path: str | None = None


class ArtifactSegment(BaseModel):
    """A named, self-contained generated document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["artifact"] = "artifact"
    content: str
    title: str = ""
    identifier: str = ""
    artifact_type: str = Field(default="", alias="artifactType")
    language: str | None = None  # only set for tool_use artifacts


Segment = Annotated[
    TextSegment | ThinkingSegment | CodeSegment | ArtifactSegment,
    Field(discriminator="type"),
]
