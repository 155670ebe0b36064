"""Shared fixtures for CCV tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from ccv.config import Config
from ccv.models.conversation import IndividualConversation

ASSISTANT_TEXT = (
    "Intro <antThinking>plan it</antThinking>\n"
    "```python:src/app.py\nprint(1)\n```\n"
    '<antArtifact identifier="calc" type="application/vnd.ant.react" title="Calculator">'
    "export default 1</antArtifact>\n"
    "Done"
)

HUMAN_TEXT = 'Please keep <antArtifact identifier="x" type="t" title="T">this</antArtifact> as is'


def _message(uuid: str, sender: str, content: list[dict[str, Any]], index: int) -> dict[str, Any]:
    return {
        "uuid": uuid,
        "text": "",
        "content": content,
        "sender": sender,
        "index": index,
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
        "truncated": False,
        "attachments": [],
        "files": [],
        "files_v2": [],
        "sync_sources": [],
        "parent_message_uuid": "00000000-0000-4000-8000-000000000000",
    }


SAMPLE_CONVERSATION: dict[str, Any] = {
    "uuid": "conv-1",
    "name": "Parser help",
    "summary": "",
    "created_at": "2024-05-01T10:00:00+00:00",
    "updated_at": "2024-05-02T10:00:00+00:00",
    "settings": {"preview_feature_uses_artifacts": True},
    "is_starred": False,
    "current_leaf_message_uuid": "msg-2",
    "chat_messages": [
        _message("msg-1", "human", [{"type": "text", "text": HUMAN_TEXT}], 0),
        _message("msg-2", "assistant", [{"type": "text", "text": ASSISTANT_TEXT}], 1),
    ],
}


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def individual_raw() -> dict[str, Any]:
    """A decoded single-conversation export (fresh copy per test)."""
    return copy.deepcopy(SAMPLE_CONVERSATION)


@pytest.fixture
def list_item_raw(individual_raw: dict[str, Any]) -> dict[str, Any]:
    """A decoded bulk-list item: account reference, nullable star flag."""
    raw = copy.deepcopy(individual_raw)
    raw["uuid"] = "conv-2"
    raw["name"] = "Bulk item"
    raw["account"] = {"uuid": "account-1"}
    raw["is_starred"] = None
    for message in raw["chat_messages"]:
        del message["files_v2"]
        del message["sync_sources"]
    return raw


@pytest.fixture
def conversation(individual_raw: dict[str, Any]) -> IndividualConversation:
    """The sample conversation, validated."""
    return IndividualConversation.model_validate(individual_raw)


@pytest.fixture
def export_path(tmp_path: Path, individual_raw: dict[str, Any]) -> Path:
    """The sample conversation written to a JSON file."""
    path = tmp_path / "conversation.json"
    path.write_text(json.dumps(individual_raw), encoding="utf-8")
    return path


@pytest.fixture
def batch_path(
    tmp_path: Path, individual_raw: dict[str, Any], list_item_raw: dict[str, Any]
) -> Path:
    """A bulk export where the middle conversation lacks a name."""
    broken = copy.deepcopy(individual_raw)
    broken["uuid"] = "conv-broken"
    del broken["name"]
    path = tmp_path / "conversations.json"
    path.write_text(json.dumps([individual_raw, broken, list_item_raw]), encoding="utf-8")
    return path
