"""Tests for conversation schema validation."""

from __future__ import annotations

import copy
from typing import Any

import pytest
from result import Err, Ok

from ccv.data.validation import document_path, validate_batch, validate_conversation
from ccv.models.conversation import (
    ConversationListItem,
    IndividualConversation,
    TextContent,
    ToolResultContent,
    coerce_unknown_content,
)
from ccv.models.validation import ValidationIssue


class TestValidateConversation:
    def test_individual_shape_without_account(self, individual_raw: dict[str, Any]) -> None:
        assert "account" not in individual_raw
        result = validate_conversation(individual_raw)
        assert isinstance(result, Ok)
        assert isinstance(result.ok_value, IndividualConversation)
        assert result.ok_value.chat_messages[1].sender == "assistant"

    def test_list_item_shape(self, list_item_raw: dict[str, Any]) -> None:
        result = validate_conversation(list_item_raw)
        assert isinstance(result, Ok)
        conversation = result.ok_value
        assert isinstance(conversation, ConversationListItem)
        assert conversation.account is not None
        assert conversation.account.uuid == "account-1"

    def test_extra_fields_are_preserved(self, individual_raw: dict[str, Any]) -> None:
        individual_raw["brand_new_field"] = {"nested": True}
        individual_raw["chat_messages"][0]["reaction"] = "thumbs_up"
        result = validate_conversation(individual_raw)
        assert isinstance(result, Ok)
        dumped = result.ok_value.model_dump()
        assert dumped["brand_new_field"] == {"nested": True}
        assert dumped["chat_messages"][0]["reaction"] == "thumbs_up"

    def test_missing_chat_messages(self, individual_raw: dict[str, Any]) -> None:
        del individual_raw["chat_messages"]
        result = validate_conversation(individual_raw)
        assert isinstance(result, Err)
        assert result.err_value == [
            ValidationIssue(path="chat_messages", message="chat_messages array is required")
        ]

    def test_missing_identity_is_an_error(self, individual_raw: dict[str, Any]) -> None:
        del individual_raw["uuid"]
        result = validate_conversation(individual_raw)
        assert isinstance(result, Err)
        assert [issue.path for issue in result.err_value] == ["uuid"]
        assert result.err_value[0].message == "Conversation UUID is required"

    def test_non_object_input(self) -> None:
        result = validate_conversation([1, 2])
        assert isinstance(result, Err)
        assert result.err_value == [
            ValidationIssue(path="", message="Expected a conversation object, got array")
        ]

    def test_reports_the_closer_shape(self, list_item_raw: dict[str, Any]) -> None:
        # Fails the individual shape twice (is_starred, sender) but the list shape once.
        del list_item_raw["chat_messages"][0]["sender"]
        result = validate_conversation(list_item_raw)
        assert isinstance(result, Err)
        assert [issue.path for issue in result.err_value] == ["chat_messages.0.sender"]

    def test_content_item_error_path_has_no_union_tag(
        self, individual_raw: dict[str, Any]
    ) -> None:
        individual_raw["chat_messages"][1]["content"] = [{"type": "text"}]
        result = validate_conversation(individual_raw)
        assert isinstance(result, Err)
        paths = {issue.path for issue in result.err_value}
        assert paths == {"chat_messages.1.content.0.text"}

    def test_unknown_content_type_becomes_text(self, individual_raw: dict[str, Any]) -> None:
        individual_raw["chat_messages"][1]["content"].append(
            {"type": "some_future_type", "payload": [1, 2]}
        )
        result = validate_conversation(individual_raw)
        assert isinstance(result, Ok)
        item = result.ok_value.chat_messages[1].content[-1]
        assert isinstance(item, TextContent)
        assert item.type == "text"
        assert "some_future_type" in item.text
        assert '"payload"' in item.text

    def test_tool_result_is_accepted(self, individual_raw: dict[str, Any]) -> None:
        individual_raw["chat_messages"][1]["content"].append(
            {
                "type": "tool_result",
                "name": "artifacts",
                "content": [{"type": "text", "text": "OK"}],
                "is_error": False,
            }
        )
        result = validate_conversation(individual_raw)
        assert isinstance(result, Ok)
        assert isinstance(result.ok_value.chat_messages[1].content[-1], ToolResultContent)

    def test_invalid_sender(self, individual_raw: dict[str, Any]) -> None:
        individual_raw["chat_messages"][0]["sender"] = "system"
        result = validate_conversation(individual_raw)
        assert isinstance(result, Err)
        assert result.err_value[0].path == "chat_messages.0.sender"


class TestCoerceUnknownContent:
    def test_known_items_untouched(self) -> None:
        items = [{"type": "text", "text": "hi"}, {"type": "thinking", "thinking": "hm"}]
        assert coerce_unknown_content(items) == items

    def test_non_list_untouched(self) -> None:
        assert coerce_unknown_content("nope") == "nope"

    def test_missing_type_is_coerced(self) -> None:
        [item] = coerce_unknown_content([{"value": 1}])
        assert item["type"] == "text"
        assert item["text"].startswith("[Unknown content type: None]")
        assert item["coerced_from"] == "None"

    def test_unhashable_type_is_coerced(self) -> None:
        [item] = coerce_unknown_content([{"type": ["text"], "text": "x"}])
        assert item["text"].startswith("[Unknown content type: ['text']]")


class TestValidateBatch:
    def test_partial_success(self, individual_raw: dict[str, Any]) -> None:
        second = copy.deepcopy(individual_raw)
        del second["name"]
        third = copy.deepcopy(individual_raw)
        third["uuid"] = "conv-3"

        batch = validate_batch([individual_raw, second, third])

        assert batch.total == 3
        assert [c.uuid for c in batch.valid] == ["conv-1", "conv-3"]
        assert len(batch.failures) == 1
        failure = batch.failures[0]
        assert failure.index == 1
        assert failure.name == "Conversation 2"
        assert failure.issues == (
            ValidationIssue(path="name", message="Conversation name is required"),
        )
        assert str(batch) == "2 of 3 conversations valid"

    def test_failure_keeps_name(self, individual_raw: dict[str, Any]) -> None:
        del individual_raw["chat_messages"]
        batch = validate_batch([individual_raw])
        assert batch.valid_count == 0
        assert batch.failures[0].name == "Parser help"

    def test_mixed_shapes(
        self, individual_raw: dict[str, Any], list_item_raw: dict[str, Any]
    ) -> None:
        batch = validate_batch([individual_raw, list_item_raw])
        assert batch.invalid_count == 0
        assert [type(c) for c in batch.valid] == [IndividualConversation, ConversationListItem]


@pytest.mark.parametrize(
    ("loc", "raw", "expected"),
    [
        (("chat_messages", 0, "uuid"), {"chat_messages": [{}]}, "chat_messages.0.uuid"),
        (
            ("chat_messages", 0, "content", 1, "tool_use", "name"),
            {"chat_messages": [{"content": [{}, {"type": "tool_use"}]}]},
            "chat_messages.0.content.1.name",
        ),
        (
            ("chat_messages", 0, "content", 0, "text"),
            {"chat_messages": [{"content": [{"type": "thinking"}]}]},
            "chat_messages.0.content.0.text",
        ),
    ],
)
def test_document_path(loc: tuple[int | str, ...], raw: object, expected: str) -> None:
    assert document_path(loc, raw) == expected
