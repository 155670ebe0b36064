"""Tests for conversation search and sorting."""

from __future__ import annotations

from typing import Any

from result import Err, Ok

from ccv.config import Config
from ccv.models.conversation import IndividualConversation
from ccv.services.search_service import SearchService, sort_conversations


def _conversation(
    uuid: str, name: str, created: str, updated: str, text: str
) -> IndividualConversation:
    stamp = "2024-01-01T00:00:00+00:00"
    return IndividualConversation.model_validate(
        {
            "uuid": uuid,
            "name": name,
            "created_at": created,
            "updated_at": updated,
            "chat_messages": [
                {
                    "uuid": f"{uuid}-m",
                    "sender": "human",
                    "content": [{"type": "text", "text": text}],
                    "created_at": stamp,
                    "updated_at": stamp,
                }
            ],
        }
    )


OLD = _conversation(
    "old", "Regex tips", "2024-01-01T00:00:00+00:00", "2024-01-02T00:00:00+00:00", "use re.compile"
)
NEW = _conversation(
    "new", "Cooking", "2024-03-01T00:00:00+00:00", "2024-03-05T00:00:00+00:00", "Pasta with pesto"
)
MID = _conversation(
    "mid",
    "Travel",
    "2024-02-01T00:00:00+00:00",
    "2024-02-02T00:00:00+00:00",
    "Pack light, pasta optional",
)


class TestFindMatches:
    def test_context_and_ellipses(self, conversation: IndividualConversation) -> None:
        result = SearchService(Config()).find_matches(conversation, "done")
        assert isinstance(result, Ok)
        [match] = result.ok_value
        assert match.match == "Done"
        assert match.message_index == 1
        assert match.message_sender == "assistant"
        assert match.before.startswith("...")
        assert len(match.before) == 3 + 50
        assert match.after == ""

    def test_short_text_has_no_ellipses(self) -> None:
        result = SearchService(Config()).find_matches(NEW, "with")
        assert isinstance(result, Ok)
        [match] = result.ok_value
        assert (match.before, match.match, match.after) == ("Pasta ", "with", " pesto")

    def test_case_sensitive(self) -> None:
        service = SearchService(Config())
        assert service.find_matches(NEW, "pasta", case_sensitive=True).ok_value == []
        assert len(service.find_matches(NEW, "Pasta", case_sensitive=True).ok_value) == 1

    def test_regex_and_limit(self, config: Config) -> None:
        text_conv = _conversation("r", "r", "2024-01-01", "2024-01-01", "a1 a2 a3 a4 a5")
        result = SearchService(config).find_matches(text_conv, r"a\d", use_regex=True)
        assert [m.match for m in result.ok_value] == ["a1", "a2", "a3"]
        result = SearchService(config).find_matches(
            text_conv, r"a\d", use_regex=True, max_matches=5
        )
        assert len(result.ok_value) == 5

    def test_literal_query_is_escaped(self) -> None:
        result = SearchService(Config()).find_matches(OLD, "re.compile")
        assert len(result.ok_value) == 1
        assert SearchService(Config()).find_matches(OLD, "re.c.mpile").ok_value == []

    def test_invalid_regex(self) -> None:
        result = SearchService(Config()).find_matches(OLD, "(", use_regex=True)
        assert isinstance(result, Err)
        assert result.err_value.startswith("Invalid regular expression:")

    def test_blank_query(self) -> None:
        assert SearchService(Config()).find_matches(OLD, "   ").ok_value == []


class TestFilterConversations:
    def test_blank_query_returns_all_newest_first(self) -> None:
        result = SearchService(Config()).filter_conversations([OLD, NEW, MID], "")
        assert isinstance(result, Ok)
        assert [c.uuid for c in result.ok_value.conversations] == ["new", "mid", "old"]
        assert result.ok_value.total_count == 3

    def test_full_mode_collects_matches(self) -> None:
        result = SearchService(Config()).filter_conversations([OLD, NEW, MID], "pasta")
        found = result.ok_value
        assert [c.uuid for c in found.conversations] == ["new", "mid"]
        assert set(found.matches) == {"new", "mid"}
        assert found.query == "pasta"

    def test_title_mode_ignores_text(self) -> None:
        result = SearchService(Config()).filter_conversations(
            [OLD, NEW, MID], "pasta", mode="title"
        )
        assert result.ok_value.conversations == []
        result = SearchService(Config()).filter_conversations(
            [OLD, NEW, MID], "regex", mode="title"
        )
        assert [c.uuid for c in result.ok_value.conversations] == ["old"]

    def test_invalid_regex(self) -> None:
        result = SearchService(Config()).filter_conversations([OLD], "[", use_regex=True)
        assert isinstance(result, Err)


class TestSortConversations:
    def test_created_ascending(self) -> None:
        ordered = sort_conversations([NEW, OLD, MID], "created_at", "asc")
        assert [c.uuid for c in ordered] == ["old", "mid", "new"]

    def test_unparseable_sorts_oldest(self, individual_raw: dict[str, Any]) -> None:
        individual_raw["updated_at"] = "not a date"
        broken = IndividualConversation.model_validate(individual_raw)
        ordered = sort_conversations([broken, OLD, NEW])
        assert [c.uuid for c in ordered] == ["new", "old", "conv-1"]
