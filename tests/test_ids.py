"""Tests for id synthesis and the topic key encodings."""

from __future__ import annotations

import pytest

from knowledge_explorer.exceptions import InvalidNodeIdError
from knowledge_explorer.graph.ids import (
    ExplorationId,
    address_from_user_node_id,
    decode_topic_key,
    encode_topic_key,
    topic_node_id,
    topic_path_from_node_id,
    topic_slug,
    truncate_address,
    user_node_id,
)


class TestTopicIds:
    def test_topic_id_pair(self):
        assert topic_node_id("ai/transformers") == "topic:ai/transformers"
        assert topic_path_from_node_id("topic:ai/transformers") == "ai/transformers"
        assert topic_path_from_node_id("user:0xAAA") is None

    def test_user_id_pair(self):
        assert user_node_id("0xAAA") == "user:0xAAA"
        assert address_from_user_node_id("user:0xAAA") == "0xAAA"
        assert address_from_user_node_id("topic:ai") is None

    def test_topic_key_pair(self):
        assert encode_topic_key("ai/transformers/attention") == "ai|transformers|attention"
        assert decode_topic_key("ai|transformers|attention") == "ai/transformers/attention"
        assert decode_topic_key(encode_topic_key("a/b/c")) == "a/b/c"

    def test_slug_from_path_or_key(self):
        assert topic_slug("ai/transformers") == "ai_transformers"
        assert topic_slug("ai|transformers") == "ai_transformers"


class TestExplorationId:
    def test_encode(self):
        eid = ExplorationId("0xAAA", "ai/transformers", "e1")
        assert eid.encode() == "0xAAA_ai_transformers_e1"
        assert str(eid) == "0xAAA_ai_transformers_e1"

    def test_encode_from_stored_key(self):
        assert ExplorationId("0xAAA", "ai|transformers", "e1").encode() == "0xAAA_ai_transformers_e1"

    def test_parse_round_trip(self):
        original = ExplorationId("0xAAA", "ai_transformers_attention", "e7")
        parsed = ExplorationId.parse(original.encode())
        assert parsed == original
        assert parsed.slug == "ai_transformers_attention"

    @pytest.mark.parametrize("bad", ["", "nounderscores", "a_b", "_ai_e1", "0xAAA_ai_", "0xAAA__e1"])
    def test_parse_rejects_malformed(self, bad):
        with pytest.raises(InvalidNodeIdError):
            ExplorationId.parse(bad)

    def test_invalid_id_is_value_error(self):
        with pytest.raises(ValueError):
            ExplorationId.parse("bogus")


class TestTruncateAddress:
    def test_long_address(self):
        address = "0x" + "1234567890" * 4
        assert truncate_address(address) == "0x123456...567890"

    def test_short_address_untouched(self):
        assert truncate_address("0xAAA") == "0xAAA"
        assert truncate_address("") == ""
