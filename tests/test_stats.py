"""Tests for the stats aggregator."""

from __future__ import annotations

from knowledge_explorer.graph import (
    GraphStats,
    KnowledgeSnapshot,
    NodeLabel,
    compute_stats,
    count_explorations,
    count_explorers,
    materialize,
)


class TestCounts:
    def test_count_explorations_skips_metadata_keys(self):
        store = {"0xA": {"ai": {"e1": {}, "e2": {}, ".shard": {}}}, "0xB": {"bio": {"e3": {}}}}
        assert count_explorations(store) == 3

    def test_count_explorers_includes_empty_addresses(self):
        assert count_explorers({"0xA": {"ai": {"e1": {}}}, "0xB": {}}) == 2

    def test_malformed_store(self):
        assert count_explorations(None) == 0
        assert count_explorations({"0xA": "junk", "0xB": {"ai": "junk"}}) == 0
        assert count_explorers(["0xA"]) == 0


class TestComputeStats:
    def test_sample_ledger(self, sample_snapshot):
        stats = compute_stats(sample_snapshot)
        assert stats == GraphStats(
            topic_count=6,
            exploration_count=3,
            edge_count=len(materialize(sample_snapshot).edges),
            user_count=3,
        )

    def test_edge_count_matches_graph(self, sample_snapshot):
        graph = materialize(sample_snapshot)
        assert compute_stats(sample_snapshot, graph).edge_count == len(graph.edges)

    def test_synthetic_topics_not_counted(self, sample_snapshot):
        graph = materialize(sample_snapshot)
        stats = compute_stats(sample_snapshot, graph)
        topic_nodes = len(graph.nodes_with_label(NodeLabel.TOPIC))
        # topic:z/novel exists only because an exploration references it
        assert topic_nodes == 7
        assert stats.topic_count == 6
        assert stats.topic_count <= topic_nodes

    def test_user_count_differs_from_user_nodes(self, sample_snapshot):
        graph = materialize(sample_snapshot)
        assert compute_stats(sample_snapshot, graph).user_count == 3
        assert len(graph.nodes_with_label(NodeLabel.USER)) == 2

    def test_empty_snapshot(self):
        assert compute_stats(KnowledgeSnapshot()) == GraphStats()

    def test_to_dict_uses_camel_case(self):
        stats = GraphStats(topic_count=1, exploration_count=2, edge_count=3, user_count=4)
        assert stats.to_dict() == {
            "topicCount": 1,
            "explorationCount": 2,
            "edgeCount": 3,
            "userCount": 4,
        }
