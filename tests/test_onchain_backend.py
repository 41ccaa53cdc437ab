"""Tests for OnchainKnowledgeBackend over an in-memory key/value source.

Test categories:
- TestSnapshotLoading: concurrent section reads, per-section degradation
- TestBackendOperations: full graph, topic subgraph, neighbors, stats
- TestDetailViews: topic detail and exploration detail
"""

from __future__ import annotations

import asyncio

from knowledge_explorer.graph import (
    SECTION_PATHS,
    KnowledgeBackend,
    OnchainKnowledgeBackend,
    materialize,
)

from conftest import E1, E2, FakeSource


def run(coro):
    return asyncio.run(coro)


class TestSnapshotLoading:
    def test_reads_all_four_sections(self, fake_source):
        backend = OnchainKnowledgeBackend(fake_source)
        snapshot = run(backend.fetch_snapshot())
        assert set(fake_source.calls) == set(SECTION_PATHS.values())
        assert snapshot.nodes is not None
        assert snapshot.edges is not None
        assert snapshot.topics is not None
        assert snapshot.explorations is not None

    def test_failed_section_degrades_alone(self, ledger_values):
        source = FakeSource(ledger_values, failures={SECTION_PATHS["edges"]})
        snapshot = run(OnchainKnowledgeBackend(source).fetch_snapshot())
        assert snapshot.edges is None
        assert snapshot.nodes is not None
        assert snapshot.topics is not None
        assert snapshot.explorations is not None

    def test_non_mapping_section_degrades(self, ledger_values):
        ledger_values[SECTION_PATHS["topics"]] = "corrupted"
        snapshot = run(OnchainKnowledgeBackend(FakeSource(ledger_values)).fetch_snapshot())
        assert snapshot.topics is None

    def test_all_sections_failing_gives_empty_graph(self, ledger_values):
        source = FakeSource(ledger_values, failures=set(SECTION_PATHS.values()))
        graph = run(OnchainKnowledgeBackend(source).full_graph())
        assert graph.nodes == []
        assert graph.edges == []

    def test_missing_sections_are_none(self):
        snapshot = run(OnchainKnowledgeBackend(FakeSource({})).fetch_snapshot())
        assert materialize(snapshot).nodes == []

    def test_unexpected_error_degrades_alone(self, ledger_values):
        class CrashingSource(FakeSource):
            async def get_value(self, ref):
                if ref == SECTION_PATHS["edges"]:
                    raise RuntimeError("decoder crashed")
                return await super().get_value(ref)

        snapshot = run(OnchainKnowledgeBackend(CrashingSource(ledger_values)).fetch_snapshot())
        assert snapshot.edges is None
        assert snapshot.nodes is not None
        assert snapshot.topics is not None
        assert snapshot.explorations is not None

    def test_sections_are_read_concurrently(self, ledger_values):
        class GatedSource(FakeSource):
            """Holds every read until all four have started."""

            async def get_value(self, ref):
                self.calls.append(ref)
                if len(self.calls) == len(SECTION_PATHS):
                    self.all_started.set()
                await asyncio.wait_for(self.all_started.wait(), timeout=1.0)
                return self.values.get(ref)

        async def main():
            source = GatedSource(ledger_values)
            source.all_started = asyncio.Event()
            return await OnchainKnowledgeBackend(source).fetch_snapshot()

        snapshot = run(main())
        assert snapshot.nodes is not None
        assert snapshot.edges is not None
        assert snapshot.topics is not None
        assert snapshot.explorations is not None


class TestBackendOperations:
    def test_satisfies_protocol(self, fake_source):
        assert isinstance(OnchainKnowledgeBackend(fake_source), KnowledgeBackend)

    def test_full_graph_matches_materialize(self, fake_source, sample_snapshot):
        graph = run(OnchainKnowledgeBackend(fake_source).full_graph())
        expected = materialize(sample_snapshot)
        assert graph.node_ids() == expected.node_ids()
        assert {e.edge_id for e in graph.edges} == {e.edge_id for e in expected.edges}

    def test_partial_graph_when_edges_fail(self, ledger_values):
        source = FakeSource(ledger_values, failures={SECTION_PATHS["edges"]})
        graph = run(OnchainKnowledgeBackend(source).full_graph())
        assert E1 in graph.node_ids()
        assert not [e for e in graph.edges if e.edge_type in ("extends", "related", "prerequisite")]

    def test_topic_subgraph(self, fake_source):
        sliced = run(OnchainKnowledgeBackend(fake_source).topic_subgraph("ai/transformers"))
        assert "topic:ai/transformers" in sliced.node_ids()
        assert E1 in sliced.node_ids()

    def test_node_neighbors(self, fake_source):
        sliced = run(OnchainKnowledgeBackend(fake_source).node_neighbors(E1))
        assert E2 in sliced.node_ids()

    def test_unknown_inputs_are_empty(self, fake_source):
        backend = OnchainKnowledgeBackend(fake_source)
        assert run(backend.topic_subgraph("does/not/exist")).to_dict() == {"nodes": [], "edges": []}
        assert run(backend.node_neighbors("bogus:id")).to_dict() == {"nodes": [], "edges": []}

    def test_stats_reads_snapshot_once(self, fake_source):
        stats = run(OnchainKnowledgeBackend(fake_source).stats())
        assert len(fake_source.calls) == 4
        assert stats.topic_count == 6
        assert stats.exploration_count == 3
        assert stats.user_count == 3
        assert stats.edge_count > 0


class TestDetailViews:
    def test_topic_detail(self, fake_source):
        detail = run(OnchainKnowledgeBackend(fake_source).topic_detail("ai/transformers"))
        assert detail.info.title == "Transformers"
        assert [e.entry_id for e in detail.explorations] == ["e1"]
        assert detail.summary.explorer_count == 1
        assert "topic:ai/transformers" in detail.graph.node_ids()
        body = detail.to_dict()
        assert body["path"] == "ai/transformers"
        assert body["summary"]["maxDepth"] == 1

    def test_topic_detail_without_info(self, fake_source):
        detail = run(OnchainKnowledgeBackend(fake_source).topic_detail("/nowhere/"))
        assert detail.path == "nowhere"
        assert detail.info is None
        assert detail.explorations == []

    def test_exploration_detail(self, fake_source):
        detail = run(OnchainKnowledgeBackend(fake_source).exploration_detail(E2))
        assert detail.entry is not None
        assert detail.entry.topic_key == "ai|transformers|attention"
        assert detail.entry.record["title"] == "Attention deep dive"
        assert E1 in detail.graph.node_ids()

    def test_exploration_detail_unknown_entry(self, fake_source):
        detail = run(OnchainKnowledgeBackend(fake_source).exploration_detail("0xAAA_ai_missing"))
        assert detail is not None
        assert detail.entry is None
        assert detail.to_dict()["exploration"] is None

    def test_exploration_detail_unparseable(self, fake_source):
        assert run(OnchainKnowledgeBackend(fake_source).exploration_detail("bogus")) is None
