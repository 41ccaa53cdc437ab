"""Graph materializer -- rebuilds the knowledge graph from raw snapshots.

The ledger stores four independent sections under ``/apps/knowledge``:

* ``topics``       nested topic tree (see ``topics.py``)
* ``graph/nodes``  explicit exploration node records, keyed by node id
* ``graph/edges``  explicit edge records, ``from -> to -> record``
* ``explorations`` per-user entries, ``address -> topic key -> entry id``

``materialize`` combines them into one typed, deduplicated graph.  Topic,
subtopic, in_topic, User and explored structure is inferred on every call;
extends / related / prerequisite edges come from explicit records and are
deduplicated by unordered endpoint pair.

Public API:
    KnowledgeSnapshot: The four raw sections, each optional.
    GraphBuilder: Insert-only node/edge accumulator.
    materialize: Build ``GraphData`` from a snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .ids import decode_topic_key, topic_node_id, truncate_address, user_node_id
from .topics import flatten_topics
from .types import EdgeType, GraphData, GraphEdge, GraphNode, NodeLabel

logger = logging.getLogger(__name__)


@dataclass
class KnowledgeSnapshot:
    """Raw key/value sections read from the ledger.

    Any section may be None when it is absent on chain or could not be read.
    """

    nodes: Any = None
    edges: Any = None
    topics: Any = None
    explorations: Any = None


def _is_entry_key(key: Any) -> bool:
    return isinstance(key, str) and bool(key) and not key.startswith(".")


def _entry_keys(entries: Any) -> list[str]:
    """Entry ids under one ``(address, topic key)`` pair."""
    if not isinstance(entries, Mapping):
        return []
    return [k for k in entries if _is_entry_key(k)]


class GraphBuilder:
    """Accumulates nodes and edges keyed by id.

    Insertion is first-wins: adding an id that is already present leaves
    the stored node or edge untouched.  Nothing is ever removed.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def add_node(self, node_id: str, label: NodeLabel, properties: dict[str, Any]) -> bool:
        if node_id in self._nodes:
            return False
        self._nodes[node_id] = GraphNode(node_id=node_id, label=label.value, properties=properties)
        return True

    def add_edge(
        self,
        edge_id: str,
        source_id: str,
        target_id: str,
        edge_type: str,
        properties: dict[str, Any] | None = None,
    ) -> bool:
        if edge_id in self._edges:
            return False
        self._edges[edge_id] = GraphEdge(
            edge_id=edge_id,
            source_id=source_id,
            target_id=target_id,
            edge_type=edge_type,
            properties=dict(properties or {}),
        )
        return True

    def ensure_topic(self, path: str) -> str:
        """Return the topic id, synthesizing a minimal Topic if needed."""
        tid = topic_node_id(path)
        self.add_node(tid, NodeLabel.TOPIC, {"title": path})
        return tid

    def build(self) -> GraphData:
        return GraphData(nodes=list(self._nodes.values()), edges=list(self._edges.values()))

    # ── materialization steps ─────────────────────────────────

    def add_topic_tree(self, raw_topics: Any) -> None:
        """Steps 1 and 2: topic nodes, then subtopic edges."""
        entries = flatten_topics(raw_topics)
        for entry in entries:
            if entry.info is None:
                props: dict[str, Any] = {"title": entry.path}
            else:
                props = entry.info.to_properties()
                if not props.get("title"):
                    props["title"] = entry.path
            self.add_node(topic_node_id(entry.path), NodeLabel.TOPIC, props)

        for entry in entries:
            parent = entry.parent_path
            if parent is None or not self.has_node(topic_node_id(parent)):
                continue
            parent_id = topic_node_id(parent)
            child_id = topic_node_id(entry.path)
            self.add_edge(
                f"{parent_id}->{EdgeType.SUBTOPIC.value}->{child_id}",
                parent_id,
                child_id,
                EdgeType.SUBTOPIC.value,
            )

    def add_exploration_nodes(self, raw_nodes: Any) -> None:
        """Step 3: explicit exploration records and their in_topic edges."""
        if not isinstance(raw_nodes, Mapping):
            return
        for node_id, record in raw_nodes.items():
            if not _is_entry_key(node_id) or not isinstance(record, Mapping):
                logger.debug("Skipping malformed graph node record %r", node_id)
                continue
            self.add_node(node_id, NodeLabel.EXPLORATION, {**record, "id": node_id})

            topic_path = record.get("topic_path")
            if not topic_path or not isinstance(topic_path, str):
                continue
            topic_id = self.ensure_topic(decode_topic_key(topic_path))
            self.add_edge(
                f"{node_id}->{EdgeType.IN_TOPIC.value}->{topic_id}",
                node_id,
                topic_id,
                EdgeType.IN_TOPIC.value,
            )

    def add_explicit_edges(self, raw_edges: Any) -> None:
        """Step 4: stored edges, one per unordered endpoint pair."""
        if not isinstance(raw_edges, Mapping):
            return
        seen_pairs: set[tuple[str, str]] = set()
        for from_id, targets in raw_edges.items():
            if not _is_entry_key(from_id) or not isinstance(targets, Mapping):
                continue
            for to_id, record in targets.items():
                if not _is_entry_key(to_id) or not isinstance(record, Mapping):
                    continue
                pair = tuple(sorted((from_id, to_id)))
                if pair in seen_pairs:
                    continue
                seen_pairs.add(pair)
                edge_type = record.get("type") or EdgeType.RELATED.value
                self.add_edge(f"{from_id}->{to_id}", from_id, to_id, str(edge_type), dict(record))

    def add_explorers(self, raw_explorations: Any) -> None:
        """Step 5: users and one explored edge per distinct topic."""
        if not isinstance(raw_explorations, Mapping):
            return
        for address, topics in raw_explorations.items():
            if not _is_entry_key(address) or not isinstance(topics, Mapping):
                continue
            explored = [
                key for key, entries in topics.items()
                if _is_entry_key(key) and _entry_keys(entries)
            ]
            if not explored:
                continue

            uid = user_node_id(address)
            self.add_node(uid, NodeLabel.USER, {"address": address, "name": truncate_address(address)})
            for topic_key in explored:
                topic_id = self.ensure_topic(decode_topic_key(topic_key))
                self.add_edge(
                    f"{uid}->{EdgeType.EXPLORED.value}->{topic_id}",
                    uid,
                    topic_id,
                    EdgeType.EXPLORED.value,
                )


def materialize(snapshot: KnowledgeSnapshot) -> GraphData:
    """Build the full knowledge graph from a snapshot.

    Each section that is absent or malformed simply contributes nothing.
    The same snapshot always yields the same node and edge sets.
    """
    builder = GraphBuilder()
    builder.add_topic_tree(snapshot.topics)
    builder.add_exploration_nodes(snapshot.nodes)
    builder.add_explicit_edges(snapshot.edges)
    builder.add_explorers(snapshot.explorations)
    graph = builder.build()
    logger.debug("Materialized %d nodes and %d edges", len(graph.nodes), len(graph.edges))
    return graph


__all__ = ["KnowledgeSnapshot", "GraphBuilder", "materialize"]
