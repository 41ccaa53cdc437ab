"""KuzuKnowledgeBackend -- knowledge graph served from a Kuzu graph database.

The alternative to rebuilding the graph from ledger snapshots: the graph
lives in an embedded Kuzu database and every query is parameterised Cypher.
All nodes share one ``KnowledgeNode`` table (label kept as a column) and all
edges one ``Link`` rel table, so the schema never depends on which labels
or edge types show up.  Properties are stored as JSON strings.

Public API:
    KuzuKnowledgeBackend: KnowledgeBackend backed by Kuzu.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any

import kuzu

from .ids import encode_topic_key, topic_node_id, topic_slug
from .types import GraphData, GraphEdge, GraphNode, GraphStats, NodeLabel

logger = logging.getLogger(__name__)

NODE_TABLE = "KnowledgeNode"
REL_TABLE = "Link"

_NODE_COLUMNS = "n.id, n.label, n.properties"
_EDGE_COLUMNS = "r.edge_id, a.id, b.id, r.edge_type, r.properties"


class KuzuKnowledgeBackend:
    """Kuzu graph database implementation of the KnowledgeBackend protocol.

    Kuzu calls are blocking, so the async methods run them in a worker
    thread; a lock keeps the single connection serialized.

    Args:
        db_path: Filesystem path for the Kuzu database.
    """

    # ── construction / lifecycle ──────────────────────────────

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = kuzu.Database(str(self._db_path))
        self._conn = kuzu.Connection(self._db)
        self._lock = threading.Lock()
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Release Kuzu resources."""
        self._conn = None  # type: ignore[assignment]
        self._db = None  # type: ignore[assignment]

    def _ensure_schema(self) -> None:
        self._conn.execute(
            f"CREATE NODE TABLE IF NOT EXISTS {NODE_TABLE}"
            "(id STRING, label STRING, topic_path STRING, properties STRING, PRIMARY KEY(id))"
        )
        self._conn.execute(
            f"CREATE REL TABLE IF NOT EXISTS {REL_TABLE}"
            f"(FROM {NODE_TABLE} TO {NODE_TABLE}, edge_id STRING, edge_type STRING, properties STRING)"
        )

    # ── loading ───────────────────────────────────────────────

    def replace_graph(self, graph: GraphData) -> int:
        """Replace the stored graph with *graph* in one transaction.

        Edges whose endpoints are not part of *graph* cannot be stored in
        Kuzu and are skipped.  If any write fails the previous graph is
        left in place and the error propagates.

        Returns:
            Number of edges written.
        """
        with self._lock:
            self._conn.execute("BEGIN TRANSACTION")
            try:
                written = self._write_graph(graph)
            except Exception:
                self._rollback()
                raise
            self._conn.execute("COMMIT")
        logger.info("Loaded %d nodes and %d edges into %s", len(graph.nodes), written, self._db_path)
        return written

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except RuntimeError as e:
            # Kuzu may already have aborted the transaction on the failed statement
            logger.debug("Rollback after failed load: %s", e)

    def _write_graph(self, graph: GraphData) -> int:
        self._conn.execute(f"MATCH (n:{NODE_TABLE}) DETACH DELETE n")

        for node in graph.nodes:
            self._conn.execute(
                f"CREATE (:{NODE_TABLE} {{id: $id, label: $label, "
                "topic_path: $topic_path, properties: $properties})",
                {
                    "id": node.node_id,
                    "label": getattr(node.label, "value", node.label),
                    "topic_path": str(node.properties.get("topic_path") or ""),
                    "properties": json.dumps(node.properties, default=str),
                },
            )

        known = graph.node_ids()
        written = 0
        for edge in graph.edges:
            if edge.source_id not in known or edge.target_id not in known:
                logger.debug("Skipping dangling edge %s", edge.edge_id)
                continue
            self._conn.execute(
                f"MATCH (a:{NODE_TABLE}), (b:{NODE_TABLE}) "
                "WHERE a.id = $sid AND b.id = $tid "
                f"CREATE (a)-[:{REL_TABLE} {{edge_id: $eid, edge_type: $etype, "
                "properties: $properties}]->(b)",
                {
                    "sid": edge.source_id,
                    "tid": edge.target_id,
                    "eid": edge.edge_id,
                    "etype": getattr(edge.edge_type, "value", edge.edge_type),
                    "properties": json.dumps(edge.properties, default=str),
                },
            )
            written += 1
        return written

    # ── synchronous queries ───────────────────────────────────

    def _rows(self, cypher: str, params: dict[str, Any] | None = None) -> list[list[Any]]:
        with self._lock:
            result = self._conn.execute(cypher, params or {})
            rows: list[list[Any]] = []
            while result.has_next():
                rows.append(result.get_next())
        return rows

    @staticmethod
    def _decode(raw: Any) -> dict[str, Any]:
        if not raw:
            return {}
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            return {}
        return value if isinstance(value, dict) else {}

    def _row_to_node(self, row: list[Any]) -> GraphNode:
        return GraphNode(node_id=row[0], label=row[1], properties=self._decode(row[2]))

    def _row_to_edge(self, row: list[Any]) -> GraphEdge:
        return GraphEdge(
            edge_id=row[0],
            source_id=row[1],
            target_id=row[2],
            edge_type=row[3],
            properties=self._decode(row[4]),
        )

    def _nodes_by_id(self, node_ids: set[str]) -> list[GraphNode]:
        if not node_ids:
            return []
        rows = self._rows(
            f"MATCH (n:{NODE_TABLE}) WHERE list_contains($ids, n.id) RETURN {_NODE_COLUMNS}",
            {"ids": sorted(node_ids)},
        )
        return [self._row_to_node(r) for r in rows]

    def _edges_touching(self, node_ids: set[str]) -> list[GraphEdge]:
        if not node_ids:
            return []
        rows = self._rows(
            f"MATCH (a:{NODE_TABLE})-[r:{REL_TABLE}]->(b:{NODE_TABLE}) "
            "WHERE list_contains($ids, a.id) OR list_contains($ids, b.id) "
            f"RETURN {_EDGE_COLUMNS}",
            {"ids": sorted(node_ids)},
        )
        return [self._row_to_edge(r) for r in rows]

    def full_graph_sync(self) -> GraphData:
        nodes = [self._row_to_node(r) for r in self._rows(f"MATCH (n:{NODE_TABLE}) RETURN {_NODE_COLUMNS}")]
        edges = [
            self._row_to_edge(r)
            for r in self._rows(
                f"MATCH (a:{NODE_TABLE})-[r:{REL_TABLE}]->(b:{NODE_TABLE}) RETURN {_EDGE_COLUMNS}"
            )
        ]
        return GraphData(nodes=nodes, edges=edges)

    def topic_subgraph_sync(self, topic_path: str) -> GraphData:
        """Same slice as ``subgraph_for_topic``, computed in Cypher."""
        topic_path = topic_path.strip("/")
        if not topic_path:
            return GraphData()
        own_id = topic_node_id(topic_path)
        topic_key = encode_topic_key(topic_path)
        rows = self._rows(
            f"MATCH (n:{NODE_TABLE}) "
            "WHERE n.id = $own_id OR n.id STARTS WITH $prefix "
            "OR (n.label = $exploration AND "
            "(n.topic_path = $path OR n.topic_path = $key OR n.id CONTAINS $slug)) "
            "RETURN n.id",
            {
                "own_id": own_id,
                "prefix": f"{own_id}/",
                "exploration": NodeLabel.EXPLORATION.value,
                "path": topic_path,
                "key": topic_key,
                "slug": topic_slug(topic_key),
            },
        )
        relevant = {r[0] for r in rows}
        edges = self._edges_touching(relevant)
        for edge in edges:
            relevant.add(edge.source_id)
            relevant.add(edge.target_id)
        return GraphData(nodes=self._nodes_by_id(relevant), edges=edges)

    def node_neighbors_sync(self, node_id: str) -> GraphData:
        edges = self._edges_touching({node_id})
        node_ids = {node_id}
        for edge in edges:
            node_ids.add(edge.source_id)
            node_ids.add(edge.target_id)
        return GraphData(nodes=self._nodes_by_id(node_ids), edges=edges)

    def stats_sync(self) -> GraphStats:
        """Count labels directly; every stored Topic counts, synthetic or not."""
        counts = {
            label: count
            for label, count in self._rows(f"MATCH (n:{NODE_TABLE}) RETURN n.label, count(*)")
        }
        edge_rows = self._rows(
            f"MATCH (:{NODE_TABLE})-[r:{REL_TABLE}]->(:{NODE_TABLE}) RETURN count(r)"
        )
        return GraphStats(
            topic_count=int(counts.get(NodeLabel.TOPIC.value, 0)),
            exploration_count=int(counts.get(NodeLabel.EXPLORATION.value, 0)),
            edge_count=int(edge_rows[0][0]) if edge_rows else 0,
            user_count=int(counts.get(NodeLabel.USER.value, 0)),
        )

    # ── KnowledgeBackend ──────────────────────────────────────

    async def full_graph(self) -> GraphData:
        return await asyncio.to_thread(self.full_graph_sync)

    async def topic_subgraph(self, topic_path: str) -> GraphData:
        return await asyncio.to_thread(self.topic_subgraph_sync, topic_path)

    async def node_neighbors(self, node_id: str) -> GraphData:
        return await asyncio.to_thread(self.node_neighbors_sync, node_id)

    async def stats(self) -> GraphStats:
        return await asyncio.to_thread(self.stats_sync)


__all__ = ["KuzuKnowledgeBackend"]
