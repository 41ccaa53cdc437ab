"""Graph data structures shared by every knowledge backend.

Public API:
    NodeLabel: Node label enum (Topic, Exploration, User).
    EdgeType: Edge type enum, split into inferred and explicit kinds.
    GraphNode: Immutable node with label and properties.
    GraphEdge: Immutable directed edge between two node ids.
    GraphData: Container of nodes and edges returned by every query.
    GraphStats: Summary counts for dashboard display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeLabel(str, Enum):
    """Label of a materialized node, decided by the section it came from."""

    TOPIC = "Topic"
    EXPLORATION = "Exploration"
    USER = "User"


class EdgeType(str, Enum):
    """Relationship types of the knowledge graph."""

    SUBTOPIC = "subtopic"
    IN_TOPIC = "in_topic"
    EXPLORED = "explored"
    EXTENDS = "extends"
    RELATED = "related"
    PREREQUISITE = "prerequisite"

    @property
    def is_inferred(self) -> bool:
        """True for types rebuilt from structure rather than stored on chain."""
        return self in _INFERRED_TYPES


_INFERRED_TYPES = frozenset({EdgeType.SUBTOPIC, EdgeType.IN_TOPIC, EdgeType.EXPLORED})


@dataclass(frozen=True)
class GraphNode:
    """An immutable node in the knowledge graph.

    Attributes:
        node_id: Deterministic identifier (``topic:ai/x``, ``user:0x..``, ...).
        label: One of the ``NodeLabel`` values.
        properties: Scalar properties copied from the on-chain record.
    """

    node_id: str
    label: str
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.node_id,
            "label": str(getattr(self.label, "value", self.label)),
            "properties": dict(self.properties),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphNode:
        return cls(
            node_id=str(data["id"]),
            label=str(data.get("label", "")),
            properties=dict(data.get("properties") or {}),
        )


@dataclass(frozen=True)
class GraphEdge:
    """An immutable directed edge.

    Attributes:
        edge_id: Identifier derived from the endpoints (and type for
            inferred edges); unique within one materialization.
        source_id: Node id of the tail.
        target_id: Node id of the head.
        edge_type: One of the ``EdgeType`` values.
        properties: Properties of the explicit edge record, if any.
    """

    edge_id: str = ""
    source_id: str = ""
    target_id: str = ""
    edge_type: str = ""
    properties: dict[str, Any] = field(default_factory=dict)

    def touches(self, node_id: str) -> bool:
        return self.source_id == node_id or self.target_id == node_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.edge_id,
            "from": self.source_id,
            "to": self.target_id,
            "type": str(getattr(self.edge_type, "value", self.edge_type)),
            "properties": dict(self.properties),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphEdge:
        return cls(
            edge_id=str(data.get("id", "")),
            source_id=str(data["from"]),
            target_id=str(data["to"]),
            edge_type=str(data.get("type", "")),
            properties=dict(data.get("properties") or {}),
        )


@dataclass
class GraphData:
    """Nodes and edges produced by a materialization or a slice.

    Array order is insertion order and carries no meaning.
    """

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {n.node_id for n in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None

    def nodes_with_label(self, label: NodeLabel | str) -> list[GraphNode]:
        return [n for n in self.nodes if n.label == label]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphData:
        return cls(
            nodes=[GraphNode.from_dict(n) for n in data.get("nodes") or []],
            edges=[GraphEdge.from_dict(e) for e in data.get("edges") or []],
        )


@dataclass
class GraphStats:
    """Summary counts shown on the knowledge dashboard."""

    topic_count: int = 0
    exploration_count: int = 0
    edge_count: int = 0
    user_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "topicCount": self.topic_count,
            "explorationCount": self.exploration_count,
            "edgeCount": self.edge_count,
            "userCount": self.user_count,
        }


__all__ = ["NodeLabel", "EdgeType", "GraphNode", "GraphEdge", "GraphData", "GraphStats"]
