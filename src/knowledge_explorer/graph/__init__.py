"""Knowledge graph materialization, slicing and backends.

Public API:
    NodeLabel, EdgeType: Label and relationship enums.
    GraphNode, GraphEdge: Immutable graph elements.
    GraphData, GraphStats: Query results.
    ExplorationId: Composite exploration id value type.
    TopicInfo, TopicTreeNode, TopicEntry: Topic tree model.
    flatten_topics, count_topics: Topic tree walks.
    KnowledgeSnapshot: Raw key/value sections.
    materialize: Build the full graph from a snapshot.
    subgraph_for_topic, neighbors_of: Graph slices.
    compute_stats: Dashboard counts.
    KnowledgeBackend: Protocol all backends implement.
    OnchainKnowledgeBackend: Backend over the ledger's key/value store.
    KuzuKnowledgeBackend: Backend over a Kuzu graph database.
"""

from __future__ import annotations

from .explorations import (
    ExplorationDetail,
    ExplorationEntry,
    TopicDetail,
    TopicSummary,
    collect_topic_explorations,
    find_exploration,
    summarize_explorations,
)
from .ids import (
    ExplorationId,
    decode_topic_key,
    encode_topic_key,
    topic_node_id,
    topic_slug,
    truncate_address,
    user_node_id,
)
from .kuzu_backend import KuzuKnowledgeBackend
from .materializer import GraphBuilder, KnowledgeSnapshot, materialize
from .onchain_backend import SECTION_PATHS, OnchainKnowledgeBackend
from .protocol import KnowledgeBackend
from .slicer import exploration_matches_topic, neighbors_of, subgraph_for_topic
from .stats import compute_stats, count_explorations, count_explorers
from .topics import TopicEntry, TopicInfo, TopicTreeNode, count_topics, flatten_topics
from .types import EdgeType, GraphData, GraphEdge, GraphNode, GraphStats, NodeLabel

__all__ = [
    "NodeLabel",
    "EdgeType",
    "GraphNode",
    "GraphEdge",
    "GraphData",
    "GraphStats",
    "ExplorationId",
    "encode_topic_key",
    "decode_topic_key",
    "topic_node_id",
    "topic_slug",
    "truncate_address",
    "user_node_id",
    "TopicInfo",
    "TopicTreeNode",
    "TopicEntry",
    "flatten_topics",
    "count_topics",
    "KnowledgeSnapshot",
    "GraphBuilder",
    "materialize",
    "exploration_matches_topic",
    "subgraph_for_topic",
    "neighbors_of",
    "compute_stats",
    "count_explorations",
    "count_explorers",
    "KnowledgeBackend",
    "SECTION_PATHS",
    "OnchainKnowledgeBackend",
    "KuzuKnowledgeBackend",
    "ExplorationEntry",
    "ExplorationDetail",
    "TopicDetail",
    "TopicSummary",
    "collect_topic_explorations",
    "find_exploration",
    "summarize_explorations",
]
