"""Summary counts for the knowledge dashboard.

Topic, exploration and user counts come straight from the raw sections
without materializing; only the edge count needs the full graph.  Topics
synthesized from exploration references are therefore not part of
``topic_count``, which can be lower than the number of Topic nodes.

Public API:
    count_explorations: Entry count across the exploration store.
    count_explorers: Number of addresses in the exploration store.
    compute_stats: ``GraphStats`` for a snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .materializer import KnowledgeSnapshot, materialize
from .topics import count_topics
from .types import GraphData, GraphStats


def count_explorations(raw_explorations: Any) -> int:
    """Count non-metadata entry keys over every ``(address, topic key)``."""
    if not isinstance(raw_explorations, Mapping):
        return 0
    total = 0
    for topics in raw_explorations.values():
        if not isinstance(topics, Mapping):
            continue
        for entries in topics.values():
            if isinstance(entries, Mapping):
                total += sum(1 for k in entries if isinstance(k, str) and not k.startswith("."))
    return total


def count_explorers(raw_explorations: Any) -> int:
    """Addresses present at the top level, even with no entries below."""
    if not isinstance(raw_explorations, Mapping):
        return 0
    return len(raw_explorations)


def compute_stats(snapshot: KnowledgeSnapshot, graph: GraphData | None = None) -> GraphStats:
    """Compute dashboard counts.

    Args:
        snapshot: Raw sections the counts are taken from.
        graph: Already materialized graph of the same snapshot; built here
            when omitted.
    """
    if graph is None:
        graph = materialize(snapshot)
    return GraphStats(
        topic_count=count_topics(snapshot.topics),
        exploration_count=count_explorations(snapshot.explorations),
        edge_count=len(graph.edges),
        user_count=count_explorers(snapshot.explorations),
    )


__all__ = ["count_explorations", "count_explorers", "compute_stats"]
