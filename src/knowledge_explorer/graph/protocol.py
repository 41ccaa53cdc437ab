"""KnowledgeBackend protocol -- the contract every graph source implements.

Public API:
    KnowledgeBackend: Runtime-checkable protocol for knowledge graph sources.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import GraphData, GraphStats


@runtime_checkable
class KnowledgeBackend(Protocol):
    """Common interface for knowledge graph backends.

    The on-chain backend rebuilds the graph from key/value snapshots; the
    graph-database backend answers with Cypher.  Callers only see
    ``GraphData`` and ``GraphStats`` and can swap one for the other.
    """

    async def full_graph(self) -> GraphData:
        """Return every node and edge."""
        ...

    async def topic_subgraph(self, topic_path: str) -> GraphData:
        """Return the slice around *topic_path* (empty when unknown)."""
        ...

    async def node_neighbors(self, node_id: str) -> GraphData:
        """Return the 1-hop neighborhood of *node_id* (empty when unknown)."""
        ...

    async def stats(self) -> GraphStats:
        """Return dashboard counts."""
        ...


__all__ = ["KnowledgeBackend"]
