"""OnchainKnowledgeBackend -- knowledge graph rebuilt from ledger snapshots.

Every operation reads the four ``/apps/knowledge`` sections concurrently,
materializes the graph, and slices it in memory.  A section that fails to
load, or loads as something other than a mapping, is treated as absent so
that the rest of the graph can still be shown.

Public API:
    KNOWLEDGE_ROOT: Root of the knowledge app in the key/value store.
    SECTION_PATHS: Section name -> key/value path.
    SnapshotSource: Anything with an async ``get_value(ref)``.
    OnchainKnowledgeBackend: KnowledgeBackend over a ``SnapshotSource``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from ..exceptions import DataSourceUnavailableError, InvalidNodeIdError
from .explorations import (
    ExplorationDetail,
    TopicDetail,
    collect_topic_explorations,
    find_exploration,
    summarize_explorations,
)
from .ids import ExplorationId
from .materializer import KnowledgeSnapshot, materialize
from .slicer import neighbors_of, subgraph_for_topic
from .stats import compute_stats
from .topics import INFO_KEY, TopicInfo
from .types import GraphData, GraphStats

logger = logging.getLogger(__name__)

KNOWLEDGE_ROOT = "/apps/knowledge"
SECTION_PATHS: dict[str, str] = {
    "nodes": f"{KNOWLEDGE_ROOT}/graph/nodes",
    "edges": f"{KNOWLEDGE_ROOT}/graph/edges",
    "topics": f"{KNOWLEDGE_ROOT}/topics",
    "explorations": f"{KNOWLEDGE_ROOT}/explorations",
}


class SnapshotSource(Protocol):
    async def get_value(self, ref: str) -> Any: ...


class OnchainKnowledgeBackend:
    """KnowledgeBackend that reconstructs the graph on every call.

    Args:
        source: Usually an ``RpcClient``; any object with ``get_value``.
    """

    def __init__(self, source: SnapshotSource) -> None:
        self._source = source

    # ── snapshot loading ──────────────────────────────────────

    async def _read_section(self, name: str, ref: str) -> Any:
        """Read one section; failures and malformed values become None."""
        try:
            value = await self._source.get_value(ref)
        except DataSourceUnavailableError as e:
            logger.warning("Knowledge section %s unavailable: %s", name, e)
            return None
        if value is not None and not isinstance(value, Mapping):
            logger.warning("Knowledge section %s is not a mapping (%s)", name, type(value).__name__)
            return None
        return value

    async def fetch_snapshot(self) -> KnowledgeSnapshot:
        """Read all four sections concurrently.

        One failing section never cancels or fails the others.
        """
        names = list(SECTION_PATHS)
        results = await asyncio.gather(
            *(self._read_section(name, SECTION_PATHS[name]) for name in names),
            return_exceptions=True,
        )
        values = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.warning("Knowledge section %s failed: %r", name, result)
                result = None
            values[name] = result
        return KnowledgeSnapshot(**values)

    # ── KnowledgeBackend ──────────────────────────────────────

    async def full_graph(self) -> GraphData:
        return materialize(await self.fetch_snapshot())

    async def topic_subgraph(self, topic_path: str) -> GraphData:
        return subgraph_for_topic(await self.full_graph(), topic_path)

    async def node_neighbors(self, node_id: str) -> GraphData:
        return neighbors_of(await self.full_graph(), node_id)

    async def stats(self) -> GraphStats:
        snapshot = await self.fetch_snapshot()
        return compute_stats(snapshot, materialize(snapshot))

    # ── detail views ──────────────────────────────────────────

    async def topic_info(self, topic_path: str) -> TopicInfo | None:
        path = topic_path.strip("/")
        raw = await self._read_section("topic info", f"{SECTION_PATHS['topics']}/{path}/{INFO_KEY}")
        return TopicInfo.from_raw(raw) if raw else None

    async def topic_detail(self, topic_path: str) -> TopicDetail:
        """Topic metadata, its explorations, depth summary and subgraph."""
        path = topic_path.strip("/")
        snapshot, info = await asyncio.gather(self.fetch_snapshot(), self.topic_info(path))
        entries = collect_topic_explorations(snapshot.explorations, path)
        return TopicDetail(
            path=path,
            info=info,
            explorations=entries,
            summary=summarize_explorations(entries),
            graph=subgraph_for_topic(materialize(snapshot), path),
        )

    async def exploration_detail(self, node_id: str) -> ExplorationDetail | None:
        """Resolve an exploration id to its record and neighborhood.

        Returns None when the id cannot be parsed.
        """
        try:
            parsed = ExplorationId.parse(node_id)
        except InvalidNodeIdError as e:
            logger.debug("Exploration lookup skipped: %s", e)
            return None

        snapshot = await self.fetch_snapshot()
        entry = find_exploration(snapshot.explorations, parsed)
        return ExplorationDetail(
            node_id=node_id,
            exploration_id=parsed,
            entry=entry,
            graph=neighbors_of(materialize(snapshot), node_id),
        )


__all__ = ["KNOWLEDGE_ROOT", "SECTION_PATHS", "SnapshotSource", "OnchainKnowledgeBackend"]
