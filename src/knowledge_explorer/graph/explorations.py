"""Exploration lookups behind the topic and exploration detail views.

Public API:
    ExplorationEntry: One stored exploration with its location in the store.
    TopicSummary: Depth statistics of a topic's explorations.
    TopicDetail: Everything the topic view shows.
    ExplorationDetail: Everything the exploration view shows.
    collect_topic_explorations: Entries stored under one topic.
    summarize_explorations: Counts and depth statistics.
    find_exploration: Resolve a composite exploration id in the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .ids import ExplorationId, decode_topic_key, encode_topic_key, topic_slug
from .topics import TopicInfo
from .types import GraphData


@dataclass(frozen=True)
class ExplorationEntry:
    """A stored exploration record and where it lives."""

    address: str
    topic_key: str
    entry_id: str
    record: dict[str, Any] = field(default_factory=dict)

    @property
    def topic_path(self) -> str:
        return self.record.get("topic_path") or decode_topic_key(self.topic_key)

    @property
    def node_id(self) -> str:
        return ExplorationId(self.address, self.topic_key, self.entry_id).encode()

    @property
    def depth(self) -> int | None:
        depth = self.record.get("depth")
        if isinstance(depth, bool) or not isinstance(depth, (int, float)):
            return None
        return int(depth)

    @property
    def is_gated(self) -> bool:
        return self.record.get("price") is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.node_id,
            "address": self.address,
            "topicKey": self.topic_key,
            "entryId": self.entry_id,
            "data": dict(self.record),
        }


@dataclass
class TopicSummary:
    exploration_count: int = 0
    explorer_count: int = 0
    max_depth: int = 0
    avg_depth: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "explorationCount": self.exploration_count,
            "explorerCount": self.explorer_count,
            "maxDepth": self.max_depth,
            "avgDepth": round(self.avg_depth, 1),
        }


@dataclass
class TopicDetail:
    path: str
    info: TopicInfo | None
    explorations: list[ExplorationEntry]
    summary: TopicSummary
    graph: GraphData

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "info": self.info.to_properties() if self.info else None,
            "explorations": [e.to_dict() for e in self.explorations],
            "summary": self.summary.to_dict(),
            "graph": self.graph.to_dict(),
        }


@dataclass
class ExplorationDetail:
    node_id: str
    exploration_id: ExplorationId
    entry: ExplorationEntry | None
    graph: GraphData

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "address": self.exploration_id.address,
            "topicKey": self.entry.topic_key if self.entry else self.exploration_id.slug,
            "entryId": self.exploration_id.entry_id,
            "exploration": dict(self.entry.record) if self.entry else None,
            "graph": self.graph.to_dict(),
        }


def _topic_entries(address: str, topic_key: str, entries: Any) -> list[ExplorationEntry]:
    if not isinstance(entries, Mapping):
        return []
    found = []
    for entry_id, record in entries.items():
        if not isinstance(entry_id, str) or entry_id.startswith("."):
            continue
        if isinstance(record, Mapping) and "title" in record:
            found.append(ExplorationEntry(address, topic_key, entry_id, dict(record)))
    return found


def collect_topic_explorations(raw_explorations: Any, topic_path: str) -> list[ExplorationEntry]:
    """Return every titled exploration stored under *topic_path*.

    The topic key is matched in its ``|`` form and in the older underscore
    form, since both appear in the store.
    """
    if not isinstance(raw_explorations, Mapping):
        return []
    wanted = {encode_topic_key(topic_path), topic_slug(topic_path)}
    found: list[ExplorationEntry] = []
    for address, topics in raw_explorations.items():
        if not isinstance(topics, Mapping):
            continue
        for topic_key, entries in topics.items():
            if topic_key in wanted:
                found.extend(_topic_entries(address, topic_key, entries))
    return found


def summarize_explorations(entries: list[ExplorationEntry]) -> TopicSummary:
    depths = [e.depth for e in entries if e.depth]
    return TopicSummary(
        exploration_count=len(entries),
        explorer_count=len({e.address for e in entries}),
        max_depth=max(depths) if depths else 0,
        avg_depth=sum(depths) / len(depths) if depths else 0.0,
    )


def find_exploration(raw_explorations: Any, exploration_id: ExplorationId) -> ExplorationEntry | None:
    """Locate the record a composite id points at, or None.

    The id only carries the topic slug, so each stored topic key of the
    address is compared in slug form.
    """
    if not isinstance(raw_explorations, Mapping):
        return None
    topics = raw_explorations.get(exploration_id.address)
    if not isinstance(topics, Mapping):
        return None
    for topic_key, entries in topics.items():
        if not isinstance(topic_key, str) or topic_slug(topic_key) != exploration_id.slug:
            continue
        if not isinstance(entries, Mapping):
            continue
        record = entries.get(exploration_id.entry_id)
        if isinstance(record, Mapping):
            return ExplorationEntry(exploration_id.address, topic_key, exploration_id.entry_id, dict(record))
    return None


__all__ = [
    "ExplorationEntry",
    "TopicSummary",
    "TopicDetail",
    "ExplorationDetail",
    "collect_topic_explorations",
    "summarize_explorations",
    "find_exploration",
]
