"""Topic-tree parsing and flattening.

The topic namespace is stored as a nested mapping: keys are path segments,
and a level may carry its own metadata under the reserved ``.info`` key.
A level without ``.info`` is a pure namespace that may still hold deeper
topics.

Public API:
    INFO_KEY: Reserved metadata key.
    TopicInfo: Metadata of one topic.
    TopicTreeNode: Typed recursive tree built from the raw snapshot.
    TopicEntry: One flattened ``(path, info)`` pair.
    flatten_topics: Depth-first list of every level of the tree.
    count_topics: Number of ``.info``-bearing levels.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

INFO_KEY = ".info"

_KNOWN_INFO_FIELDS = ("title", "description", "created_by", "created_at")


@dataclass(frozen=True)
class TopicInfo:
    """Metadata recorded for a topic when it was created on chain."""

    title: str | None = None
    description: str | None = None
    created_by: str | None = None
    created_at: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> TopicInfo:
        extra = {k: v for k, v in raw.items() if k not in _KNOWN_INFO_FIELDS}
        return cls(
            title=raw.get("title"),
            description=raw.get("description"),
            created_by=raw.get("created_by"),
            created_at=raw.get("created_at"),
            extra=extra,
        )

    def to_properties(self) -> dict[str, Any]:
        props: dict[str, Any] = dict(self.extra)
        props.update(
            title=self.title,
            description=self.description,
            created_by=self.created_by,
            created_at=self.created_at,
        )
        return props


@dataclass
class TopicTreeNode:
    """One level of the topic namespace."""

    info: TopicInfo | None = None
    children: dict[str, TopicTreeNode] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> TopicTreeNode:
        """Build the typed tree in one pass; anything but a mapping is empty."""
        node = cls()
        if not isinstance(raw, Mapping):
            return node

        info = raw.get(INFO_KEY)
        if isinstance(info, Mapping):
            node.info = TopicInfo.from_raw(info)

        for key, value in raw.items():
            # Dotted keys are metadata (.info, .rule, ...), never segments.
            if not isinstance(key, str) or key.startswith(".") or not key:
                continue
            if not isinstance(value, Mapping):
                continue
            node.children[key] = cls.from_raw(value)
        return node

    def walk(self, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], TopicTreeNode]]:
        """Yield ``(segments, node)`` depth-first, parents before children.

        The root itself (empty segment tuple) is not yielded.
        """
        for segment, child in self.children.items():
            segments = prefix + (segment,)
            yield segments, child
            yield from child.walk(segments)


@dataclass(frozen=True)
class TopicEntry:
    """A flattened topic: its ``/``-joined path and optional metadata."""

    path: str
    info: TopicInfo | None = None

    @property
    def is_namespace(self) -> bool:
        return self.info is None

    @property
    def parent_path(self) -> str | None:
        if "/" not in self.path:
            return None
        return self.path.rsplit("/", 1)[0]


def flatten_topics(raw: Any) -> list[TopicEntry]:
    """Flatten a raw topic tree into one entry per level.

    Levels without ``.info`` are included with ``info=None`` so that deeper
    topics keep a connected chain of ancestors.  Malformed input yields an
    empty list.
    """
    tree = raw if isinstance(raw, TopicTreeNode) else TopicTreeNode.from_raw(raw)
    return [TopicEntry(path="/".join(segments), info=node.info) for segments, node in tree.walk()]


def count_topics(raw: Any) -> int:
    """Count the levels that carry ``.info``."""
    tree = raw if isinstance(raw, TopicTreeNode) else TopicTreeNode.from_raw(raw)
    return sum(1 for _, node in tree.walk() if node.info is not None)


__all__ = [
    "INFO_KEY",
    "TopicInfo",
    "TopicTreeNode",
    "TopicEntry",
    "flatten_topics",
    "count_topics",
]
