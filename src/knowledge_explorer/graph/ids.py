"""Deterministic node ids and the key encodings used on chain.

The exploration store keys topics with ``/`` replaced by ``|`` because a
slash would open a new level of the key/value tree.  Explicit graph node
records use a second encoding, ``{address}_{topic_slug}_{entry_id}``, where
the topic slug joins the path segments with underscores.

Public API:
    TOPIC_KEY_SEPARATOR: Separator replacing ``/`` in stored topic keys.
    topic_node_id / topic_path_from_node_id: Topic id pair.
    user_node_id / address_from_user_node_id: User id pair.
    encode_topic_key / decode_topic_key: Stored topic key pair.
    topic_slug: Underscore form used inside exploration ids.
    ExplorationId: Composite exploration id value type.
    truncate_address: Display name for an account address.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import InvalidNodeIdError

TOPIC_KEY_SEPARATOR = "|"
TOPIC_ID_PREFIX = "topic:"
USER_ID_PREFIX = "user:"


def topic_node_id(path: str) -> str:
    return f"{TOPIC_ID_PREFIX}{path}"


def topic_path_from_node_id(node_id: str) -> str | None:
    """Return the topic path of a ``topic:`` id, or None for other ids."""
    if not node_id.startswith(TOPIC_ID_PREFIX):
        return None
    return node_id[len(TOPIC_ID_PREFIX):]


def user_node_id(address: str) -> str:
    return f"{USER_ID_PREFIX}{address}"


def address_from_user_node_id(node_id: str) -> str | None:
    if not node_id.startswith(USER_ID_PREFIX):
        return None
    return node_id[len(USER_ID_PREFIX):]


def encode_topic_key(path: str) -> str:
    """``ai/transformers`` -> ``ai|transformers``."""
    return path.replace("/", TOPIC_KEY_SEPARATOR)


def decode_topic_key(key: str) -> str:
    """``ai|transformers`` -> ``ai/transformers``."""
    return key.replace(TOPIC_KEY_SEPARATOR, "/")


def topic_slug(path_or_key: str) -> str:
    """Underscore form of a topic path or stored key."""
    return path_or_key.replace("/", "_").replace(TOPIC_KEY_SEPARATOR, "_")


@dataclass(frozen=True)
class ExplorationId:
    """Composite id of one exploration entry.

    ``encode`` and ``parse`` are inverse for addresses and entry ids that
    contain no underscore.  The topic part only survives as a slug: an
    underscore inside a path segment cannot be told apart from a segment
    boundary, so ``parse`` never guesses the original path.

    Attributes:
        address: Author account address.
        topic: Topic path, stored key or slug (normalized to a slug on encode).
        entry_id: Entry key under the topic.
    """

    address: str
    topic: str
    entry_id: str

    @property
    def slug(self) -> str:
        return topic_slug(self.topic)

    def encode(self) -> str:
        return f"{self.address}_{self.slug}_{self.entry_id}"

    @classmethod
    def parse(cls, node_id: str) -> ExplorationId:
        """Split ``{address}_{slug}_{entry_id}``.

        Raises:
            InvalidNodeIdError: If fewer than three non-empty parts are present.
        """
        parts = node_id.split("_")
        if len(parts) < 3 or not parts[0] or not parts[-1]:
            raise InvalidNodeIdError(f"Not an exploration id: {node_id!r}")
        slug = "_".join(parts[1:-1])
        if not slug:
            raise InvalidNodeIdError(f"Exploration id has no topic: {node_id!r}")
        return cls(address=parts[0], topic=slug, entry_id=parts[-1])

    def __str__(self) -> str:
        return self.encode()


def truncate_address(address: str, chars: int = 6) -> str:
    """``0x1234567890abcdef...`` -> ``0x123456...abcdef``."""
    if not address:
        return ""
    if len(address) <= chars * 2 + 2:
        return address
    return f"{address[:chars + 2]}...{address[-chars:]}"


__all__ = [
    "TOPIC_KEY_SEPARATOR",
    "topic_node_id",
    "topic_path_from_node_id",
    "user_node_id",
    "address_from_user_node_id",
    "encode_topic_key",
    "decode_topic_key",
    "topic_slug",
    "ExplorationId",
    "truncate_address",
]
