"""Pytest configuration and fixtures for knowledge-explorer tests.

The sample ledger used across tests:

    topics        ai, ai/transformers, ai/transformers/attention,
                  ai/transformers/decoding, physics, physics/quantum
    graph nodes   e1 (0xAAA, ai/transformers), e2 (0xBBB, ai/transformers/attention),
                  e3 (0xBBB, physics/quantum), e4 (0xCCC, z/novel -- no topic entry)
    graph edges   e2 -> e1 extends, e1 -> e2 related (reverse duplicate),
                  e3 -> e1 prerequisite
    explorations  0xAAA: ai|transformers {e1}
                  0xBBB: ai|transformers|attention {e2}, physics|quantum {e3}
                  0xDDD: {} (address without entries)
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from knowledge_explorer.exceptions import DataSourceUnavailableError
from knowledge_explorer.graph import SECTION_PATHS, KnowledgeSnapshot

E1 = "0xAAA_ai_transformers_e1"
E2 = "0xBBB_ai_transformers_attention_e2"
E3 = "0xBBB_physics_quantum_e3"
E4 = "0xCCC_z_novel_e4"


def _info(title: str) -> dict[str, Any]:
    return {
        "title": title,
        "description": f"About {title}",
        "created_by": "0xAAA",
        "created_at": 1700000000000,
    }


SAMPLE_TOPICS: dict[str, Any] = {
    "ai": {
        ".info": _info("Artificial Intelligence"),
        "transformers": {
            ".info": _info("Transformers"),
            "attention": {".info": _info("Attention")},
            "decoding": {".info": _info("Decoding")},
        },
    },
    "physics": {
        ".info": _info("Physics"),
        "quantum": {".info": _info("Quantum")},
    },
}


def _exploration(address: str, topic_path: str, entry_id: str, title: str, depth: int) -> dict[str, Any]:
    return {
        "address": address,
        "topic_path": topic_path,
        "entry_id": entry_id,
        "title": title,
        "depth": depth,
        "created_at": 1700000001000,
    }


SAMPLE_NODES: dict[str, Any] = {
    E1: _exploration("0xAAA", "ai/transformers", "e1", "Transformers intro", 1),
    E2: _exploration("0xBBB", "ai/transformers/attention", "e2", "Attention deep dive", 3),
    E3: _exploration("0xBBB", "physics/quantum", "e3", "Quantum basics", 2),
    E4: _exploration("0xCCC", "z/novel", "e4", "Something new", 1),
}

SAMPLE_EDGES: dict[str, Any] = {
    E2: {E1: {"type": "extends", "created_at": 1, "created_by": "0xBBB"}},
    E1: {E2: {"type": "related", "created_at": 2, "created_by": "0xAAA"}},
    E3: {E1: {"type": "prerequisite", "created_at": 3, "created_by": "0xBBB"}},
}

SAMPLE_EXPLORATIONS: dict[str, Any] = {
    "0xAAA": {
        "ai|transformers": {
            "e1": {"topic_path": "ai/transformers", "title": "Transformers intro", "depth": 1},
        },
    },
    "0xBBB": {
        "ai|transformers|attention": {
            "e2": {"topic_path": "ai/transformers/attention", "title": "Attention deep dive", "depth": 3},
        },
        "physics|quantum": {
            "e3": {"topic_path": "physics/quantum", "title": "Quantum basics", "depth": 2},
        },
    },
    "0xDDD": {},
}


class FakeSource:
    """In-memory stand-in for ``RpcClient.get_value``."""

    def __init__(self, values: dict[str, Any], failures: set[str] | None = None) -> None:
        self.values = values
        self.failures = failures or set()
        self.calls: list[str] = []

    async def get_value(self, ref: str) -> Any:
        self.calls.append(ref)
        if ref in self.failures:
            raise DataSourceUnavailableError(f"boom: {ref}")
        return copy.deepcopy(self.values.get(ref))


@pytest.fixture
def sample_snapshot() -> KnowledgeSnapshot:
    return KnowledgeSnapshot(
        nodes=copy.deepcopy(SAMPLE_NODES),
        edges=copy.deepcopy(SAMPLE_EDGES),
        topics=copy.deepcopy(SAMPLE_TOPICS),
        explorations=copy.deepcopy(SAMPLE_EXPLORATIONS),
    )


@pytest.fixture
def ledger_values() -> dict[str, Any]:
    """Key/value paths of the sample ledger, as the node would serve them."""
    return {
        SECTION_PATHS["nodes"]: copy.deepcopy(SAMPLE_NODES),
        SECTION_PATHS["edges"]: copy.deepcopy(SAMPLE_EDGES),
        SECTION_PATHS["topics"]: copy.deepcopy(SAMPLE_TOPICS),
        SECTION_PATHS["explorations"]: copy.deepcopy(SAMPLE_EXPLORATIONS),
        f"{SECTION_PATHS['topics']}/ai/transformers/.info": _info("Transformers"),
    }


@pytest.fixture
def fake_source(ledger_values) -> FakeSource:
    return FakeSource(ledger_values)
