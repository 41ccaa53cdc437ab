#!/usr/bin/env python3
"""Verification script for the two knowledge backends.

Reads the live ledger through the on-chain backend, loads the same graph
into a Kuzu database, and checks that both answer every query alike.
"""

import argparse
import asyncio
import shutil
import tempfile
from pathlib import Path

from knowledge_explorer import (
    ExplorerConfig,
    KuzuKnowledgeBackend,
    OnchainKnowledgeBackend,
    RpcClient,
)


def stored_edge_ids(graph, known):
    # Kuzu cannot hold edges to missing nodes
    return {e.edge_id for e in graph.edges if e.source_id in known and e.target_id in known}


def same(label, left, right, known):
    ok = left.node_ids() == right.node_ids() and stored_edge_ids(left, known) == stored_edge_ids(right, known)
    mark = "✓" if ok else "✗"
    print(f"{mark} {label}: {len(left.nodes)} nodes / {len(left.edges)} edges")
    return ok


async def verify(rpc_url: str, db_dir: Path) -> bool:
    config = ExplorerConfig.from_env()
    async with RpcClient(rpc_url, timeout=config.rpc_timeout) as client:
        onchain = OnchainKnowledgeBackend(client)
        print(f"\n{'=' * 60}")
        print(f"Reading knowledge graph from {rpc_url}")
        print("=" * 60)
        graph = await onchain.full_graph()
        print(f"✓ Materialized {len(graph.nodes)} nodes, {len(graph.edges)} edges")

        kuzu_db = KuzuKnowledgeBackend(db_dir / "knowledge_db")
        written = kuzu_db.replace_graph(graph)
        known = graph.node_ids()
        print(f"✓ Loaded {written} edges into Kuzu")

        results = [same("full graph", graph, await kuzu_db.full_graph(), known)]

        topic_ids = sorted(n.node_id for n in graph.nodes_with_label("Topic"))[:5]
        for topic_id in topic_ids:
            path = topic_id.split(":", 1)[1]
            results.append(
                same(f"topic {path}", await onchain.topic_subgraph(path), await kuzu_db.topic_subgraph(path), known)
            )

        exploration_ids = sorted(n.node_id for n in graph.nodes_with_label("Exploration"))[:5]
        for node_id in exploration_ids:
            results.append(
                same(f"neighbors {node_id}", await onchain.node_neighbors(node_id), await kuzu_db.node_neighbors(node_id), known)
            )

        print(f"\nOn-chain stats: {(await onchain.stats()).to_dict()}")
        print(f"Kuzu stats:     {(await kuzu_db.stats()).to_dict()}")
        kuzu_db.close()
    return all(results)


def main():
    parser = argparse.ArgumentParser(description="Compare the on-chain and Kuzu knowledge backends")
    parser.add_argument("--rpc-url", default=ExplorerConfig.from_env().rpc_url)
    args = parser.parse_args()

    db_dir = Path(tempfile.mkdtemp(prefix="verify-knowledge-"))
    try:
        ok = asyncio.run(verify(args.rpc_url, db_dir))
    finally:
        shutil.rmtree(db_dir, ignore_errors=True)

    print(f"\n{'=' * 60}")
    print("✅ Backends agree" if ok else "❌ Backends disagree")
    print("=" * 60)
    raise SystemExit(0 if ok else 1)


if __name__ == "__main__":
    main()
