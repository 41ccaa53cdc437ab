"""Basic usage example for knowledge-explorer."""

import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


from knowledge_explorer import (
    KnowledgeSnapshot,
    KuzuKnowledgeBackend,
    compute_stats,
    flatten_topics,
    materialize,
    neighbors_of,
    subgraph_for_topic,
)

TOPICS = {
    "ai": {
        ".info": {"title": "Artificial Intelligence", "created_by": "0xAAA"},
        "transformers": {
            ".info": {"title": "Transformers", "created_by": "0xAAA"},
            "attention": {".info": {"title": "Attention", "created_by": "0xBBB"}},
        },
    },
}

NODES = {
    "0xAAA_ai_transformers_e1": {"topic_path": "ai/transformers", "title": "Transformers intro", "depth": 1},
    "0xBBB_ai_transformers_attention_e2": {
        "topic_path": "ai/transformers/attention",
        "title": "Attention deep dive",
        "depth": 3,
    },
}

EDGES = {
    "0xBBB_ai_transformers_attention_e2": {
        "0xAAA_ai_transformers_e1": {"type": "extends", "created_by": "0xBBB"},
    },
}

EXPLORATIONS = {
    "0xAAA": {"ai|transformers": {"e1": {"title": "Transformers intro", "depth": 1}}},
    "0xBBB": {"ai|transformers|attention": {"e2": {"title": "Attention deep dive", "depth": 3}}},
}


def main():
    print("=" * 60)
    print("knowledge-explorer - Basic Usage Example")
    print("=" * 60)

    # 1. Walk the topic tree
    print("\n1. Flattening topics...")
    for entry in flatten_topics(TOPICS):
        title = entry.info.title if entry.info else "(namespace)"
        print(f"   {entry.path}: {title}")

    # 2. Materialize the graph
    print("\n2. Materializing graph...")
    snapshot = KnowledgeSnapshot(nodes=NODES, edges=EDGES, topics=TOPICS, explorations=EXPLORATIONS)
    graph = materialize(snapshot)
    print(f"   {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    for edge in graph.edges:
        print(f"   {edge.source_id} -[{edge.edge_type}]-> {edge.target_id}")

    # 3. Slice it
    print("\n3. Slicing...")
    topic = subgraph_for_topic(graph, "ai/transformers")
    print(f"   ai/transformers subgraph: {sorted(topic.node_ids())}")
    around = neighbors_of(graph, "0xAAA_ai_transformers_e1")
    print(f"   neighbors of e1: {sorted(around.node_ids())}")

    # 4. Stats
    print("\n4. Stats...")
    for key, value in compute_stats(snapshot, graph).to_dict().items():
        print(f"   {key}: {value}")

    # 5. Load into Kuzu and query there
    print("\n5. Loading into Kuzu...")
    with tempfile.TemporaryDirectory() as tmp:
        db = KuzuKnowledgeBackend(Path(tmp) / "knowledge_db")
        written = db.replace_graph(graph)
        print(f"   Wrote {written} edges")
        print(f"   Kuzu stats: {db.stats_sync().to_dict()}")
        same = db.topic_subgraph_sync("ai/transformers").node_ids() == topic.node_ids()
        print(f"   Topic slice matches in-memory slice: {same}")
        db.close()

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
