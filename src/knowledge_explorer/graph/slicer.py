"""Pure slicing queries over a materialized graph.

Public API:
    exploration_matches_topic: Topic-membership test for an exploration node.
    subgraph_for_topic: Topic, descendants, its explorations, plus one hop.
    neighbors_of: 1-hop neighborhood of a node.
"""

from __future__ import annotations

from .ids import encode_topic_key, topic_node_id, topic_slug
from .types import GraphData, GraphEdge, GraphNode, NodeLabel


def exploration_matches_topic(node: GraphNode, topic_path: str) -> bool:
    """True if an Exploration node belongs to *topic_path*.

    Producers disagree on the topic encoding, so three forms are accepted:
    the plain path, the ``|`` stored key, and the underscore slug appearing
    inside the node id.
    """
    if node.label != NodeLabel.EXPLORATION.value:
        return False
    topic_key = encode_topic_key(topic_path)
    recorded = node.properties.get("topic_path") or ""
    if recorded == topic_path or recorded == topic_key:
        return True
    return topic_slug(topic_key) in node.node_id


def _induced(graph: GraphData, node_ids: set[str], edges: list[GraphEdge]) -> GraphData:
    return GraphData(
        nodes=[n for n in graph.nodes if n.node_id in node_ids],
        edges=edges,
    )


def subgraph_for_topic(graph: GraphData, topic_path: str) -> GraphData:
    """Slice the graph around one topic.

    The seed holds the topic node, every descendant topic, and every
    exploration of the topic.  All edges touching the seed are kept and
    their far endpoints are pulled in.  An unknown path gives an empty graph.
    """
    topic_path = topic_path.strip("/")
    if not topic_path:
        return GraphData()

    own_id = topic_node_id(topic_path)
    descendant_prefix = f"{own_id}/"

    relevant: set[str] = set()
    for node in graph.nodes:
        if node.node_id == own_id or node.node_id.startswith(descendant_prefix):
            relevant.add(node.node_id)
        elif exploration_matches_topic(node, topic_path):
            relevant.add(node.node_id)

    edges = [e for e in graph.edges if e.source_id in relevant or e.target_id in relevant]
    for edge in edges:
        relevant.add(edge.source_id)
        relevant.add(edge.target_id)

    return _induced(graph, relevant, edges)


def neighbors_of(graph: GraphData, node_id: str) -> GraphData:
    """Return *node_id*, every node sharing an edge with it, and those edges.

    Direction is ignored.  An id absent from the graph gives an empty graph.
    """
    edges = [e for e in graph.edges if e.touches(node_id)]
    node_ids = {node_id}
    for edge in edges:
        node_ids.add(edge.source_id)
        node_ids.add(edge.target_id)
    return _induced(graph, node_ids, edges)


__all__ = ["exploration_matches_topic", "subgraph_for_topic", "neighbors_of"]
