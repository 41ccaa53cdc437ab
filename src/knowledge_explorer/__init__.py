"""knowledge-explorer: on-chain knowledge graph explorer for AIN blockchain nodes."""

__version__ = "0.1.0"

from .config import ExplorerConfig
from .exceptions import (
    DataSourceUnavailableError,
    ExplorerError,
    InvalidNodeIdError,
    RpcError,
)
from .graph import (
    EdgeType,
    ExplorationId,
    GraphData,
    GraphEdge,
    GraphNode,
    GraphStats,
    KnowledgeBackend,
    KnowledgeSnapshot,
    KuzuKnowledgeBackend,
    NodeLabel,
    OnchainKnowledgeBackend,
    compute_stats,
    flatten_topics,
    materialize,
    neighbors_of,
    subgraph_for_topic,
)
from .rpc import RpcClient

__all__ = [
    # Graph model
    "NodeLabel",
    "EdgeType",
    "GraphNode",
    "GraphEdge",
    "GraphData",
    "GraphStats",
    "ExplorationId",
    # Core operations
    "KnowledgeSnapshot",
    "flatten_topics",
    "materialize",
    "subgraph_for_topic",
    "neighbors_of",
    "compute_stats",
    # Backends
    "KnowledgeBackend",
    "OnchainKnowledgeBackend",
    "KuzuKnowledgeBackend",
    # Node access
    "RpcClient",
    "ExplorerConfig",
    # Exceptions
    "ExplorerError",
    "DataSourceUnavailableError",
    "RpcError",
    "InvalidNodeIdError",
]
