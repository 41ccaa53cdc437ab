"""Explorer configuration read from the environment.

Environment variables:
    EXPLORER_RPC_URL        JSON-RPC endpoint of the blockchain node.
    EXPLORER_REST_URL       REST base URL (default: RPC URL minus ``/json-rpc``).
    EXPLORER_RPC_TIMEOUT    Per-request timeout in seconds.
    EXPLORER_CACHE_TTL      Seconds a node response may be reused (0 disables).
    EXPLORER_GRAPH_DB_PATH  Kuzu database for the graph-db backend (optional).
    EXPLORER_HOST / EXPLORER_PORT  Bind address of the API server.
    EXPLORER_LOG_LEVEL      Logging level name.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .rpc import DEFAULT_RPC_URL, rest_base_for

logger = logging.getLogger(__name__)


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    return int(_float(env, name, default))


@dataclass(frozen=True)
class ExplorerConfig:
    rpc_url: str = DEFAULT_RPC_URL
    rest_url: str = ""
    rpc_timeout: float = 15.0
    cache_ttl: float = 10.0
    graph_db_path: str | None = None
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"

    @property
    def rest_base(self) -> str:
        return self.rest_url or rest_base_for(self.rpc_url)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ExplorerConfig:
        env = os.environ if env is None else env
        return cls(
            rpc_url=env.get("EXPLORER_RPC_URL") or DEFAULT_RPC_URL,
            rest_url=env.get("EXPLORER_REST_URL", ""),
            rpc_timeout=_float(env, "EXPLORER_RPC_TIMEOUT", 15.0),
            cache_ttl=_float(env, "EXPLORER_CACHE_TTL", 10.0),
            graph_db_path=env.get("EXPLORER_GRAPH_DB_PATH") or None,
            host=env.get("EXPLORER_HOST") or "0.0.0.0",
            port=_int(env, "EXPLORER_PORT", 8080),
            log_level=(env.get("EXPLORER_LOG_LEVEL") or "info").lower(),
        )


__all__ = ["ExplorerConfig"]
