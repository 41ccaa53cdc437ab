"""FastAPI routes proxying the knowledge graph and the node's JSON-RPC API.

Routes:
    POST /api/knowledge            {action, params} against the on-chain backend
    POST /api/graph-db             same contract against the Kuzu backend
    POST /api/rpc                  {method, params} passed through to the node
    GET  /api/knowledge/topics/{path}          topic detail view data
    GET  /api/knowledge/explorations/{node_id} exploration detail view data
    GET  /health
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config import ExplorerConfig
from .exceptions import DataSourceUnavailableError
from .graph.kuzu_backend import KuzuKnowledgeBackend
from .graph.onchain_backend import OnchainKnowledgeBackend
from .graph.protocol import KnowledgeBackend
from .rpc import RpcClient

logger = logging.getLogger(__name__)


class KnowledgeRequest(BaseModel):
    action: str | None = None
    params: dict[str, Any] | None = None


class RpcRequest(BaseModel):
    method: str | None = None
    params: dict[str, Any] | None = None


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def dispatch_knowledge(backend: KnowledgeBackend, body: KnowledgeRequest) -> JSONResponse:
    """Run one knowledge action and wrap the result as JSON."""
    params = body.params or {}
    try:
        if body.action == "stats":
            return JSONResponse((await backend.stats()).to_dict())
        if body.action == "graph":
            return JSONResponse((await backend.full_graph()).to_dict())
        if body.action == "topic":
            topic_path = params.get("topicPath")
            if not topic_path:
                return _error("topicPath required", 400)
            return JSONResponse((await backend.topic_subgraph(str(topic_path))).to_dict())
        if body.action == "exploration":
            node_id = params.get("nodeId")
            if not node_id:
                return _error("nodeId required", 400)
            return JSONResponse((await backend.node_neighbors(str(node_id))).to_dict())
    except Exception as e:
        logger.exception("Knowledge API error for action %s", body.action)
        return _error(str(e) or "Internal server error", 500)
    return _error("Unknown action", 400)


def create_app(
    config: ExplorerConfig | None = None,
    *,
    client: RpcClient | None = None,
    backend: KnowledgeBackend | None = None,
    graph_db: KnowledgeBackend | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Settings; read from the environment when None.
        client: Node client; built from *config* when None.
        backend: Knowledge backend; on-chain over *client* when None.
        graph_db: Graph-database backend; opened from
            ``config.graph_db_path`` when None and a path is configured.
    """
    config = config or ExplorerConfig.from_env()
    owns_client = client is None
    if client is None:
        client = RpcClient(
            config.rpc_url,
            rest_base=config.rest_base,
            timeout=config.rpc_timeout,
            cache_ttl=config.cache_ttl,
        )
    knowledge = backend or OnchainKnowledgeBackend(client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        opened_db: KuzuKnowledgeBackend | None = None
        if app.state.graph_db is None and config.graph_db_path:
            opened_db = KuzuKnowledgeBackend(config.graph_db_path)
            app.state.graph_db = opened_db
        if owns_client:
            await client.__aenter__()
        logger.info("Knowledge explorer using node %s", client.rpc_url)
        try:
            yield
        finally:
            if owns_client:
                await client.close()
            if opened_db is not None:
                opened_db.close()
                app.state.graph_db = None

    app = FastAPI(title="Knowledge Explorer", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.client = client
    app.state.knowledge = knowledge
    app.state.graph_db = graph_db

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "rpcUrl": client.rpc_url,
            "graphDb": app.state.graph_db is not None,
        }

    @app.post("/api/knowledge")
    async def knowledge_action(body: KnowledgeRequest) -> JSONResponse:
        return await dispatch_knowledge(app.state.knowledge, body)

    @app.post("/api/graph-db")
    async def graph_db_action(body: KnowledgeRequest) -> JSONResponse:
        if app.state.graph_db is None:
            return _error("Graph database not configured", 503)
        return await dispatch_knowledge(app.state.graph_db, body)

    @app.get("/api/knowledge/topics/{topic_path:path}")
    async def topic_detail(topic_path: str) -> JSONResponse:
        onchain = app.state.knowledge
        if not isinstance(onchain, OnchainKnowledgeBackend):
            return _error("Topic detail needs the on-chain backend", 501)
        detail = await onchain.topic_detail(topic_path)
        return JSONResponse(detail.to_dict())

    @app.get("/api/knowledge/explorations/{node_id}")
    async def exploration_detail(node_id: str) -> JSONResponse:
        onchain = app.state.knowledge
        if not isinstance(onchain, OnchainKnowledgeBackend):
            return _error("Exploration detail needs the on-chain backend", 501)
        detail = await onchain.exploration_detail(node_id)
        if detail is None:
            return _error(f"Not an exploration id: {node_id}", 404)
        return JSONResponse(detail.to_dict())

    @app.post("/api/rpc")
    async def rpc_proxy(body: RpcRequest) -> JSONResponse:
        if not body.method:
            return _error("method required", 400)
        try:
            envelope = await client.call_raw(body.method, body.params)
        except DataSourceUnavailableError as e:
            logger.warning("RPC proxy error for %s: %s", body.method, e)
            return _error(str(e) or "RPC request failed", 500)
        return JSONResponse(envelope)

    return app


__all__ = ["KnowledgeRequest", "RpcRequest", "dispatch_knowledge", "create_app"]
