"""Run the knowledge explorer API server.

    python -m knowledge_explorer --port 8080

Node and database settings come from the environment (see ``config.py``).
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from .api import create_app
from .config import ExplorerConfig


def main(argv: list[str] | None = None) -> None:
    config = ExplorerConfig.from_env()
    parser = argparse.ArgumentParser(description="Knowledge graph explorer API")
    parser.add_argument("--host", default=config.host, help=f"Bind address (default: {config.host})")
    parser.add_argument("--port", type=int, default=config.port, help=f"Port (default: {config.port})")
    parser.add_argument("--rpc-url", default=config.rpc_url, help="Blockchain node JSON-RPC endpoint")
    parser.add_argument("--graph-db", default=config.graph_db_path, help="Kuzu database for /api/graph-db")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = ExplorerConfig(
        rpc_url=args.rpc_url,
        rest_url=config.rest_url,
        rpc_timeout=config.rpc_timeout,
        cache_ttl=config.cache_ttl,
        graph_db_path=args.graph_db,
        host=args.host,
        port=args.port,
        log_level=config.log_level,
    )
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=config.log_level)


if __name__ == "__main__":
    main()
