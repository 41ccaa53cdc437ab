"""Tests for environment configuration."""

from __future__ import annotations

from knowledge_explorer.config import ExplorerConfig
from knowledge_explorer.rpc import DEFAULT_RPC_URL


class TestFromEnv:
    def test_defaults(self):
        config = ExplorerConfig.from_env({})
        assert config == ExplorerConfig()
        assert config.rpc_url == DEFAULT_RPC_URL
        assert config.graph_db_path is None

    def test_reads_variables(self):
        config = ExplorerConfig.from_env({
            "EXPLORER_RPC_URL": "http://localhost:8081/json-rpc",
            "EXPLORER_RPC_TIMEOUT": "3.5",
            "EXPLORER_CACHE_TTL": "0",
            "EXPLORER_GRAPH_DB_PATH": "/tmp/kg",
            "EXPLORER_HOST": "127.0.0.1",
            "EXPLORER_PORT": "9000",
            "EXPLORER_LOG_LEVEL": "DEBUG",
        })
        assert config.rpc_url == "http://localhost:8081/json-rpc"
        assert config.rpc_timeout == 3.5
        assert config.cache_ttl == 0.0
        assert config.graph_db_path == "/tmp/kg"
        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.log_level == "debug"

    def test_invalid_numbers_fall_back(self):
        config = ExplorerConfig.from_env({"EXPLORER_PORT": "eighty", "EXPLORER_CACHE_TTL": "soon"})
        assert config.port == 8080
        assert config.cache_ttl == 10.0


class TestRestBase:
    def test_derived_from_rpc_url(self):
        config = ExplorerConfig(rpc_url="http://localhost:8081/json-rpc")
        assert config.rest_base == "http://localhost:8081"

    def test_explicit_rest_url(self):
        config = ExplorerConfig.from_env({"EXPLORER_REST_URL": "http://rest.local"})
        assert config.rest_base == "http://rest.local"
