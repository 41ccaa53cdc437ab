"""Tests for the command-line launcher."""

from __future__ import annotations

from fastapi import FastAPI

from knowledge_explorer import __main__ as launcher


def test_arguments_override_environment(monkeypatch, tmp_path):
    captured = {}

    def fake_run(app, **kwargs):
        captured["app"] = app
        captured.update(kwargs)

    monkeypatch.setenv("EXPLORER_PORT", "9000")
    monkeypatch.setenv("EXPLORER_LOG_LEVEL", "WARNING")
    monkeypatch.setattr(launcher.uvicorn, "run", fake_run)

    launcher.main(["--host", "127.0.0.1", "--rpc-url", "http://localhost:8081/json-rpc"])

    assert isinstance(captured["app"], FastAPI)
    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 9000
    assert captured["log_level"] == "warning"
    config = captured["app"].state.config
    assert config.rpc_url == "http://localhost:8081/json-rpc"
    assert config.rest_base == "http://localhost:8081"
    assert config.graph_db_path is None
