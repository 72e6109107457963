from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from tmux_mcp.config import TmuxSettings
from tmux_mcp.server import build_parser, create_server
from tmux_mcp.tmux.runner import FakeTmuxRunner


def test_create_server_reports_tmux_metadata() -> None:
    server = create_server(TmuxSettings(), tmux_runner=FakeTmuxRunner())

    metadata = getattr(server, "tmux_metadata")
    assert metadata["available"] is True
    assert metadata["version"] == "tmux fake"
    assert metadata["path"] == "/tmp/fake-tmux"
    assert metadata["error"] is None


def test_status_resource_summarizes_runtime_state() -> None:
    server = create_server(TmuxSettings(), tmux_runner=FakeTmuxRunner())

    payload = json.loads(server.status_resource(None))  # type: ignore[attr-defined]

    assert payload["tmux"]["version"] == "tmux fake"
    assert payload["shell"] == {"type": "bash", "end_marker": "TMUX_MCP_DONE_$?"}
    assert payload["queue"]["pending"] == 0
    assert payload["queue"]["draining"] is False
    assert payload["commands"]["count"] == 0
    assert payload["commands"]["status_counts"] == {}
    assert payload["request_id"] is None


def test_status_resource_counts_tracked_commands() -> None:
    runner = FakeTmuxRunner(["$ "])
    server = create_server(TmuxSettings(), tmux_runner=runner)
    tracker = getattr(server, "execution_tracker")

    asyncio.run(tracker.start("%1", "ls"))
    payload = json.loads(server.status_resource(None))  # type: ignore[attr-defined]

    assert payload["commands"]["count"] == 1
    assert payload["commands"]["status_counts"] == {"pending": 1}


def test_shell_type_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMUX_MCP_SHELL_TYPE", "zsh")

    server = create_server(TmuxSettings(), tmux_runner=FakeTmuxRunner())

    assert getattr(server, "shell_config").type == "zsh"


def test_missing_tmux_binary_degrades(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TMUX_PATH", str(tmp_path / "missing-tmux"))

    server = create_server(TmuxSettings())

    metadata = getattr(server, "tmux_metadata")
    assert metadata["available"] is False
    assert "not found" in metadata["error"]

    client = getattr(server, "tmux_client")
    assert asyncio.run(client.list_sessions()) == []
    assert asyncio.run(client.is_running()) is False


def test_parser_accepts_shell_type() -> None:
    args = build_parser().parse_args(["--shell-type", "fish"])

    assert args.shell_type == "fish"

    with pytest.raises(SystemExit):
        build_parser().parse_args(["--shell-type", "tcsh"])
