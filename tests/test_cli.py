from __future__ import annotations

import argparse
import importlib.util
import json
from pathlib import Path

import pytest

from tmux_mcp.tmux import TmuxClient, TmuxSession


def _load_diag(module_name: str):
    module_path = Path(__file__).resolve().parents[1] / "scripts" / "tmux_diag.py"
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    assert spec and spec.loader
    diag = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(diag)
    return diag


def test_keys_prints_send_keys_arguments(capsys):
    diag = _load_diag("tmux_diag_keys_module")

    diag.cmd_keys(argparse.Namespace(text="^Ca'", json=False))

    assert capsys.readouterr().out.strip() == "C-c a \"'\""


def test_keys_json_output(capsys):
    diag = _load_diag("tmux_diag_keys_json_module")

    diag.cmd_keys(argparse.Namespace(text="PageDown", json=True))

    assert json.loads(capsys.readouterr().out) == [{"kind": "named", "value": "NPage"}]


def test_sessions_lists_stub_sessions(monkeypatch, capsys):
    class StubClient:
        async def list_sessions(self):
            return [
                TmuxSession(id="$0", name="main", attached=True, windows=2),
                TmuxSession(id="$1", name="work", attached=False, windows=1),
            ]

    diag = _load_diag("tmux_diag_sessions_module")
    monkeypatch.setattr(diag, "load_client", lambda _settings: StubClient())

    diag.cmd_sessions(argparse.Namespace(json=False))
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["* $0 main (2 windows)", "  $1 work (1 windows)"]

    diag.cmd_sessions(argparse.Namespace(json=True))
    payload = json.loads(capsys.readouterr().out)
    assert [item["name"] for item in payload] == ["main", "work"]


def test_missing_tmux_exits(monkeypatch, capsys, tmp_path: Path):
    monkeypatch.setenv("TMUX_PATH", str(tmp_path / "missing-tmux"))
    diag = _load_diag("tmux_diag_missing_module")

    with pytest.raises(SystemExit) as excinfo:
        diag.cmd_sessions(argparse.Namespace(json=False))

    assert excinfo.value.code == 1
    assert "Tmux unavailable" in capsys.readouterr().out


def test_load_client_uses_configured_binary(monkeypatch, tmp_path: Path):
    fake_tmux = tmp_path / "tmux"
    fake_tmux.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    fake_tmux.chmod(0o755)
    monkeypatch.setenv("TMUX_PATH", str(fake_tmux))
    diag = _load_diag("tmux_diag_client_module")

    client = diag.load_client(diag.TmuxSettings())

    assert isinstance(client, TmuxClient)


def test_settings_prints_json(monkeypatch, capsys):
    monkeypatch.setenv("TMUX_MCP_CAPTURE_LINES", "75")
    diag = _load_diag("tmux_diag_settings_module")

    diag.cmd_settings(argparse.Namespace())

    payload = json.loads(capsys.readouterr().out)
    assert payload["capture_lines"] == 75
    assert payload["shell_type"] == "bash"


def test_main_without_command_prints_help(capsys):
    diag = _load_diag("tmux_diag_help_module")

    diag.main([])

    assert "tmux MCP diagnostics" in capsys.readouterr().out
