from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tmux_mcp.execution import ExecutionRegistry, TrackedExecution

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _record(execution_id: str, *, status: str = "pending", age_minutes: float = 0) -> TrackedExecution:
    return TrackedExecution(
        id=execution_id,
        pane_id="%1",
        command="ls",
        started_at=NOW - timedelta(minutes=age_minutes),
        snapshot="",
        status=status,  # type: ignore[arg-type]
    )


def test_add_get_and_list_ids() -> None:
    registry = ExecutionRegistry(clock=lambda: NOW)
    registry.add(_record("a"))
    registry.add(_record("b"))

    assert registry.get("a") is not None
    assert registry.get("missing") is None
    assert registry.list_ids() == {"a", "b"}
    assert "a" in registry
    assert len(registry) == 2


def test_add_rejects_duplicate_ids() -> None:
    registry = ExecutionRegistry(clock=lambda: NOW)
    registry.add(_record("a"))

    with pytest.raises(ValueError):
        registry.add(_record("a"))


def test_sweep_never_removes_pending_records() -> None:
    registry = ExecutionRegistry(clock=lambda: NOW)
    registry.add(_record("ancient", age_minutes=10_000))

    assert registry.sweep(1) == []
    assert registry.list_ids() == {"ancient"}


def test_sweep_removes_old_terminal_records() -> None:
    registry = ExecutionRegistry(clock=lambda: NOW)
    registry.add(_record("old-done", status="completed", age_minutes=61))
    registry.add(_record("old-error", status="error", age_minutes=120))
    registry.add(_record("fresh-done", status="completed", age_minutes=5))
    registry.add(_record("old-pending", age_minutes=120))

    removed = registry.sweep(60)

    assert sorted(removed) == ["old-done", "old-error"]
    assert registry.list_ids() == {"fresh-done", "old-pending"}


def test_sweep_keeps_records_exactly_at_threshold() -> None:
    registry = ExecutionRegistry(clock=lambda: NOW)
    registry.add(_record("edge", status="completed", age_minutes=60))

    assert registry.sweep(60) == []


def test_to_dict_reports_assumed_exit_code() -> None:
    record = _record("done", status="completed")
    record.exit_code = 0
    record.exit_code_assumed = True

    payload = record.to_dict()

    assert payload["command_id"] == "done"
    assert payload["exit_code"] == 0
    assert payload["exit_code_assumed"] is True
    assert payload["started_at"] == (NOW).isoformat()
