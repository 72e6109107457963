"""Data models for tracked command executions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

ExecutionStatus = Literal["pending", "completed", "error"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "error"})


@dataclass(slots=True)
class TrackedExecution:
    """A shell command submitted to a pane and observed until it finishes.

    While ``status`` is ``pending`` the snapshot holds the pane content
    captured before the command was typed; once completed it holds the
    capture that showed the command had finished.
    """

    id: str
    pane_id: str
    command: str
    started_at: datetime
    snapshot: str
    status: ExecutionStatus = "pending"
    exit_code: int | None = None
    exit_code_assumed: bool = False
    completed_at: datetime | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> dict[str, Any]:
        return {
            "command_id": self.id,
            "pane_id": self.pane_id,
            "command": self.command,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "exit_code": self.exit_code,
            "exit_code_assumed": self.exit_code_assumed,
            "error": self.error,
        }


__all__ = ["ExecutionStatus", "TERMINAL_STATUSES", "TrackedExecution"]
