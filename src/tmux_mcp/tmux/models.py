"""Data models for tmux topology."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(slots=True)
class TmuxSession:
    id: str
    name: str
    attached: bool
    windows: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class TmuxWindow:
    id: str
    name: str
    active: bool
    session_id: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class TmuxPane:
    id: str
    index: int
    window_id: str
    title: str
    active: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["TmuxPane", "TmuxSession", "TmuxWindow"]
