"""Tracked command executions and their registry."""

from .models import ExecutionStatus, TrackedExecution
from .registry import ExecutionRegistry
from .tracker import ExecutionTracker

__all__ = [
    "ExecutionRegistry",
    "ExecutionStatus",
    "ExecutionTracker",
    "TrackedExecution",
]
