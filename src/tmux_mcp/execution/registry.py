"""In-memory store of tracked executions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

from .models import TrackedExecution

logger = logging.getLogger(__name__)


class ExecutionRegistry:
    """Hold tracked executions keyed by identifier.

    Records are only evicted by :meth:`sweep`, and only once they have
    reached a terminal status.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._records: dict[str, TrackedExecution] = {}
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, execution_id: object) -> bool:
        return execution_id in self._records

    def add(self, record: TrackedExecution) -> None:
        if record.id in self._records:
            raise ValueError(f"Execution '{record.id}' is already registered")
        self._records[record.id] = record

    def get(self, execution_id: str) -> TrackedExecution | None:
        return self._records.get(execution_id)

    def list_ids(self) -> set[str]:
        return set(self._records)

    def values(self) -> Iterator[TrackedExecution]:
        return iter(list(self._records.values()))

    def sweep(self, max_age_minutes: float = 60) -> list[str]:
        """Remove terminal records older than ``max_age_minutes``.

        Pending records are kept regardless of age. Returns the removed ids.
        """

        now = self._clock()
        threshold = timedelta(minutes=max_age_minutes)
        removed = [
            execution_id
            for execution_id, record in self._records.items()
            if record.is_terminal and now - record.started_at > threshold
        ]
        for execution_id in removed:
            del self._records[execution_id]

        if removed:
            logger.info(
                "Swept finished executions",
                extra={"removed": len(removed), "remaining": len(self._records)},
            )
        return removed


__all__ = ["ExecutionRegistry"]
