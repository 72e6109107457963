"""Start shell commands in panes and detect when they finish."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

from ..tmux.keys import KeyToken, translate_keys
from ..tmux.queue import CommandQueue
from ..tmux.runner import TmuxCommandError
from ..tmux.topology import capture_command
from ..tmux.utils import quote_argument
from .models import TrackedExecution
from .registry import ExecutionRegistry

logger = logging.getLogger(__name__)

PROMPT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\$\s*$"),
    re.compile(r">\s*$"),
    re.compile(r"#\s*$"),
    re.compile(r"%\s*$"),
)

ENTER_TOKEN = KeyToken("named", "Enter")


def ends_with_prompt(content: str) -> bool:
    """Return True when ``content`` ends with something that looks like a shell prompt."""

    return any(pattern.search(content) for pattern in PROMPT_PATTERNS)


def send_keys_command(pane_id: str, token: KeyToken) -> str:
    return f"send-keys -t {quote_argument(pane_id)} {token.argument}"


class ExecutionTracker:
    """Type commands into panes and poll pane output for completion.

    tmux offers no completion signal, so a command counts as finished once the
    pane content has changed from the baseline, ends with a shell prompt, and
    more than ``dwell_ms`` have passed since the command was started.
    """

    def __init__(
        self,
        queue: CommandQueue,
        *,
        registry: ExecutionRegistry | None = None,
        baseline_lines: int = 50,
        poll_lines: int = 1000,
        dwell_ms: float = 500,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._queue = queue
        self._registry = registry if registry is not None else ExecutionRegistry()
        self._baseline_lines = baseline_lines
        self._poll_lines = poll_lines
        self._dwell = timedelta(milliseconds=dwell_ms)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def registry(self) -> ExecutionRegistry:
        return self._registry

    async def start(self, pane_id: str, command: str) -> str:
        """Type ``command`` into ``pane_id`` and return its tracking id.

        Does not wait for the command to finish; use :meth:`poll`.
        """

        baseline = await self._queue.submit(capture_command(pane_id, self._baseline_lines))

        record = TrackedExecution(
            id=uuid4().hex,
            pane_id=pane_id,
            command=command,
            started_at=self._clock(),
            snapshot=baseline,
        )
        self._registry.add(record)

        tokens = translate_keys(command)
        if not command.endswith(("\n", "\r")):
            tokens.append(ENTER_TOKEN)

        try:
            await self._dispatch(pane_id, tokens)
        except TmuxCommandError as exc:
            record.status = "error"
            record.error = str(exc)
            record.completed_at = self._clock()
            logger.warning(
                "Failed to send command keys",
                extra={"command_id": record.id, "pane_id": pane_id, "error": str(exc)},
            )
            raise

        logger.info(
            "Started command",
            extra={"command_id": record.id, "pane_id": pane_id, "key_count": len(tokens)},
        )
        return record.id

    async def send_keys(self, pane_id: str, keys: str) -> list[KeyToken]:
        """Send ``keys`` to a pane without tracking or a trailing Enter."""

        tokens = translate_keys(keys)
        await self._dispatch(pane_id, tokens)
        return tokens

    async def poll(self, execution_id: str) -> TrackedExecution | None:
        """Refresh and return the tracked execution, or ``None`` if unknown."""

        record = self._registry.get(execution_id)
        if record is None:
            return None

        lock = self._locks.setdefault(execution_id, asyncio.Lock())
        async with lock:
            if record.is_terminal:
                return record

            try:
                content = await self._queue.submit(capture_command(record.pane_id, self._poll_lines))
            except TmuxCommandError as exc:
                logger.debug(
                    "Pane capture failed; command still pending",
                    extra={"command_id": execution_id, "error": str(exc)},
                )
                return record

            if content == record.snapshot or not ends_with_prompt(content):
                return record

            now = self._clock()
            if now - record.started_at <= self._dwell:
                return record

            record.status = "completed"
            record.snapshot = content
            record.exit_code = 0
            record.exit_code_assumed = True
            record.completed_at = now
            logger.info(
                "Command completed",
                extra={"command_id": execution_id, "pane_id": record.pane_id},
            )
            return record

    def sweep(self, max_age_minutes: float = 60) -> list[str]:
        """Evict old finished executions from the registry."""

        removed = self._registry.sweep(max_age_minutes)
        for execution_id in removed:
            self._locks.pop(execution_id, None)
        return removed

    async def _dispatch(self, pane_id: str, tokens: list[KeyToken]) -> None:
        for token in tokens:
            await self._queue.submit(send_keys_command(pane_id, token))


__all__ = ["ExecutionTracker", "PROMPT_PATTERNS", "ends_with_prompt", "send_keys_command"]
