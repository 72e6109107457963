"""Serialized, rate-limited dispatch of tmux commands."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol
from uuid import uuid4

from .runner import InvocationFailedError, TmuxCommandError, classify_failure

logger = logging.getLogger(__name__)


class InvokerProtocol(Protocol):
    """The single operation the queue needs from a tmux runner."""

    async def invoke(self, command_line: str) -> str:
        ...


@dataclass(slots=True)
class QueuedCommand:
    """A tmux invocation waiting for its turn."""

    id: str
    command: str
    future: asyncio.Future[str]
    enqueued_at: float


class CommandQueue:
    """Run tmux commands one at a time, in submission order.

    Consecutive invocations are separated by at least ``min_interval_ms``,
    measured from the end of one invocation to the start of the next. Any
    number of coroutines may call :meth:`submit` concurrently; exactly one
    drain loop runs at a time.
    """

    def __init__(
        self,
        runner: InvokerProtocol,
        *,
        min_interval_ms: float = 10,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._runner = runner
        self._min_interval = min_interval_ms / 1000
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._queue: deque[QueuedCommand] = deque()
        self._draining = False
        self._last_finished_at: float | None = None
        self._drain_task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """Number of commands waiting to be dispatched."""

        return len(self._queue)

    @property
    def is_draining(self) -> bool:
        return self._draining

    async def submit(self, command_line: str) -> str:
        """Queue ``command_line`` and wait for its stdout.

        Raises :class:`~tmux_mcp.tmux.runner.EndpointUnavailableError` or
        :class:`~tmux_mcp.tmux.runner.InvocationFailedError` on failure.
        """

        loop = asyncio.get_running_loop()
        queued = QueuedCommand(
            id=uuid4().hex,
            command=command_line,
            future=loop.create_future(),
            enqueued_at=self._clock(),
        )
        self._queue.append(queued)
        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())
        return await queued.future

    async def _drain(self) -> None:
        queued: QueuedCommand | None = None
        try:
            while self._queue:
                queued = self._queue.popleft()
                await self._wait_for_spacing()
                logger.debug(
                    "Dispatching tmux command",
                    extra={"command_id": queued.id, "command": queued.command},
                )
                try:
                    output = await self._runner.invoke(queued.command)
                except TmuxCommandError as exc:
                    self._reject(queued, exc)
                except Exception as exc:
                    error = classify_failure(str(exc))
                    error.__cause__ = exc
                    self._reject(queued, error)
                else:
                    if not queued.future.done():
                        queued.future.set_result(output)
                finally:
                    self._last_finished_at = self._clock()
                queued = None
        except BaseException as exc:
            error = InvocationFailedError(
                f"Failed to execute tmux command: queue stopped ({type(exc).__name__})"
            )
            error.__cause__ = exc
            stranded = [queued] if queued is not None else []
            stranded.extend(self._queue)
            self._queue.clear()
            for item in stranded:
                self._reject(item, error)
            raise
        finally:
            self._draining = False

    async def _wait_for_spacing(self) -> None:
        if self._last_finished_at is None:
            return
        remaining = self._min_interval - (self._clock() - self._last_finished_at)
        if remaining > 0:
            await self._sleep(remaining)

    @staticmethod
    def _reject(queued: QueuedCommand, error: TmuxCommandError) -> None:
        if queued.future.done():
            logger.debug(
                "Dropping failure for abandoned tmux command",
                extra={"command_id": queued.id, "error": str(error)},
            )
            return
        queued.future.set_exception(error)


__all__ = ["CommandQueue", "InvokerProtocol", "QueuedCommand"]
