"""Async runner for the tmux CLI."""

from __future__ import annotations

import asyncio
import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .utils import split_command_line

ENDPOINT_UNAVAILABLE_MARKERS = (
    "no server running",
    "failed to connect to server",
    "connection refused",
)


class TmuxRunnerError(RuntimeError):
    """Base class for tmux runner errors."""


class TmuxNotFoundError(TmuxRunnerError):
    """Raised when the tmux executable cannot be located."""


class TmuxCommandError(TmuxRunnerError):
    """Raised when a single tmux invocation fails."""


class EndpointUnavailableError(TmuxCommandError):
    """Raised when no tmux server can be reached."""


class InvocationFailedError(TmuxCommandError):
    """Raised when tmux rejects or fails a specific command."""


def classify_failure(message: str) -> TmuxCommandError:
    """Build the exception matching a tmux failure message."""

    lowered = message.lower()
    if any(marker in lowered for marker in ENDPOINT_UNAVAILABLE_MARKERS):
        return EndpointUnavailableError(f"Tmux server not available: {message}")
    return InvocationFailedError(f"Failed to execute tmux command: {message}")


@dataclass(slots=True)
class TmuxExecutionResult:
    """Holds the outcome of a tmux CLI invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class TmuxRunner:
    """Execute tmux commands asynchronously."""

    def __init__(self, executable: Path | None = None) -> None:
        self._executable_path = self._resolve_executable(executable)

    @staticmethod
    def _resolve_executable(explicit: Path | None) -> Path:
        if explicit is not None:
            candidate = Path(explicit)
            if candidate.exists() and candidate.is_file():
                return candidate
            raise TmuxNotFoundError(f"tmux executable not found at {candidate}")

        binary = shutil.which("tmux")
        if binary is None:
            raise TmuxNotFoundError("tmux executable not found on PATH")
        return Path(binary)

    @property
    def executable(self) -> Path:
        return self._executable_path

    async def version(self) -> TmuxExecutionResult:
        return await self._invoke("-V")

    async def invoke(self, command_line: str) -> str:
        """Run ``tmux <command_line>`` and return its stripped stdout.

        Raises :class:`EndpointUnavailableError` when the server cannot be
        reached and :class:`InvocationFailedError` for any other failure.
        """

        try:
            args = split_command_line(command_line)
        except ValueError as exc:
            raise InvocationFailedError(f"Failed to execute tmux command: {exc}") from exc

        try:
            result = await self._invoke(*args)
        except OSError as exc:
            raise classify_failure(str(exc)) from exc

        if not result.ok:
            message = result.stderr.strip() or f"tmux exited with code {result.returncode}"
            raise classify_failure(message)
        return result.stdout.strip()

    async def _invoke(self, *args: str) -> TmuxExecutionResult:
        cmd = [str(self._executable_path), *args]
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        return TmuxExecutionResult(args=tuple(cmd), returncode=process.returncode, stdout=stdout, stderr=stderr)


class FakeTmuxRunner(TmuxRunner):
    """Test double that simulates tmux CLI responses.

    ``responses`` are consumed in order; a string is returned as stdout and an
    exception instance is raised from :meth:`invoke`.
    """

    def __init__(self, responses: Iterable[str | Exception] | None = None) -> None:  # type: ignore[override]
        self._responses = list(responses or [])
        self._invocations: list[str] = []
        self._executable_path = Path("/tmp/fake-tmux")

    def queue_response(self, response: str | Exception) -> None:
        self._responses.append(response)

    async def invoke(self, command_line: str) -> str:  # type: ignore[override]
        self._invocations.append(command_line)
        if not self._responses:
            return ""
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def _invoke(self, *args: str) -> TmuxExecutionResult:  # type: ignore[override]
        return TmuxExecutionResult(args=tuple(args), returncode=0, stdout="tmux fake", stderr="")

    @property
    def invocations(self) -> list[str]:
        return self._invocations


def serialize_result(result: TmuxExecutionResult) -> str:
    """Serialize a command result for diagnostics output."""

    return json.dumps(
        {
            "args": list(result.args),
            "returncode": result.returncode,
            "stdout": result.stdout,
            "stderr": result.stderr,
        }
    )
