"""Sessions, windows, and panes as seen through the command queue."""

from __future__ import annotations

import logging

from .models import TmuxPane, TmuxSession, TmuxWindow
from .queue import CommandQueue
from .runner import EndpointUnavailableError, TmuxCommandError
from .utils import parse_format_line, quote_argument

logger = logging.getLogger(__name__)

SERVER_UNAVAILABLE_TEXT = "Tmux server is not available. Cannot capture pane content."
NO_PANES_TEXT = "No panes found in the specified window."

SESSION_FORMAT = "#{session_id}:#{?session_attached,1,0}:#{session_windows}:#{session_name}"
WINDOW_FORMAT = "#{window_id}:#{?window_active,1,0}:#{window_name}"
PANE_FORMAT = "#{pane_id}:#{pane_index}:#{?pane_active,1,0}:#{pane_title}"


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_sessions(output: str) -> list[TmuxSession]:
    sessions = []
    for line in output.splitlines():
        if not line:
            continue
        session_id, attached, windows, name = parse_format_line(line, 4)
        sessions.append(
            TmuxSession(id=session_id, name=name, attached=attached == "1", windows=_to_int(windows))
        )
    return sessions


def parse_windows(output: str, session_id: str) -> list[TmuxWindow]:
    windows = []
    for line in output.splitlines():
        if not line:
            continue
        window_id, active, name = parse_format_line(line, 3)
        windows.append(TmuxWindow(id=window_id, name=name, active=active == "1", session_id=session_id))
    return windows


def parse_panes(output: str, window_id: str) -> list[TmuxPane]:
    panes = []
    for line in output.splitlines():
        if not line:
            continue
        pane_id, index, active, title = parse_format_line(line, 4)
        panes.append(
            TmuxPane(id=pane_id, index=_to_int(index), window_id=window_id, title=title, active=active == "1")
        )
    return panes


def capture_command(pane_id: str, lines: int) -> str:
    """Build the ``capture-pane`` command for the last ``lines`` lines of a pane."""

    return f"capture-pane -p -t {quote_argument(pane_id)} -S -{int(lines)} -E -"


class TmuxClient:
    """Topology queries and creation commands.

    Read-only queries degrade to empty results when the tmux server is not
    running; every other failure propagates to the caller.
    """

    def __init__(self, queue: CommandQueue) -> None:
        self._queue = queue

    @property
    def queue(self) -> CommandQueue:
        return self._queue

    async def is_running(self) -> bool:
        try:
            await self._queue.submit(f"list-sessions -F {quote_argument('#{session_name}')}")
        except EndpointUnavailableError:
            return False
        return True

    async def list_sessions(self) -> list[TmuxSession]:
        try:
            output = await self._queue.submit(f"list-sessions -F {quote_argument(SESSION_FORMAT)}")
        except EndpointUnavailableError:
            logger.debug("tmux server not running; reporting no sessions")
            return []
        return parse_sessions(output)

    async def find_session_by_name(self, name: str) -> TmuxSession | None:
        try:
            sessions = await self.list_sessions()
        except TmuxCommandError as exc:
            logger.warning(
                "Session lookup failed",
                extra={"session_name": name, "error": str(exc)},
            )
            return None
        for session in sessions:
            if session.name == name:
                return session
        return None

    async def list_windows(self, session_id: str) -> list[TmuxWindow]:
        try:
            output = await self._queue.submit(
                f"list-windows -t {quote_argument(session_id)} -F {quote_argument(WINDOW_FORMAT)}"
            )
        except EndpointUnavailableError:
            return []
        return parse_windows(output, session_id)

    async def list_panes(self, window_id: str) -> list[TmuxPane]:
        try:
            output = await self._queue.submit(
                f"list-panes -t {quote_argument(window_id)} -F {quote_argument(PANE_FORMAT)}"
            )
        except EndpointUnavailableError:
            return []
        return parse_panes(output, window_id)

    async def capture_pane(self, pane_id: str, lines: int = 200) -> str:
        try:
            return await self._queue.submit(capture_command(pane_id, lines))
        except EndpointUnavailableError:
            return SERVER_UNAVAILABLE_TEXT

    async def capture_window(self, window_id: str, lines: int = 200) -> str:
        """Capture every pane of a window, separated by pane headers."""

        panes = await self.list_panes(window_id)
        if not panes:
            return NO_PANES_TEXT

        sections: list[str] = []
        for pane in panes:
            header = f"\n=== PANE {pane.index} ===\n"
            try:
                content = await self.capture_pane(pane.id, lines)
            except TmuxCommandError as exc:
                logger.warning(
                    "Failed to capture pane",
                    extra={"pane_id": pane.id, "window_id": window_id, "error": str(exc)},
                )
                content = f"Error capturing pane: {exc}"
            sections.append(header + content)

        return "\n--- END OF PANE ---\n".join(sections) + "\n--- END OF WINDOW ---\n"

    async def create_session(self, name: str) -> TmuxSession | None:
        await self._queue.submit(f"new-session -d -s {quote_argument(name)}")
        return await self.find_session_by_name(name)

    async def create_window(self, session_id: str, name: str) -> TmuxWindow | None:
        await self._queue.submit(f"new-window -t {quote_argument(session_id)} -n {quote_argument(name)}")
        for window in await self.list_windows(session_id):
            if window.name == name:
                return window
        return None


__all__ = [
    "NO_PANES_TEXT",
    "SERVER_UNAVAILABLE_TEXT",
    "TmuxClient",
    "capture_command",
    "parse_panes",
    "parse_sessions",
    "parse_windows",
]
