"""Tool registration for tmux MCP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastmcp import Context, FastMCP

from ..config import TmuxSettings
from ..execution import ExecutionTracker, TrackedExecution
from ..shell import SHELL_TYPES, ShellConfig
from ..tmux import TmuxClient


@dataclass(slots=True)
class ToolHandles:
    list_sessions: Any
    find_session: Any
    list_windows: Any
    list_panes: Any
    capture_pane: Any
    capture_window: Any
    create_session: Any
    create_window: Any
    execute_command: Any
    send_keys: Any
    get_command_result: Any
    list_commands: Any
    cleanup_commands: Any
    set_shell_type: Any


def _execution_payload(record: TrackedExecution, *, include_output: bool = True) -> dict[str, Any]:
    payload = record.to_dict()
    if include_output and record.status == "completed":
        payload["output"] = record.snapshot
    return payload


def register_tools(
    server: FastMCP,
    *,
    settings: TmuxSettings,
    client: TmuxClient,
    tracker: ExecutionTracker,
    shell: ShellConfig,
) -> ToolHandles:
    """Register tmux MCP tools on the server."""

    async def _list_sessions(context: Context | None = None) -> list[dict[str, Any]]:
        """List all tmux sessions."""

        sessions = await client.list_sessions()
        _emit_log(context, "debug", "Listed sessions", extra={"count": len(sessions)})
        return [session.to_dict() for session in sessions]

    async def _find_session(name: str, context: Context | None = None) -> dict[str, Any] | None:
        """Find a tmux session by name."""

        session = await client.find_session_by_name(name)
        _emit_log(context, "debug", "Find session", extra={"session_name": name, "found": session is not None})
        return session.to_dict() if session else None

    async def _list_windows(session_id: str, context: Context | None = None) -> list[dict[str, Any]]:
        """List windows in a tmux session."""

        windows = await client.list_windows(session_id)
        _emit_log(context, "debug", "Listed windows", extra={"session_id": session_id, "count": len(windows)})
        return [window.to_dict() for window in windows]

    async def _list_panes(window_id: str, context: Context | None = None) -> list[dict[str, Any]]:
        """List panes in a tmux window."""

        panes = await client.list_panes(window_id)
        _emit_log(context, "debug", "Listed panes", extra={"window_id": window_id, "count": len(panes)})
        return [pane.to_dict() for pane in panes]

    async def _capture_pane(
        pane_id: str,
        lines: int | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Capture the most recent lines of a pane."""

        line_count = settings.capture_lines if lines is None else lines
        if line_count < 1:
            raise ValueError("lines must be >= 1")
        content = await client.capture_pane(pane_id, line_count)
        _emit_log(context, "debug", "Captured pane", extra={"pane_id": pane_id, "lines": line_count})
        return {"pane_id": pane_id, "lines": line_count, "content": content}

    async def _capture_window(
        window_id: str,
        lines: int | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Capture every pane in a window, separated by pane headers."""

        line_count = settings.capture_lines if lines is None else lines
        if line_count < 1:
            raise ValueError("lines must be >= 1")
        content = await client.capture_window(window_id, line_count)
        _emit_log(context, "debug", "Captured window", extra={"window_id": window_id, "lines": line_count})
        return {"window_id": window_id, "lines": line_count, "content": content}

    async def _create_session(name: str, context: Context | None = None) -> dict[str, Any]:
        """Create a detached tmux session."""

        if not name.strip():
            raise ValueError("Session name must not be empty")
        session = await client.create_session(name)
        _emit_log(context, "info", "Created session", extra={"session_name": name})
        return {"created": session is not None, "session": session.to_dict() if session else None}

    async def _create_window(session_id: str, name: str, context: Context | None = None) -> dict[str, Any]:
        """Create a window in an existing tmux session."""

        if not name.strip():
            raise ValueError("Window name must not be empty")
        window = await client.create_window(session_id, name)
        _emit_log(context, "info", "Created window", extra={"session_id": session_id, "window_name": name})
        return {"created": window is not None, "window": window.to_dict() if window else None}

    async def _execute_command(pane_id: str, command: str, context: Context | None = None) -> dict[str, Any]:
        """Type a command into a pane, press Enter, and start tracking it."""

        tracker.sweep(settings.command_max_age_minutes)
        command_id = await tracker.start(pane_id, command)
        _emit_log(
            context,
            "info",
            "Executing command",
            extra={"command_id": command_id, "pane_id": pane_id},
        )
        return {
            "command_id": command_id,
            "pane_id": pane_id,
            "status": "pending",
            "hint": "Poll get_command_result with this command_id until status is completed.",
        }

    async def _send_keys(pane_id: str, keys: str, context: Context | None = None) -> dict[str, Any]:
        """Send raw keys (e.g. ^C, Up, Escape) to a pane without pressing Enter."""

        tokens = await tracker.send_keys(pane_id, keys)
        _emit_log(context, "info", "Sent keys", extra={"pane_id": pane_id, "key_count": len(tokens)})
        return {"pane_id": pane_id, "keys": [token.value for token in tokens]}

    async def _get_command_result(command_id: str, context: Context | None = None) -> dict[str, Any]:
        """Check whether a tracked command has finished and return its output."""

        record = await tracker.poll(command_id)
        if record is None:
            raise ValueError(f"Command '{command_id}' not found")
        _emit_log(
            context,
            "debug",
            "Command status",
            extra={"command_id": command_id, "status": record.status},
        )
        return _execution_payload(record)

    def _list_commands(context: Context | None = None) -> list[dict[str, Any]]:
        """List tracked commands without refreshing their status."""

        records = [_execution_payload(record, include_output=False) for record in tracker.registry.values()]
        _emit_log(context, "debug", "Listed commands", extra={"count": len(records)})
        return records

    def _cleanup_commands(max_age_minutes: float | None = None, context: Context | None = None) -> dict[str, Any]:
        """Forget finished commands older than the given age."""

        age = settings.command_max_age_minutes if max_age_minutes is None else max_age_minutes
        if age < 0:
            raise ValueError("max_age_minutes must be >= 0")
        removed = tracker.sweep(age)
        _emit_log(context, "info", "Cleaned up commands", extra={"removed": len(removed)})
        return {"removed": removed, "remaining": len(tracker.registry)}

    def _set_shell_type(shell_type: str, context: Context | None = None) -> dict[str, Any]:
        """Select the shell family running in panes (bash, zsh, fish)."""

        requested = shell_type.strip().lower()
        if requested not in SHELL_TYPES:
            raise ValueError(f"Invalid shell type '{shell_type}'. Must be one of {list(SHELL_TYPES)}")
        selected = shell.configure(requested)
        _emit_log(context, "info", "Shell type updated", extra={"shell_type": selected})
        return {"shell_type": selected, "end_marker": shell.end_marker_text()}

    tool_list_sessions = server.tool(
        name="list_sessions",
        description="List all tmux sessions with id, name, attached flag, and window count.",
    )(_list_sessions)

    tool_find_session = server.tool(
        name="find_session",
        description="Find a tmux session by exact name. Returns null when no session matches.",
    )(_find_session)

    tool_list_windows = server.tool(
        name="list_windows",
        description="List windows in a tmux session.",
    )(_list_windows)

    tool_list_panes = server.tool(
        name="list_panes",
        description="List panes in a tmux window.",
    )(_list_panes)

    tool_capture_pane = server.tool(
        name="capture_pane",
        description="Capture the visible history of a pane (default last 200 lines).",
    )(_capture_pane)

    tool_capture_window = server.tool(
        name="capture_window",
        description="Capture all panes of a window, stitched together with pane separators.",
    )(_capture_window)

    tool_create_session = server.tool(
        name="create_session",
        description="Create a new detached tmux session.",
    )(_create_session)

    tool_create_window = server.tool(
        name="create_window",
        description="Create a new window in a tmux session.",
    )(_create_window)

    tool_execute = server.tool(
        name="execute_command",
        description=(
            "Type a command into a pane and press Enter. Returns a command id; poll "
            "get_command_result for completion. Completion is detected heuristically "
            "from the shell prompt, so the reported exit code is assumed, not measured."
        ),
        annotations={
            "safety": {
                "level": "caution",
                "notes": "Commands run with the privileges of the shell in the target pane",
            }
        },
    )(_execute_command)

    tool_send_keys = server.tool(
        name="send_keys",
        description=(
            "Send keys to a pane without pressing Enter. Accepts text, ^X control "
            "sequences, or a single key name such as Up, Escape, PageDown, or F5."
        ),
    )(_send_keys)

    tool_get_result = server.tool(
        name="get_command_result",
        description="Refresh and return the status and output of a command started with execute_command.",
    )(_get_command_result)

    tool_list_commands = server.tool(
        name="list_commands",
        description="List tracked commands and their last known status.",
    )(_list_commands)

    tool_cleanup = server.tool(
        name="cleanup_commands",
        description="Forget completed or failed commands older than max_age_minutes.",
    )(_cleanup_commands)

    tool_set_shell = server.tool(
        name="set_shell_type",
        description="Set the shell family (bash, zsh, fish) used by panes.",
    )(_set_shell_type)

    return ToolHandles(
        list_sessions=tool_list_sessions,
        find_session=tool_find_session,
        list_windows=tool_list_windows,
        list_panes=tool_list_panes,
        capture_pane=tool_capture_pane,
        capture_window=tool_capture_window,
        create_session=tool_create_session,
        create_window=tool_create_window,
        execute_command=tool_execute,
        send_keys=tool_send_keys,
        get_command_result=tool_get_result,
        list_commands=tool_list_commands,
        cleanup_commands=tool_cleanup,
        set_shell_type=tool_set_shell,
    )


__all__ = ["register_tools", "ToolHandles"]

logger = logging.getLogger(__name__)


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
