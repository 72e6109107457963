"""FastMCP server bootstrap for tmux MCP."""

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastmcp import Context, FastMCP

from . import __version__
from .config import TmuxSettings, get_settings
from .execution import ExecutionRegistry, ExecutionTracker
from .shell import SHELL_TYPES, ShellConfig
from .tmux import (
    CommandQueue,
    EndpointUnavailableError,
    TmuxClient,
    TmuxNotFoundError,
    TmuxRunner,
)
from .tools import register_tools


def configure_logging(level: str) -> None:
    """Configure root logging for the tmux MCP server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def _run_sync(coro):
    """Execute an async coroutine on a dedicated event loop."""

    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def create_server(
    settings: Optional[TmuxSettings] = None,
    tmux_runner: TmuxRunner | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server with its queue, tracker, and tools."""

    settings = settings or get_settings()

    tmux_metadata = {
        "available": False,
        "path": settings.tmux_path,
        "version": None,
        "error": None,
    }

    runner_provided = tmux_runner is not None
    if not runner_provided:
        try:
            tmux_runner = TmuxRunner(Path(settings.tmux_path) if settings.tmux_path else None)
        except TmuxNotFoundError as exc:
            tmux_metadata["error"] = str(exc)
            tmux_runner = None

    if tmux_runner is not None:
        tmux_metadata["available"] = True
        tmux_metadata["path"] = str(tmux_runner.executable)
        try:
            version_result = _run_sync(tmux_runner.version())
            if version_result.ok:
                tmux_metadata["version"] = version_result.stdout.strip()
            else:
                tmux_metadata["error"] = (
                    version_result.stderr.strip() or "tmux version command failed with exit code"
                )
        except OSError as exc:
            tmux_metadata["error"] = str(exc)

    shell = ShellConfig()
    shell.configure(settings.shell_type)

    queue = CommandQueue(
        tmux_runner if tmux_runner is not None else _UnavailableRunner(tmux_metadata["error"]),
        min_interval_ms=settings.min_command_interval_ms,
    )
    client = TmuxClient(queue)
    registry = ExecutionRegistry()
    tracker = ExecutionTracker(
        queue,
        registry=registry,
        baseline_lines=settings.baseline_lines,
        poll_lines=settings.poll_lines,
        dwell_ms=settings.completion_dwell_ms,
    )

    server = FastMCP(
        name="tmux MCP",
        version=__version__,
        instructions=(
            "Drive tmux programmatically: list sessions, windows, and panes, capture "
            "pane output, send keys, and run shell commands. execute_command returns "
            "immediately; poll get_command_result until the status is completed."
        ),
    )

    handles = register_tools(
        server,
        settings=settings,
        client=client,
        tracker=tracker,
        shell=shell,
    )

    def status_resource(context: Context) -> str:
        """Return a JSON string summarizing basic runtime state."""

        status_counts: dict[str, int] = {}
        for record in registry.values():
            status_counts[record.status] = status_counts.get(record.status, 0) + 1

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "tmux": tmux_metadata,
            "shell": {
                "type": shell.type,
                "end_marker": shell.end_marker_text(),
            },
            "queue": {
                "pending": queue.pending,
                "draining": queue.is_draining,
                "min_interval_ms": settings.min_command_interval_ms,
            },
            "commands": {
                "count": len(registry),
                "status_counts": status_counts,
                "max_age_minutes": settings.command_max_age_minutes,
            },
            "request_id": getattr(context, "request_id", None),
        }
        return json.dumps(payload)

    server.resource(
        "resource://tmux/status",
        name="tmux_status",
        title="tmux MCP Status",
        description="Provides the current runtime status for the tmux MCP server.",
        mime_type="application/json",
        tags={"status", "health"},
    )(status_resource)

    setattr(server, "tmux_runner", tmux_runner)
    setattr(server, "tmux_metadata", tmux_metadata)
    setattr(server, "command_queue", queue)
    setattr(server, "tmux_client", client)
    setattr(server, "execution_tracker", tracker)
    setattr(server, "shell_config", shell)
    setattr(server, "tool_handles", handles)
    setattr(server, "status_resource", status_resource)
    return server


class _UnavailableRunner:
    """Stands in for the runner when no tmux binary was found."""

    def __init__(self, reason: str | None) -> None:
        self._reason = reason or "tmux executable not found"

    async def invoke(self, command_line: str) -> str:
        raise EndpointUnavailableError(f"Tmux server not available: {self._reason}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the tmux MCP server over stdio.")
    parser.add_argument(
        "--shell-type",
        choices=SHELL_TYPES,
        default=None,
        help="Shell family running in panes (overrides TMUX_MCP_SHELL_TYPE)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for running the tmux MCP server via CLI."""

    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.shell_type:
        settings.shell_type = args.shell_type
    configure_logging(settings.log_level)

    server = create_server(settings)
    logging.getLogger(__name__).info(
        "Launching tmux MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "shell_type": settings.shell_type,
            "tmux_available": getattr(server, "tmux_metadata", {}).get("available"),
        },
    )
    server.run()


if __name__ == "__main__":
    main()
