"""tmux MCP diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from tmux_mcp.config import TmuxSettings
from tmux_mcp.tmux import CommandQueue, TmuxClient, TmuxNotFoundError, TmuxRunner, translate_keys
from tmux_mcp.tmux.runner import serialize_result


def load_runner(settings: TmuxSettings) -> TmuxRunner:
    try:
        return TmuxRunner(Path(settings.tmux_path) if settings.tmux_path else None)
    except TmuxNotFoundError as exc:
        print(f"Tmux unavailable: {exc}")
        raise SystemExit(1)


def load_client(settings: TmuxSettings) -> TmuxClient:
    runner = load_runner(settings)
    return TmuxClient(CommandQueue(runner, min_interval_ms=settings.min_command_interval_ms))


def cmd_settings(args: argparse.Namespace) -> None:
    settings = TmuxSettings()
    print(json.dumps(settings.model_dump(mode="json"), indent=2))


def cmd_version(args: argparse.Namespace) -> None:
    settings = TmuxSettings()
    runner = load_runner(settings)
    result = asyncio.run(runner.version())
    if args.json:
        print(serialize_result(result))
    else:
        print(result.stdout.strip() or result.stderr.strip())
    if not result.ok:
        raise SystemExit(1)


def cmd_sessions(args: argparse.Namespace) -> None:
    settings = TmuxSettings()
    client = load_client(settings)
    sessions = asyncio.run(client.list_sessions())
    if args.json:
        print(json.dumps([session.to_dict() for session in sessions], indent=2))
    else:
        for session in sessions:
            marker = "*" if session.attached else " "
            print(f"{marker} {session.id} {session.name} ({session.windows} windows)")


def cmd_panes(args: argparse.Namespace) -> None:
    settings = TmuxSettings()
    client = load_client(settings)
    panes = asyncio.run(client.list_panes(args.window_id))
    for pane in panes:
        marker = "*" if pane.active else " "
        print(f"{marker} {pane.id} [{pane.index}] {pane.title}")


def cmd_keys(args: argparse.Namespace) -> None:
    tokens = translate_keys(args.text)
    if args.json:
        print(json.dumps([{"kind": token.kind, "value": token.value} for token in tokens]))
    else:
        print(" ".join(token.argument for token in tokens))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="tmux MCP diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_settings = sub.add_parser("settings", help="Print effective settings")
    p_settings.set_defaults(func=cmd_settings)

    p_version = sub.add_parser("version", help="Print the tmux version")
    p_version.add_argument("--json", action="store_true", help="Output the raw invocation result")
    p_version.set_defaults(func=cmd_version)

    p_sessions = sub.add_parser("sessions", help="List tmux sessions")
    p_sessions.add_argument("--json", action="store_true", help="Output JSON")
    p_sessions.set_defaults(func=cmd_sessions)

    p_panes = sub.add_parser("panes", help="List panes in a window")
    p_panes.add_argument("window_id", help="Window id, e.g. @1")
    p_panes.set_defaults(func=cmd_panes)

    p_keys = sub.add_parser("keys", help="Show how text is translated into send-keys tokens")
    p_keys.add_argument("text", help="Text or key name to translate")
    p_keys.add_argument("--json", action="store_true", help="Output JSON")
    p_keys.set_defaults(func=cmd_keys)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
