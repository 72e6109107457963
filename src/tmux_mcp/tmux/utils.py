"""Command-line helpers shared by the tmux modules."""

from __future__ import annotations

import shlex


def split_command_line(command_line: str) -> list[str]:
    """Split a tmux command line into argv using POSIX shell rules."""

    return shlex.split(command_line)


def quote_argument(value: str) -> str:
    """Quote a value for safe inclusion in a tmux command line."""

    return shlex.quote(value)


def parse_format_line(line: str, field_count: int, delimiter: str = ":") -> list[str]:
    """Split one line of ``-F`` output into exactly ``field_count`` fields.

    Extra delimiters are folded into the last field so titles containing a
    colon survive, and missing trailing fields come back empty.
    """

    parts = line.split(delimiter, field_count - 1)
    parts.extend([""] * (field_count - len(parts)))
    return parts


__all__ = ["parse_format_line", "quote_argument", "split_command_line"]
