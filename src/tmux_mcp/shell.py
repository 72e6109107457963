"""Shell-family selection for command completion markers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ShellType = Literal["bash", "zsh", "fish"]

SHELL_TYPES: tuple[str, ...] = ("bash", "zsh", "fish")
DEFAULT_SHELL_TYPE: ShellType = "bash"

END_MARKER_PREFIX = "TMUX_MCP_DONE_"


def normalize_shell_type(value: str | None) -> ShellType:
    """Map arbitrary input onto a supported shell, falling back to bash."""

    normalized = (value or "").strip().lower()
    if normalized in SHELL_TYPES:
        return normalized  # type: ignore[return-value]
    return DEFAULT_SHELL_TYPE


@dataclass(slots=True)
class ShellConfig:
    """Process-wide shell selection, owned by the server."""

    type: ShellType = DEFAULT_SHELL_TYPE

    def configure(self, value: str | None) -> ShellType:
        self.type = normalize_shell_type(value)
        return self.type

    def end_marker_text(self) -> str:
        """Return the end-of-command marker echoing the last exit status."""

        if self.type == "fish":
            return f"{END_MARKER_PREFIX}$status"
        return f"{END_MARKER_PREFIX}$?"


__all__ = [
    "DEFAULT_SHELL_TYPE",
    "END_MARKER_PREFIX",
    "SHELL_TYPES",
    "ShellConfig",
    "ShellType",
    "normalize_shell_type",
]
