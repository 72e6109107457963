"""tmux process control: runner, command queue, key translation, topology."""

from .keys import KeyToken, translate_keys
from .models import TmuxPane, TmuxSession, TmuxWindow
from .queue import CommandQueue
from .runner import (
    EndpointUnavailableError,
    InvocationFailedError,
    TmuxCommandError,
    TmuxExecutionResult,
    TmuxNotFoundError,
    TmuxRunner,
    TmuxRunnerError,
)
from .topology import TmuxClient

__all__ = [
    "CommandQueue",
    "EndpointUnavailableError",
    "InvocationFailedError",
    "KeyToken",
    "TmuxClient",
    "TmuxCommandError",
    "TmuxExecutionResult",
    "TmuxNotFoundError",
    "TmuxPane",
    "TmuxRunner",
    "TmuxRunnerError",
    "TmuxSession",
    "TmuxWindow",
    "translate_keys",
]
