"""Translate human-oriented key strings into tmux ``send-keys`` tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .utils import quote_argument

TokenKind = Literal["named", "control", "literal", "quote"]

NAMED_KEYS: dict[str, str] = {
    "enter": "Enter",
    "return": "Enter",
    "tab": "Tab",
    "escape": "Escape",
    "esc": "Escape",
    "space": "Space",
    "backspace": "BSpace",
    "bspace": "BSpace",
    "delete": "Delete",
    "del": "Delete",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "home": "Home",
    "end": "End",
    "pageup": "PPage",
    "pagedown": "NPage",
    "pgup": "PPage",
    "pgdn": "NPage",
    "insert": "IC",
    **{f"f{number}": f"F{number}" for number in range(1, 13)},
}

CONTROL_CHARACTERS: dict[str, tuple[TokenKind, str]] = {
    "\x01": ("control", "C-a"),
    "\x03": ("control", "C-c"),
    "\x04": ("control", "C-d"),
    "\x05": ("control", "C-e"),
    "\x08": ("named", "BSpace"),
    "\x0b": ("control", "C-k"),
    "\x0c": ("control", "C-l"),
    "\x12": ("control", "C-r"),
    "\x15": ("control", "C-u"),
    "\x1a": ("control", "C-z"),
    "\x1b": ("named", "Escape"),
    "\x7f": ("named", "Delete"),
    "\t": ("named", "Tab"),
    "\n": ("named", "Enter"),
    "\r": ("named", "Enter"),
    " ": ("named", "Space"),
}


@dataclass(frozen=True, slots=True)
class KeyToken:
    """One discrete key event understood by ``tmux send-keys``."""

    kind: TokenKind
    value: str

    @property
    def argument(self) -> str:
        """Return the token as it must appear on a tmux command line."""

        if self.kind == "quote":
            return "\"'\""
        value = self.value
        # tmux splits commands on any argument ending in ';'.
        if value.endswith(";"):
            value = value[:-1] + "\\;"
        return quote_argument(value)


def translate_keys(text: str) -> list[KeyToken]:
    """Translate ``text`` into an ordered list of key tokens.

    A string that is, in its entirety, the name of a key (``"Enter"``,
    ``"pgup"``, ``"F5"``) becomes that single key. Otherwise the string is
    read left to right: ``^X`` is Control-x, known control bytes map to
    their key names, and every other character is typed literally.
    """

    named = NAMED_KEYS.get(text.lower())
    if named is not None:
        return [KeyToken("named", named)]

    tokens: list[KeyToken] = []
    index = 0
    while index < len(text):
        char = text[index]

        if char == "^" and index + 1 < len(text):
            tokens.append(KeyToken("control", f"C-{text[index + 1].lower()}"))
            index += 2
            continue

        mapped = CONTROL_CHARACTERS.get(char)
        if mapped is not None:
            tokens.append(KeyToken(*mapped))
        elif char == "'":
            tokens.append(KeyToken("quote", char))
        else:
            tokens.append(KeyToken("literal", char))
        index += 1

    return tokens


__all__ = ["CONTROL_CHARACTERS", "KeyToken", "NAMED_KEYS", "TokenKind", "translate_keys"]
