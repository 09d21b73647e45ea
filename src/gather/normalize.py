"""Terminal output normalization for gather."""

from __future__ import annotations

import re

PLACEHOLDER = "\ufffd"

# Prompts that usually mean a remote process is blocked on the operator
INPUT_PROMPT_PATTERNS = (
    "password:",
    "passphrase",
    "[y/n]",
    "[n/y]",
    "[yes/no]",
    "(yes/no)",
    "continue?",
    "proceed?",
    "confirm",
    "enter to continue",
    "press enter",
    "press any key",
    ": $",
    "? $",
    "> ",
    "read>",
)

_PROMPT_TAIL_CHARS = 500

_ANSI_RE = re.compile(
    r"""
    \x1b\[[0-?]*[ -/]*[@-~]                      # CSI
    | \x1b\][^\x07\x1b\x9c]*(?:\x07|\x1b\\|\x9c)?  # OSC
    | \x1bP[^\x1b\x9c]*(?:\x1b\\|\x9c)?           # DCS
    | \x9d[^\x07\x1b\x9c]*(?:\x07|\x1b\\|\x9c)?    # 8-bit OSC
    | \x1b[^\[\]P]?                             # two-character escapes
    """,
    re.VERBOSE,
)


def decode_output(raw: bytes | str) -> str:
    """Decode captured bytes, replacing anything that is not UTF-8."""
    if isinstance(raw, str):
        return raw
    return raw.decode("utf-8", errors="replace")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from a line."""
    return _ANSI_RE.sub("", text)


def render_line(line: str) -> str:
    """Replay one physical line through a cursor, the way a terminal draws it.

    A carriage return moves the cursor back to column 0 without clearing, so
    later characters overwrite in place:

    - ``"hello\\rhi"`` -> ``"hillo"``
    - ``"hello\\rworld"`` -> ``"world"``
    - ``"a\\rb\\rc"`` -> ``"c"``
    """
    cells: list[str] = []
    cursor = 0
    for char in strip_ansi(line):
        if char == "\r":
            cursor = 0
            continue
        if char == "\b":
            cursor = max(cursor - 1, 0)
            continue
        if char == "\x07":
            continue
        if char != "\t" and (ord(char) < 0x20 or ord(char) == 0x7F):
            char = PLACEHOLDER
        if cursor < len(cells):
            cells[cursor] = char
        else:
            cells.append(char)
        cursor += 1
    return "".join(cells)


def clean_terminal_output(raw: bytes | str) -> list[str]:
    """Convert a raw capture into the lines a live terminal would show."""
    text = decode_output(raw)
    if not text:
        return []
    physical = text.split("\n")
    if physical[-1] == "":
        physical.pop()
    return [render_line(line) for line in physical]


def detect_input_prompt(raw: bytes | str) -> bool:
    """Check whether the tail of the output looks like it is waiting for input."""
    text = decode_output(raw)
    # Partial prompts have no trailing newline, so look at raw characters
    tail = text[-_PROMPT_TAIL_CHARS:]
    cleaned = "\n".join(render_line(line) for line in tail.split("\n")).lower()
    return any(pattern in cleaned for pattern in INPUT_PROMPT_PATTERNS)
