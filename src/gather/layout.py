"""Turning the consensus view into rows for a viewport."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import NamedTuple, Sequence

from .consensus import ConsensusLine, Differs
from .hosts import HostStatus
from .selection import Selection
from .view import ViewState

MIN_GUTTER_WIDTH = 4
ELLIPSIS = "..."
SEPARATOR = " │ "

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
STATUS_SYMBOLS = {
    HostStatus.PENDING: "?",
    HostStatus.SUCCESS: "✓",
    HostStatus.FAILED: "✗",
}

NO_HOSTS_TEXT = "No host directories found..."
NO_OUTPUT_TEXT = "(no output yet)"


class Highlight(Flag):
    """How the dashboard should paint a row."""

    NONE = 0
    DIFF = auto()
    VARIANT = auto()
    SELECTED = auto()
    NOTICE = auto()
    ERROR = auto()


class Row(NamedTuple):
    gutter: str
    content: str
    highlight: Highlight


@dataclass
class Frame:
    rows: list[Row]
    scroll_offset: int
    gutter_width: int


class _Entry(NamedTuple):
    label: str
    content: str
    highlight: Highlight
    cursor: tuple[int, int | None]


def label_width(label: str) -> int:
    """Width of a gutter label, in characters."""
    return len(label)


def host_label(hosts: Sequence[str]) -> str:
    """A single host name, or the comma-joined list of hosts sharing a variant."""
    return ",".join(hosts)


def count_label(line: Differs) -> str:
    return f"[{line.variant_count}]"


def truncate(text: str, width: int) -> str:
    """Shorten ``text`` to ``width`` characters, ending in an ellipsis.

    Works on characters, never bytes, so multi-byte characters stay whole.
    """
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= len(ELLIPSIS):
        return ELLIPSIS[:width]
    return text[: width - len(ELLIPSIS)] + ELLIPSIS


def _entries(lines: Sequence[ConsensusLine], selection: Selection) -> list[_Entry]:
    entries = []
    for index, line in enumerate(lines):
        if not isinstance(line, Differs):
            entries.append(_Entry("", line.text, Highlight.NONE, (index, None)))
            continue

        entries.append(_Entry(count_label(line), line.text, Highlight.DIFF, (index, None)))
        if selection.is_expanded(lines, index):
            for variant_index, (text, hosts) in enumerate(line.variants.items()):
                entries.append(
                    _Entry(host_label(hosts), text, Highlight.VARIANT, (index, variant_index))
                )
    return entries


def gutter_width(lines: Sequence[ConsensusLine], selection: Selection) -> int:
    """Widest label of any row in the whole sequence, at least ``MIN_GUTTER_WIDTH``."""
    widths = [label_width(entry.label) for entry in _entries(lines, selection)]
    return max([MIN_GUTTER_WIDTH, *widths])


def adjust_scroll(offset: int, row: int, height: int, total: int) -> int:
    """Move ``offset`` as little as possible so ``row`` is inside the viewport."""
    if height <= 0:
        return 0
    if row < offset:
        offset = row
    elif row >= offset + height:
        offset = row - height + 1
    return max(0, min(offset, max(total - height, 0)))


def _notice(view: ViewState) -> Row:
    if view.error:
        return Row("", view.error, Highlight.ERROR)
    if not view.has_hosts:
        return Row("", NO_HOSTS_TEXT, Highlight.NOTICE)
    return Row("", NO_OUTPUT_TEXT, Highlight.NOTICE)


def build_frame(view: ViewState, width: int, height: int) -> Frame:
    """Compute the rows to draw in a ``width`` x ``height`` viewport.

    The new scroll offset is stored back on ``view`` so the next frame only
    scrolls when the selection leaves the window.
    """
    if not view.lines:
        view.scroll_offset = 0
        return Frame([_notice(view)] if height > 0 else [], 0, MIN_GUTTER_WIDTH)

    entries = _entries(view.lines, view.selection)
    gutter = max(min(gutter_width(view.lines, view.selection), width // 2), 1)
    content_width = max(width - gutter - len(SEPARATOR), 0)

    cursor = view.selection.cursor
    selected = next((i for i, e in enumerate(entries) if e.cursor == cursor), 0)
    offset = adjust_scroll(view.scroll_offset, selected, height, len(entries))
    view.scroll_offset = offset

    rows = []
    for i, entry in enumerate(entries[offset:offset + max(height, 0)], start=offset):
        highlight = entry.highlight | Highlight.SELECTED if i == selected else entry.highlight
        rows.append(
            Row(
                truncate(entry.label, gutter).rjust(gutter),
                truncate(entry.content, content_width),
                highlight,
            )
        )

    return Frame(rows, offset, gutter)


def status_symbol(view: ViewState, host: str, spinner_frame: int = 0) -> str:
    """Short status marker for a host in the status bar."""
    state = view.host_states.get(host)
    if state is None:
        return STATUS_SYMBOLS[HostStatus.PENDING]
    if state.error:
        return "!"
    if state.waiting_for_input:
        return "⌨"
    if state.status == HostStatus.RUNNING:
        return SPINNER_FRAMES[spinner_frame % len(SPINNER_FRAMES)]

    symbol = STATUS_SYMBOLS[state.status]
    if state.meta and state.meta.exit_code is not None and state.status.finished:
        symbol += f"({state.meta.exit_code})"
    return symbol


def title(view: ViewState) -> str:
    flags = ""
    if view.tail:
        flags += " [TAIL]"
    if view.keep_output:
        flags += " [KEEP]"
    return f"Consensus View ({len(view.hosts)} hosts){flags}"


def render_text(view: ViewState) -> list[str]:
    """Plain-text rendering with every difference expanded, for non-TTY output."""
    out = [f"=== {title(view)} ==="]
    out.append("  ".join(f"{h}:{view.status_of(h).value}" for h in view.hosts))
    for host, error in view.host_errors.items():
        out.append(f"{host}: {error}")
    out.append("")

    if not view.lines:
        out.append(_notice(view).content)
        return out

    for line in view.lines:
        if not isinstance(line, Differs):
            out.append(line.text)
            continue
        out.append(f"{count_label(line)} {line.text}")
        labels = [host_label(hosts) for hosts in line.variants.values()]
        width = max([MIN_GUTTER_WIDTH, *map(label_width, labels)])
        for label, text in zip(labels, line.variants):
            out.append(f"  {label.rjust(width)}{SEPARATOR}{text}")

    return out
