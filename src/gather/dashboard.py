"""TUI Dashboard for gather."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.widgets import Footer, Static

from .config import Config
from .consensus import ConsensusLine
from .hosts import HostStatus, keep_marker_exists
from .layout import SEPARATOR, Highlight, Row, build_frame, status_symbol, title
from .refresh import flush_keep, refresh_view, toggle_keep
from .view import ViewState

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    HostStatus.PENDING: "grey50",
    HostStatus.RUNNING: "yellow",
    HostStatus.SUCCESS: "green",
    HostStatus.FAILED: "red",
}

SELECTED_BG = "on grey23"


class StatusBar(Static):
    """Top bar with per-host status and the view toggles."""

    spinner_frame: reactive[int] = reactive(0)

    def __init__(self, view: ViewState, **kwargs) -> None:
        super().__init__(**kwargs)
        self.view = view

    def render(self) -> Text:
        view = self.view
        text = Text()
        text.append(title(view), style="bold")
        text.append(
            f"  {view.finished_count}/{len(view.hosts)} finished"
            f" | {view.diff_count} differing lines\n",
            style="dim",
        )

        for error in (view.error, view.keep_error):
            if error:
                text.append(f"{error}\n", style="bold red")
        host_errors = view.host_errors
        if host_errors:
            details = ", ".join(f"{host} ({error})" for host, error in host_errors.items())
            noun = "error" if len(host_errors) == 1 else "errors"
            text.append(f"{len(host_errors)} host {noun}: {details}\n", style="red")

        for host in view.hosts:
            state = view.host_states.get(host)
            if state and state.error:
                style = "bold red"
            elif state and state.waiting_for_input:
                style = "magenta"
            else:
                style = STATUS_STYLES[view.status_of(host)]
            text.append(f"{host}:")
            text.append(status_symbol(view, host, self.spinner_frame), style=style)
            text.append("  ")
        return text


class ConsensusPanel(Static):
    """The consensus lines, with differences expandable in place."""

    def __init__(self, view: ViewState, **kwargs) -> None:
        super().__init__(**kwargs)
        self.view = view

    def render(self) -> Text:
        frame = build_frame(self.view, self.size.width, self.size.height)
        text = Text(no_wrap=True, overflow="crop")
        for i, row in enumerate(frame.rows):
            if i:
                text.append("\n")
            _append_row(text, row, self.size.width)
        return text


def _append_row(text: Text, row: Row, width: int) -> None:
    hint = row.highlight
    if hint & Highlight.ERROR:
        text.append(row.content, style="bold red")
        return
    if hint & Highlight.NOTICE:
        text.append(row.content, style="yellow")
        return

    bg = f" {SELECTED_BG}" if hint & Highlight.SELECTED else ""
    if hint & Highlight.DIFF:
        gutter_style, content_style = "bold yellow", ""
    elif hint & Highlight.VARIANT:
        gutter_style, content_style = "cyan", "grey70"
    else:
        gutter_style, content_style = "", ""

    line = f"{row.gutter}{SEPARATOR}{row.content}"
    text.append(row.gutter, style=(gutter_style + bg).strip())
    text.append(SEPARATOR, style=("grey37" + bg).strip())
    text.append(row.content, style=(content_style + bg).strip())
    if bg and len(line) < width:
        text.append(" " * (width - len(line)), style=bg.strip())


class WatchApp(App):
    """Live consensus view over a run's output directory."""

    CSS = """
    StatusBar {
        dock: top;
        height: auto;
        max-height: 6;
        background: $surface;
        padding: 0 1;
    }

    ConsensusPanel {
        height: 1fr;
        border: solid $primary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "quit", "Quit", show=False),
        Binding("j,down", "cursor_down", "Down", show=False),
        Binding("k,up", "cursor_up", "Up", show=False),
        Binding("enter,space", "toggle_expand", "Expand"),
        Binding("l,right", "expand", "Expand", show=False),
        Binding("h,left", "collapse", "Collapse", show=False),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse all"),
        Binding("tab", "next_diff", "Next diff", priority=True),
        Binding("shift+tab", "prev_diff", "Prev diff", show=False, priority=True),
        Binding("g,home", "top", "Top", show=False),
        Binding("G,end", "bottom", "Bottom", show=False),
        Binding("t", "toggle_tail", "Tail"),
        Binding("K", "toggle_keep", "Keep"),
        Binding("r", "reload", "Refresh", show=False),
    ]

    def __init__(self, output_dir: Path, config: Config | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.output_dir = output_dir
        self.config = config or Config()
        self.view = ViewState(
            tail=self.config.tail,
            keep_output=keep_marker_exists(output_dir),
        )

    def compose(self) -> ComposeResult:
        yield StatusBar(self.view, id="status-bar")
        yield ConsensusPanel(self.view, id="consensus")
        yield Footer()

    def on_mount(self) -> None:
        """Do the first refresh, then poll on a fixed interval."""
        self.action_reload()
        self.set_interval(self.config.refresh_interval, self._tick)

    def _tick(self) -> None:
        self.query_one(StatusBar).spinner_frame += 1
        self.action_reload()

    def _redraw(self) -> None:
        self.query_one(StatusBar).refresh(layout=True)
        self.query_one(ConsensusPanel).refresh()

    def _navigate(self, move: Callable[[Sequence[ConsensusLine]], object]) -> None:
        """Apply a cursor movement; moving by hand stops following the tail."""
        self.view.tail = False
        move(self.view.lines)
        self._redraw()

    def _apply(self, change: Callable[[Sequence[ConsensusLine]], object]) -> None:
        change(self.view.lines)
        self._redraw()

    def action_reload(self) -> None:
        refresh_view(
            self.view, self.output_dir, prompt_detection=self.config.prompt_detection
        )
        self._redraw()

    def action_cursor_down(self) -> None:
        self._navigate(self.view.selection.move_down)

    def action_cursor_up(self) -> None:
        self._navigate(self.view.selection.move_up)

    def action_top(self) -> None:
        self._navigate(self.view.selection.jump_top)

    def action_bottom(self) -> None:
        self._apply(self.view.selection.jump_bottom)

    def action_next_diff(self) -> None:
        self._navigate(self.view.selection.next_diff)

    def action_prev_diff(self) -> None:
        self._navigate(self.view.selection.prev_diff)

    def action_toggle_expand(self) -> None:
        self._apply(self.view.selection.toggle_expand)

    def action_expand(self) -> None:
        self._apply(self.view.selection.expand_current)

    def action_collapse(self) -> None:
        self._apply(self.view.selection.collapse_current)

    def action_expand_all(self) -> None:
        self._apply(self.view.selection.expand_all)

    def action_collapse_all(self) -> None:
        self._apply(self.view.selection.collapse_all)

    def action_toggle_tail(self) -> None:
        self.view.tail = not self.view.tail
        if self.view.tail:
            self.view.selection.jump_bottom(self.view.lines)
        self._redraw()

    def action_toggle_keep(self) -> None:
        toggle_keep(self.view, self.output_dir)
        logger.info("Keep output: %s", self.view.keep_output)
        self._redraw()

    async def action_quit(self) -> None:
        """Quit the application, leaving the keep marker in its final state."""
        flush_keep(self.view, self.output_dir)
        self.exit()
