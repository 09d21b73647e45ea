"""Tests for the display builder."""

from gather.consensus import Consensus, Differs, compute_consensus
from gather.hosts import HostMeta, HostState, HostStatus
from gather.layout import (
    MIN_GUTTER_WIDTH,
    NO_HOSTS_TEXT,
    NO_OUTPUT_TEXT,
    Highlight,
    adjust_scroll,
    build_frame,
    gutter_width,
    render_text,
    status_symbol,
    title,
    truncate,
)
from gather.selection import Selection
from gather.view import ViewState


def _ok_fail_view() -> ViewState:
    hosts = ["A", "B", "C"]
    common = ["boot", "load", "check"]
    outputs = {"A": common + ["OK"], "B": common + ["OK"], "C": common + ["FAIL"]}
    return ViewState(
        hosts=hosts,
        lines=compute_consensus(hosts, outputs),
        has_hosts=True,
        tail=False,
    )


class TestTruncate:
    def test_ascii(self):
        assert truncate("hello", 10) == "hello"
        assert truncate("hello world", 10) == "hello w..."
        assert truncate("hi", 2) == "hi"

    def test_unicode_counts_characters(self):
        assert truncate("🎉🎊🎁", 10) == "🎉🎊🎁"
        assert truncate("🎉🎊🎁🎄🎅🎆🎇", 5) == "🎉🎊..."
        assert truncate("hello 🌍 world", 10) == "hello 🌍..."

    def test_edge_cases(self):
        assert truncate("", 5) == ""
        assert truncate("abc", 3) == "abc"
        assert truncate("abcd", 3) == "..."
        assert truncate("abcd", 2) == ".."
        assert truncate("abcd", 0) == ""


class TestAdjustScroll:
    def test_visible_row_keeps_offset(self):
        assert adjust_scroll(5, 7, 10, 100) == 5

    def test_row_above_window(self):
        assert adjust_scroll(5, 2, 10, 100) == 2

    def test_row_below_window_scrolls_minimally(self):
        assert adjust_scroll(0, 12, 10, 100) == 3

    def test_never_scrolls_past_end(self):
        assert adjust_scroll(50, 8, 10, 12) == 2

    def test_zero_height(self):
        assert adjust_scroll(4, 4, 0, 10) == 0


class TestBuildFrame:
    def test_collapsed_difference_shows_count(self):
        view = _ok_fail_view()
        frame = build_frame(view, 80, 20)

        assert [row.content for row in frame.rows] == ["boot", "load", "check", "OK"]
        assert frame.rows[3].gutter.strip() == "[2]"
        assert frame.rows[3].highlight & Highlight.DIFF
        assert frame.rows[0].gutter.strip() == ""
        assert frame.rows[0].highlight == Highlight.SELECTED

    def test_expand_then_down_twice_selects_fail(self):
        view = _ok_fail_view()
        view.selection = Selection(line_index=3)
        view.selection.toggle_expand(view.lines)
        view.selection.move_down(view.lines)
        view.selection.move_down(view.lines)

        assert view.selection.cursor == (3, 1)
        assert view.lines[3].variant(1) == ("FAIL", ("C",))

        frame = build_frame(view, 80, 20)
        selected = [row for row in frame.rows if row.highlight & Highlight.SELECTED]
        assert len(selected) == 1
        assert selected[0].gutter.strip() == "C"
        assert selected[0].content == "FAIL"
        assert selected[0].highlight & Highlight.VARIANT

    def test_variant_labels(self):
        view = _ok_fail_view()
        view.selection.expanded.add(3)
        frame = build_frame(view, 80, 20)

        assert [row.gutter.strip() for row in frame.rows[4:]] == ["A,B", "C"]

    def test_gutter_width_spans_whole_sequence(self):
        hosts = ["a-very-long-hostname", "b"]
        outputs = {hosts[0]: ["same"] * 30 + ["x"], hosts[1]: ["same"] * 30 + ["y"]}
        view = ViewState(hosts=hosts, lines=compute_consensus(hosts, outputs), has_hosts=True)
        view.selection.expanded.add(30)

        top = build_frame(view, 100, 5)
        view.selection.jump_bottom(view.lines)
        bottom = build_frame(view, 100, 5)

        assert top.gutter_width == len("a-very-long-hostname")
        assert bottom.gutter_width == top.gutter_width
        assert bottom.scroll_offset > top.scroll_offset
        assert all(len(row.gutter) == top.gutter_width for row in top.rows + bottom.rows)

    def test_gutter_has_minimum_width(self):
        lines = [Consensus("a"), Differs({"x": ("h",), "y": ("i",)})]
        assert gutter_width(lines, Selection()) == MIN_GUTTER_WIDTH

    def test_long_labels_truncated_to_half_width(self):
        hosts = [f"host{i:02d}.example.com" for i in range(6)]
        outputs = {h: ["same"] for h in hosts}
        outputs[hosts[0]] = ["other"]
        view = ViewState(hosts=hosts, lines=compute_consensus(hosts, outputs), has_hosts=True)
        view.selection.expanded.add(0)

        frame = build_frame(view, 40, 10)

        assert frame.gutter_width == 20
        assert frame.rows[2].gutter.endswith("...")
        assert len(frame.rows[2].gutter) == 20

    def test_content_truncated_to_viewport(self):
        view = ViewState(hosts=["a"], lines=[Consensus("x" * 200)], has_hosts=True)
        frame = build_frame(view, 40, 5)
        assert len(frame.rows[0].content) == 40 - frame.gutter_width - 3
        assert frame.rows[0].content.endswith("...")

    def test_scroll_follows_selection_minimally(self):
        lines = [Consensus(str(i)) for i in range(50)]
        view = ViewState(hosts=["a"], lines=lines, has_hosts=True)

        view.selection.line_index = 12
        frame = build_frame(view, 40, 10)
        assert frame.scroll_offset == 3
        assert frame.rows[-1].content == "12"

        view.selection.line_index = 8
        frame = build_frame(view, 40, 10)
        assert frame.scroll_offset == 3

        view.selection.line_index = 1
        frame = build_frame(view, 40, 10)
        assert frame.scroll_offset == 1

    def test_scroll_reaches_selected_variant(self):
        lines = [Consensus(str(i)) for i in range(9)]
        lines.append(Differs({"x": ("h1",), "y": ("h2",), "z": ("h3",)}))
        view = ViewState(hosts=["h1", "h2", "h3"], lines=lines, has_hosts=True)
        view.selection = Selection(line_index=9, variant_index=2, expanded={9})

        frame = build_frame(view, 40, 10)

        assert frame.scroll_offset == 3
        assert frame.rows[-1].content == "z"
        assert frame.rows[-1].highlight & Highlight.SELECTED

    def test_no_hosts_notice(self):
        frame = build_frame(ViewState(), 40, 10)
        assert frame.rows[0].content == NO_HOSTS_TEXT
        assert frame.rows[0].highlight == Highlight.NOTICE

    def test_no_output_notice(self):
        frame = build_frame(ViewState(hosts=["a"], has_hosts=True), 40, 10)
        assert frame.rows[0].content == NO_OUTPUT_TEXT

    def test_error_notice_is_distinct(self):
        frame = build_frame(ViewState(error="Cannot read /run: Permission denied"), 40, 10)
        assert frame.rows[0].highlight == Highlight.ERROR
        assert "Permission denied" in frame.rows[0].content


class TestStatusText:
    def test_symbols(self):
        view = ViewState(
            hosts=["a", "b", "c", "d", "e"],
            host_states={
                "a": HostState("a", HostStatus.RUNNING),
                "b": HostState("b", HostStatus.SUCCESS, meta=HostMeta(exit_code=0)),
                "c": HostState("c", HostStatus.FAILED, meta=HostMeta(exit_code=2)),
                "d": HostState("d", HostStatus.RUNNING, waiting_for_input=True),
                "e": HostState("e", error="Permission denied"),
            },
        )

        assert status_symbol(view, "a", 0) == "⠋"
        assert status_symbol(view, "a", 1) == "⠙"
        assert status_symbol(view, "b") == "✓(0)"
        assert status_symbol(view, "c") == "✗(2)"
        assert status_symbol(view, "d") == "⌨"
        assert status_symbol(view, "e") == "!"
        assert status_symbol(view, "missing") == "?"

    def test_title_flags(self):
        view = ViewState(hosts=["a", "b"], tail=True, keep_output=True)
        assert title(view) == "Consensus View (2 hosts) [TAIL] [KEEP]"
        view.tail = False
        view.keep_output = False
        assert title(view) == "Consensus View (2 hosts)"


class TestRenderText:
    def test_expands_all_differences(self):
        view = _ok_fail_view()
        view.host_states = {h: HostState(h, HostStatus.SUCCESS) for h in view.hosts}

        out = render_text(view)

        assert out[0] == "=== Consensus View (3 hosts) ==="
        assert out[1] == "A:success  B:success  C:success"
        assert "[2] OK" in out
        assert "   A,B │ OK" in out
        assert "     C │ FAIL" in out

    def test_no_hosts(self):
        out = render_text(ViewState(tail=False))
        assert out[-1] == NO_HOSTS_TEXT
