from __future__ import annotations

import pytest
from rich.cells import cell_len

from prsup.models import Badge, ReviewDecision
from prsup.render import (
    DEFAULT_STYLES,
    header_line,
    render,
    row_line,
    truncate,
    window,
)
from prsup.session import InputMode, Lifecycle, SessionState


def _plain(lines) -> list[str]:
    return [line.plain for line in lines]


def _state(records=(), **kwargs) -> SessionState:
    records = list(records)
    kwargs.setdefault("lifecycle", Lifecycle.READY)
    kwargs.setdefault("reveal_count", len(records))
    return SessionState(all_records=records, visible_records=list(records), **kwargs)


@pytest.fixture
def prs(make_pr):
    return [make_pr(number=n, title=f"PR {n}") for n in range(1, 6)]


class TestTruncate:
    def test_short_text_untouched(self):
        assert truncate("hello", 10) == "hello"

    def test_ascii(self):
        assert truncate("abcdefghij", 6) == "abc..."

    def test_wide_characters_measured_in_cells(self):
        result = truncate("日本語テキスト", 7)
        assert result == "日本..."
        assert cell_len(result) <= 7

    @pytest.mark.parametrize("width", [4, 5, 8, 13])
    def test_never_wider_than_width(self, width):
        assert cell_len(truncate("混合 mixed テキスト text", width)) <= width


class TestWindow:
    def test_everything_fits(self):
        assert window(0, 3, 40) == (0, 3)

    def test_scrolls_to_keep_cursor_visible(self):
        # 13 lines of terminal leave 5 rows
        assert window(9, 20, 13) == (5, 10)

    def test_tiny_terminal_uses_fallback(self):
        assert window(20, 30, 0) == (6, 21)


class TestRows:
    def test_selected_row_has_marker(self, make_pr):
        line = row_line(make_pr(number=142), selected=True, styles=DEFAULT_STYLES)
        assert line.plain.startswith("> [Open]")
        assert "#142" in line.plain

    def test_unselected_row(self, make_pr):
        line = row_line(make_pr(additions=7, deletions=3), selected=False, styles=DEFAULT_STYLES)
        assert line.plain.startswith("  [Open]")
        assert line.plain.endswith("+7 -3")

    def test_columns_line_up_with_header(self, make_pr):
        line = row_line(make_pr(number=12), selected=False, styles=DEFAULT_STYLES)
        assert line.plain.index("#12") == header_line().plain.index("#")

    def test_long_title_truncated(self, make_pr):
        line = row_line(make_pr(title="x" * 80), selected=False, styles=DEFAULT_STYLES)
        assert "x" * 28 + "..." in line.plain
        assert "x" * 32 not in line.plain

    def test_badge_style_is_configurable(self, make_pr):
        pr = make_pr(decision=ReviewDecision.APPROVED)
        line = row_line(pr, selected=False, styles={Badge.APPROVED: "bold red"})
        assert line.spans[0].style == "bold red"


class TestRender:
    def test_loading_view(self):
        lines = _plain(render(SessionState()))
        assert lines[-1].strip().endswith("Loading...")
        assert not any("PRs" in line for line in lines)

    def test_error_view_without_data(self):
        state = _state(lifecycle=Lifecycle.FAILED, error="failed to fetch PRs: boom")
        lines = _plain(render(state))
        assert "  Error: failed to fetch PRs: boom" in lines
        assert "  Press q to quit, r to retry." in lines

    def test_failed_refresh_keeps_rows(self, prs):
        state = _state(prs, lifecycle=Lifecycle.FAILED, error="boom")
        lines = _plain(render(state))
        assert sum("PR " in line for line in lines) == 5
        assert "  5/5 PRs  ⚠ Refresh failed: boom" in lines

    @pytest.mark.parametrize("lifecycle", [Lifecycle.SHOWING_CACHED, Lifecycle.REFRESHING])
    def test_refreshing_footer(self, prs, lifecycle):
        lines = _plain(render(_state(prs, lifecycle=lifecycle)))
        assert any(line.startswith("  5/5 PRs") and "Refreshing" in line for line in lines)

    def test_reveal_limits_rows(self, prs):
        lines = _plain(render(_state(prs, reveal_count=2)))
        assert sum("PR " in line for line in lines) == 2

    def test_cursor_row_marked(self, prs):
        lines = _plain(render(_state(prs, cursor=2)))
        marked = [line for line in lines if line.startswith("> ")]
        assert len(marked) == 1
        assert "PR 3" in marked[0]

    def test_no_matches(self, prs):
        state = _state(prs, filter_query="zzz")
        state.visible_records = []
        lines = _plain(render(state))
        assert "  No PRs found." in lines
        assert "  0/5 PRs" in lines

    def test_filter_being_edited(self, prs):
        lines = _plain(render(_state(prs, input_mode=InputMode.FILTERING, filter_query="web")))
        assert lines[1] == "  / web█"

    def test_filter_applied(self, prs):
        lines = _plain(render(_state(prs, filter_query="web")))
        assert lines[1] == "  Filter: web"

    def test_help_legend_last(self, prs):
        lines = _plain(render(_state(prs)))
        assert "enter: checkout" in lines[-1]
        assert "r: refresh" in lines[-1]
