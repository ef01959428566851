"""Turn a SessionState into the lines shown on screen. Never mutates state."""

from __future__ import annotations

from collections.abc import Mapping

from rich.cells import cell_len
from rich.text import Text

from prsup.models import Badge, PullRequest
from prsup.session import InputMode, Lifecycle, SessionState

# Column widths, in terminal cells
COL_STATUS = 12
COL_REPO = 28
COL_NUM = 6
COL_TITLE = 32
COL_AUTHOR = 14
COL_REVIEWER = 14
COL_BRANCH = 20

ELLIPSIS = "..."
MIN_WINDOW = 5
FALLBACK_WINDOW = 15
CHROME_LINES = 8  # filter line, header, rule, footer and legend

HELP_TEXT = (
    "j/k ↑/↓: navigate • g/G: top/bottom • /: filter • o: open • "
    "r: refresh • enter: checkout • q/esc: quit"
)

DEFAULT_STYLES: Mapping[Badge, str] = {
    Badge.DRAFT: "color(241)",
    Badge.APPROVED: "color(78)",
    Badge.DENIED: "color(196)",
    Badge.COMMENTED: "color(117)",
    Badge.REVIEW: "color(214)",
    Badge.OPEN: "color(39)",
}

TITLE_STYLE = "bold color(205)"
SELECTED_STYLE = "bold color(229) on color(57)"
NORMAL_STYLE = "color(252)"
DIM_STYLE = "color(240)"
HELP_STYLE = "color(241)"
LOADING_STYLE = "color(214)"
REVIEWER_STYLE = "color(214)"
BRANCH_STYLE = "color(141)"
ADDITIONS_STYLE = "color(78)"
DELETIONS_STYLE = "color(196)"
ERROR_STYLE = "bold color(196)"


def truncate(text: str, width: int) -> str:
    """Shorten ``text`` to at most ``width`` cells, marking the cut with '...'."""
    if cell_len(text) <= width:
        return text
    for end in range(len(text) - 1, 0, -1):
        candidate = text[:end] + ELLIPSIS
        if cell_len(candidate) <= width:
            return candidate
    return ELLIPSIS


def pad(text: str, width: int) -> str:
    gap = width - cell_len(text)
    return text + " " * gap if gap > 0 else text


def cell(text: str, width: int) -> str:
    """Truncate to leave one cell of spacing, then pad to the column width."""
    return pad(truncate(text, width - 1), width)


def window(cursor: int, total: int, height: int) -> tuple[int, int]:
    """Return the [start, end) slice of rows that keeps the cursor on screen."""
    rows = height - CHROME_LINES
    if rows < MIN_WINDOW:
        rows = FALLBACK_WINDOW
    start = cursor - rows + 1 if cursor >= rows else 0
    return start, min(start + rows, total)


def header_line() -> Text:
    labels = (
        pad("STATUS", COL_STATUS)
        + pad("REPO", COL_REPO)
        + pad("#", COL_NUM)
        + pad("TITLE", COL_TITLE)
        + pad("AUTHOR", COL_AUTHOR)
        + pad("REVIEWER", COL_REVIEWER)
        + pad("BRANCH", COL_BRANCH)
        + "+/-"
    )
    return Text("  " + labels, style=DIM_STYLE)


def rule_line() -> Text:
    total = COL_STATUS + COL_REPO + COL_NUM + COL_TITLE + COL_AUTHOR + COL_REVIEWER + COL_BRANCH + 10
    return Text("  " + "─" * total, style=DIM_STYLE)


def row_line(pr: PullRequest, selected: bool, styles: Mapping[Badge, str]) -> Text:
    badge = pr.badge
    fields = [
        (cell(badge.label, COL_STATUS), styles.get(badge, NORMAL_STYLE)),
        (cell(pr.repo_name, COL_REPO), NORMAL_STYLE),
        (cell(f"#{pr.number}", COL_NUM), NORMAL_STYLE),
        (cell(pr.title, COL_TITLE), NORMAL_STYLE),
        (cell(pr.author, COL_AUTHOR), DIM_STYLE),
        (cell(pr.reviewer, COL_REVIEWER), REVIEWER_STYLE),
        (cell(pr.branch, COL_BRANCH), BRANCH_STYLE),
        (f"+{pr.additions}", ADDITIONS_STYLE),
        (" ", ""),
        (f"-{pr.deletions}", DELETIONS_STYLE),
    ]
    if selected:
        return Text("> " + "".join(text for text, _ in fields), style=SELECTED_STYLE)
    line = Text("  ")
    for text, style in fields:
        line.append(text, style=style)
    return line


def render(state: SessionState, styles: Mapping[Badge, str] = DEFAULT_STYLES) -> list[Text]:
    lines: list[Text] = [Text("")]

    if state.input_mode is InputMode.FILTERING:
        lines += [Text(f"  / {state.filter_query}█", style=TITLE_STYLE), Text("")]
    elif state.filter_query:
        lines += [Text(f"  Filter: {state.filter_query}", style=TITLE_STYLE), Text("")]

    lines += [header_line(), rule_line()]

    if state.lifecycle is Lifecycle.INITIALIZING and not state.all_records:
        lines.append(Text(f"  {state.spinner} Loading...", style=LOADING_STYLE))
        return lines

    if state.error and not state.all_records:
        lines += [
            Text(""),
            Text(f"  Error: {state.error}", style=ERROR_STYLE),
            Text(""),
            Text("  Press q to quit, r to retry.", style=HELP_STYLE),
        ]
        return lines

    visible = state.visible_records
    if not visible:
        lines.append(Text("  No PRs found."))
    else:
        start, end = window(state.cursor, len(visible), state.height)
        end = min(end, state.reveal_count)
        for i in range(start, end):
            lines.append(row_line(visible[i], i == state.cursor, styles))

    footer = Text(f"  {len(visible)}/{len(state.all_records)} PRs")
    if state.lifecycle in (Lifecycle.SHOWING_CACHED, Lifecycle.REFRESHING):
        footer.append(f"  {state.spinner} Refreshing", style=LOADING_STYLE)
    elif state.error:
        footer.append(f"  ⚠ Refresh failed: {state.error}", style=ERROR_STYLE)
    lines += [Text(""), footer, Text(""), Text("  " + HELP_TEXT, style=HELP_STYLE)]
    return lines
