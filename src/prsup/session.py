"""Interactive session state for the PR dashboard.

`Session` owns every piece of mutable state the screen depends on. It never
performs I/O: each handler mutates the state and returns a list of effects
(fetch, schedule a timer, save the cache, open a URL, exit) for the driver to
carry out. Results of those effects come back in as further handler calls, so
the driver can feed everything through a single message queue.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from prsup.filtering import filter_pull_requests
from prsup.models import PullRequest, sort_oldest_first

logger = logging.getLogger(__name__)

REVEAL_STEP = 2
SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]


class Lifecycle(Enum):
    INITIALIZING = "initializing"
    SHOWING_CACHED = "showing-cached"
    READY = "ready"
    REFRESHING = "refreshing"
    FAILED = "failed"


class InputMode(Enum):
    BROWSING = "browsing"
    FILTERING = "filtering"


# Lifecycles during which a fetch is running and the spinner turns
LOADING = frozenset({Lifecycle.INITIALIZING, Lifecycle.SHOWING_CACHED, Lifecycle.REFRESHING})


# -- Effects --


@dataclass(frozen=True)
class Fetch:
    """Run the fetch gateway and report back via fetch_succeeded/fetch_failed."""


@dataclass(frozen=True)
class ScheduleTick:
    """Call Session.tick() after the reveal interval."""


@dataclass(frozen=True)
class ScheduleSpinner:
    """Call Session.spinner_tick() after the spinner interval."""


@dataclass(frozen=True)
class SaveCache:
    prs: tuple[PullRequest, ...]


@dataclass(frozen=True)
class OpenInBrowser:
    pr: PullRequest


@dataclass(frozen=True)
class Exit:
    selection: PullRequest | None


Effect = Fetch | ScheduleTick | ScheduleSpinner | SaveCache | OpenInBrowser | Exit


@dataclass
class SessionState:
    all_records: list[PullRequest] = field(default_factory=list)
    visible_records: list[PullRequest] = field(default_factory=list)
    cursor: int = 0
    selection: PullRequest | None = None
    input_mode: InputMode = InputMode.BROWSING
    filter_query: str = ""
    lifecycle: Lifecycle = Lifecycle.INITIALIZING
    reveal_count: int = 0
    error: str | None = None
    spinner_frame: int = 0
    finished: bool = False
    width: int = 0
    height: int = 0

    @property
    def current(self) -> PullRequest | None:
        if 0 <= self.cursor < len(self.visible_records):
            return self.visible_records[self.cursor]
        return None

    @property
    def revealing(self) -> bool:
        return self.reveal_count < len(self.visible_records)

    @property
    def spinner(self) -> str:
        return SPINNER_FRAMES[self.spinner_frame % len(SPINNER_FRAMES)]


class Session:
    """State machine driving one run of the dashboard."""

    def __init__(self, cached: Sequence[PullRequest] = (), persist: bool = True) -> None:
        records = sort_oldest_first(list(cached))
        self.state = SessionState(
            all_records=records,
            visible_records=records,
            reveal_count=len(records),
        )
        self.persist = persist
        self._fetching = False
        self._tick_scheduled = False
        self._spinner_scheduled = False

    # -- Lifecycle --

    def start(self) -> list[Effect]:
        """Dispatch the first fetch. Cached records stay on screen meanwhile."""
        if self.state.all_records:
            self.state.lifecycle = Lifecycle.SHOWING_CACHED
        return self._dispatch_fetch()

    def refresh(self, manual: bool = True) -> list[Effect]:
        """Start a background refresh unless one is already running.

        Periodic refreshes (``manual=False``) do not retry after a failure.
        """
        state = self.state
        if state.finished or self._fetching:
            return []
        if state.lifecycle is Lifecycle.FAILED and not manual:
            return []
        state.lifecycle = Lifecycle.REFRESHING if state.all_records else Lifecycle.INITIALIZING
        return self._dispatch_fetch()

    def fetch_succeeded(self, prs: Sequence[PullRequest]) -> list[Effect]:
        state = self.state
        if state.finished:
            return []
        self._fetching = False
        background = state.lifecycle in (Lifecycle.SHOWING_CACHED, Lifecycle.REFRESHING)
        previous = state.current

        state.all_records = sort_oldest_first(list(prs))
        self._apply_filter(keep=previous)
        state.error = None
        state.lifecycle = Lifecycle.READY
        logger.debug("Loaded %d PRs (background=%s)", len(state.all_records), background)

        effects: list[Effect] = []
        if self.persist:
            effects.append(SaveCache(tuple(state.all_records)))
        if background:
            state.reveal_count = len(state.visible_records)
        else:
            state.reveal_count = 0
            effects.extend(self._schedule_tick())
        return effects

    def fetch_failed(self, message: str) -> list[Effect]:
        state = self.state
        if state.finished:
            return []
        self._fetching = False
        state.error = message
        state.lifecycle = Lifecycle.FAILED
        logger.warning("Fetch failed: %s", message)
        return []

    # -- Timers --

    def tick(self) -> list[Effect]:
        """Advance the reveal animation by one step."""
        state = self.state
        self._tick_scheduled = False
        if state.finished or not state.revealing:
            return []
        state.reveal_count = min(state.reveal_count + REVEAL_STEP, len(state.visible_records))
        return self._schedule_tick()

    def spinner_tick(self) -> list[Effect]:
        state = self.state
        self._spinner_scheduled = False
        if state.finished or state.lifecycle not in LOADING:
            return []
        state.spinner_frame = (state.spinner_frame + 1) % len(SPINNER_FRAMES)
        return self._schedule_spinner()

    def resize(self, width: int, height: int) -> None:
        self.state.width = width
        self.state.height = height

    # -- Input --

    def handle_key(self, key: str, character: str | None = None) -> list[Effect]:
        """Process one key press.

        ``key`` is the key name (``"up"``, ``"enter"``, ``"j"``...) and
        ``character`` the printable character it produced, if any.
        """
        state = self.state
        if state.finished:
            return []
        if key == "ctrl+c":
            return self._quit()
        if state.input_mode is InputMode.BROWSING and key in ("q", "escape"):
            return self._quit()
        # A key press during the reveal animation only finishes it
        if state.revealing:
            state.reveal_count = len(state.visible_records)
            return []
        if state.input_mode is InputMode.FILTERING:
            return self._handle_filter_key(key, character)
        return self._handle_browse_key(key)

    def _handle_browse_key(self, key: str) -> list[Effect]:
        state = self.state
        count = len(state.visible_records)
        if key in ("up", "k"):
            state.cursor = max(0, state.cursor - 1)
        elif key in ("down", "j"):
            state.cursor = max(0, min(count - 1, state.cursor + 1))
        elif key in ("g", "home"):
            state.cursor = 0
        elif key in ("G", "shift+g", "end"):
            state.cursor = max(0, count - 1)
        elif key in ("slash", "/"):
            state.input_mode = InputMode.FILTERING
        elif key == "enter":
            pr = state.current
            if pr is not None:
                state.selection = pr
                return self._quit()
        elif key == "o":
            pr = state.current
            if pr is not None:
                return [OpenInBrowser(pr)]
        elif key == "r":
            return self.refresh(manual=True)
        return []

    def _handle_filter_key(self, key: str, character: str | None) -> list[Effect]:
        state = self.state
        if key == "escape":
            state.input_mode = InputMode.BROWSING
            state.filter_query = ""
            self._apply_filter()
        elif key == "enter":
            state.input_mode = InputMode.BROWSING
        elif key in ("backspace", "ctrl+h"):
            if state.filter_query:
                state.filter_query = state.filter_query[:-1]
                self._apply_filter()
        elif character and character.isprintable():
            state.filter_query += character
            self._apply_filter()
        return []

    # -- Helpers --

    def _quit(self) -> list[Effect]:
        self.state.finished = True
        self._fetching = False
        return [Exit(self.state.selection)]

    def _dispatch_fetch(self) -> list[Effect]:
        self._fetching = True
        return [Fetch(), *self._schedule_spinner()]

    def _schedule_tick(self) -> list[Effect]:
        if self._tick_scheduled or not self.state.revealing:
            return []
        self._tick_scheduled = True
        return [ScheduleTick()]

    def _schedule_spinner(self) -> list[Effect]:
        if self._spinner_scheduled:
            return []
        self._spinner_scheduled = True
        return [ScheduleSpinner()]

    def _apply_filter(self, keep: PullRequest | None = None) -> None:
        """Recompute the visible list from all_records and filter_query.

        The cursor follows ``keep`` (by PR identity) when it is still visible,
        is clamped when given but gone, and resets to the top otherwise.
        """
        state = self.state
        finished_revealing = not state.revealing
        state.visible_records = filter_pull_requests(state.all_records, state.filter_query)
        count = len(state.visible_records)

        if keep is None:
            state.cursor = 0
        else:
            keys = [pr.key for pr in state.visible_records]
            if keep.key in keys:
                state.cursor = keys.index(keep.key)
            else:
                state.cursor = max(0, min(state.cursor, count - 1))

        if finished_revealing:
            state.reveal_count = count
        else:
            state.reveal_count = min(state.reveal_count, count)
