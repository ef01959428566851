from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message

from prsup.cache import save_cache
from prsup.github import FetchError, open_in_browser
from prsup.models import PullRequest
from prsup.session import (
    Effect,
    Exit,
    Fetch,
    OpenInBrowser,
    SaveCache,
    ScheduleSpinner,
    ScheduleTick,
    Session,
)
from prsup.tui.pr_list import PullRequestList

logger = logging.getLogger(__name__)

REVEAL_INTERVAL = 0.015
SPINNER_INTERVAL = 0.08


class FetchCompleted(Message):
    """Result of one background fetch, posted from the worker thread."""

    def __init__(
        self, prs: Sequence[PullRequest] = (), error: str | None = None
    ) -> None:
        super().__init__()
        self.prs = prs
        self.error = error


class PrSupApp(App[PullRequest | None]):
    """Full-screen list of open PRs. Returns the PR chosen with Enter, if any."""

    TITLE = "prsup"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit_session", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        session: Session,
        fetcher: Callable[[], Sequence[PullRequest]],
        refresh_interval: float = 0,
        opener: Callable[[PullRequest], None] = open_in_browser,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.session = session
        self._fetcher = fetcher
        self._refresh_interval = refresh_interval
        self._opener = opener

    def compose(self) -> ComposeResult:
        yield PullRequestList(self.session, id="prs")

    def on_mount(self) -> None:
        self.query_one("#prs", PullRequestList).focus()
        self._run_effects(self.session.start())
        if self._refresh_interval > 0:
            self.set_interval(self._refresh_interval, self._periodic_refresh)

    # -- Events into the session --

    def on_pull_request_list_key_pressed(self, event: PullRequestList.KeyPressed) -> None:
        self._run_effects(self.session.handle_key(event.key, event.character))

    def on_fetch_completed(self, event: FetchCompleted) -> None:
        if event.error is not None:
            effects = self.session.fetch_failed(event.error)
        else:
            effects = self.session.fetch_succeeded(event.prs)
        self._run_effects(effects)

    def action_quit_session(self) -> None:
        self._run_effects(self.session.handle_key("ctrl+c"))

    def _periodic_refresh(self) -> None:
        self._run_effects(self.session.refresh(manual=False))

    def _on_reveal_tick(self) -> None:
        self._run_effects(self.session.tick())

    def _on_spinner_tick(self) -> None:
        self._run_effects(self.session.spinner_tick())

    # -- Effects out of the session --

    def _run_effects(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, Fetch):
                self.run_worker(self._fetch, thread=True, group="fetch")
            elif isinstance(effect, ScheduleTick):
                self.set_timer(REVEAL_INTERVAL, self._on_reveal_tick)
            elif isinstance(effect, ScheduleSpinner):
                self.set_timer(SPINNER_INTERVAL, self._on_spinner_tick)
            elif isinstance(effect, SaveCache):
                save_cache(list(effect.prs))
            elif isinstance(effect, OpenInBrowser):
                self.run_worker(lambda pr=effect.pr: self._opener(pr), thread=True, group="open")
            elif isinstance(effect, Exit):
                logger.debug(
                    "Session finished, selection=%s",
                    effect.selection.url if effect.selection else None,
                )
                self.exit(effect.selection)
                return
        self.query_one("#prs", PullRequestList).refresh()

    def _fetch(self) -> None:
        """Worker thread: run the blocking fetch and post the outcome."""
        try:
            prs = list(self._fetcher())
        except FetchError as e:
            self.post_message(FetchCompleted(error=str(e)))
            return
        except Exception as e:
            logger.exception("Unexpected error while fetching PRs")
            self.post_message(FetchCompleted(error=str(e) or type(e).__name__))
            return
        self.post_message(FetchCompleted(prs=prs))
