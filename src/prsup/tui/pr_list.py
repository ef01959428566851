from __future__ import annotations

from typing import Any

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from prsup.render import render
from prsup.session import Session


class PullRequestList(Widget, can_focus=True):
    """Draws the session's current state and forwards every key to the app."""

    DEFAULT_CSS = """
    PullRequestList {
        width: 100%;
        height: 1fr;
    }
    """

    class KeyPressed(Message):
        """A key the session should interpret (navigation, filter text, quit)."""

        def __init__(self, key: str, character: str | None) -> None:
            super().__init__()
            self.key = key
            self.character = character

    def __init__(self, session: Session, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.session = session

    def on_key(self, event: events.Key) -> None:
        # The session decides what every key means, including in filter mode,
        # so keep it away from app and screen bindings.
        event.stop()
        event.prevent_default()
        self.post_message(self.KeyPressed(key=event.key, character=event.character))

    def on_resize(self, event: events.Resize) -> None:
        self.session.resize(event.size.width, event.size.height)

    def render(self) -> Text:
        return Text("\n").join(render(self.session.state))
