from __future__ import annotations

import asyncio
import logging
from typing import Callable

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import Window
from prompt_toolkit.layout.controls import FormattedTextControl

from staged_review.app.session import (
    SPINNER_INTERVAL_SECONDS,
    KeyPressed,
    ReviewLoaded,
    ReviewSession,
    SessionMessage,
    SpinnerTick,
    WindowResized,
)
from staged_review.domains.review.models import ReviewOutcome
from staged_review.infra.queue.background import BackgroundTask


logger = logging.getLogger(__name__)

# prompt_toolkit key name -> session key name
_KEY_NAMES = {
    "q": "q",
    "c-c": "ctrl+c",
    "up": "up",
    "k": "k",
    "down": "down",
    "j": "j",
}


class ReviewApp:
    """Full-screen terminal front end for a ReviewSession.

    Runs the review once on a background thread; its outcome comes back to the
    UI loop as a single ReviewLoaded message.
    """

    def __init__(
        self,
        *,
        review: Callable[[], ReviewOutcome],
        session: ReviewSession | None = None,
    ) -> None:
        self._session = session or ReviewSession()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task = BackgroundTask[ReviewOutcome](
            name="review",
            target=review,
            on_done=self._deliver_outcome,
            on_error=self._deliver_error,
        )
        self._application = Application(
            layout=Layout(
                Window(
                    content=FormattedTextControl(self._render, focusable=True, show_cursor=False),
                    wrap_lines=False,
                    always_hide_cursor=True,
                )
            ),
            key_bindings=self._key_bindings(),
            full_screen=True,
            mouse_support=False,
        )

    @property
    def session(self) -> ReviewSession:
        return self._session

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        for pt_key, session_key in _KEY_NAMES.items():

            @kb.add(pt_key)
            def _(event: KeyPressEvent, session_key: str = session_key) -> None:
                self.dispatch(KeyPressed(session_key))

        return kb

    def _render(self) -> ANSI:
        size = self._application.output.get_size()
        if (size.columns, size.rows) != (self._session.width, self._session.height):
            self._session.update(WindowResized(width=size.columns, height=size.rows))
        return ANSI(self._session.view())

    def dispatch(self, message: SessionMessage) -> None:
        self._session.update(message)

        if self._session.quitting:
            if self._application.is_running and not self._application.future.done():
                self._application.exit()
            return

        self._application.invalidate()

    def _post(self, message: SessionMessage) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("UI loop is gone, dropping %s", type(message).__name__)
            return
        try:
            loop.call_soon_threadsafe(self.dispatch, message)
        except RuntimeError:
            logger.debug("UI loop closed before %s was delivered", type(message).__name__)

    def _deliver_outcome(self, outcome: ReviewOutcome) -> None:
        self._post(ReviewLoaded(files=outcome.files, reviews=outcome.reviews, error=outcome.error))

    def _deliver_error(self, error: BaseException) -> None:
        self._post(ReviewLoaded(error=error))

    async def _spin(self) -> None:
        while self._session.loading and not self._session.quitting:
            await asyncio.sleep(SPINNER_INTERVAL_SECONDS)
            self.dispatch(SpinnerTick())

    def _pre_run(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._application.create_background_task(self._spin())
        if not self._task.started:
            self._task.start()

    def run(self) -> None:
        self._application.run(pre_run=self._pre_run)
        if not self._task.wait(timeout=0):
            logger.info("Quit before the review finished; abandoning the background run")
