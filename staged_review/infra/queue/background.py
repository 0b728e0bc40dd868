from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar


logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")


class BackgroundTask(Generic[TResult]):
    """Runs one callable on a daemon thread and reports back exactly once.

    `on_done` receives the return value; if the callable raises, `on_error`
    receives the exception instead. Both callbacks run on the worker thread, so
    callers that own an event loop should marshal them onto it.
    """

    def __init__(
        self,
        *,
        name: str,
        target: Callable[[], TResult],
        on_done: Callable[[TResult], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        self._name = name
        self._target = target
        self._on_done = on_done
        self._on_error = on_error
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()

    @property
    def started(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"background task '{self._name}' was already started")

        self._thread = threading.Thread(
            target=self._run,
            name=f"{self._name}-worker",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Started background task '%s'", self._name)

    def wait(self, timeout: float | None = None) -> bool:
        return self._finished.wait(timeout)

    def _run(self) -> None:
        try:
            try:
                result = self._target()
            except Exception as exc:  # noqa: BLE001 - reported through on_error
                logger.exception("Unexpected error in background task '%s'", self._name)
                self._on_error(exc)
                return

            self._on_done(result)
        finally:
            self._finished.set()
