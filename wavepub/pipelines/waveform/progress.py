"""Progress channel between the renderer worker and its subscribers."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger("wavepub.pipeline")

ProgressSink = Callable[[float], None]


class ProgressChannel:
    """Monotonic 0-100 progress stream with a cancellation hook.

    The renderer publishes from its worker thread; subscribers are called
    synchronously on that thread, in publish order. Values below the last
    published percentage are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[ProgressSink] = []
        self._latest: float | None = None
        self.cancel_event = threading.Event()

    @property
    def latest(self) -> float | None:
        return self._latest

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def subscribe(self, sink: ProgressSink) -> Callable[[], None]:
        """Register ``sink``; the returned callable unsubscribes it."""

        with self._lock:
            self._subscribers.append(sink)

        def unsubscribe() -> None:
            with self._lock:
                if sink in self._subscribers:
                    self._subscribers.remove(sink)

        return unsubscribe

    def publish(self, percent: float) -> None:
        value = max(0.0, min(100.0, float(percent)))
        with self._lock:
            if self._latest is not None and value <= self._latest:
                return
            self._latest = value
            subscribers = list(self._subscribers)
        for sink in subscribers:
            try:
                sink(value)
            except Exception:  # sinks must not break the render
                logger.exception("Progress subscriber failed")

    def cancel(self) -> None:
        self.cancel_event.set()


def log_progress(percent: float) -> None:
    """Default sink mirroring the renderer progress into the pipeline log."""

    logger.info("%.1f%% done", percent)


__all__ = ["ProgressChannel", "ProgressSink", "log_progress"]
