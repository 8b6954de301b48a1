"""
progress.py — Progress reporting and cooperative cancellation.

ProgressReporter is a pure observer: generators call emit() at fixed
milestones, and the reporter records the event and forwards it to any
subscribed callbacks. Nothing in the layout path ever reads it back, so a
caller that ignores progress gets an identical document.

CancellationToken is checked only between sections, never mid-block.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterator

from resilience_report.errors import GenerationCancelled

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class ProgressEvent:
    percent: int
    message: str


class ProgressReporter:
    """Ordered record of progress events with optional subscribers.

    Args:
        callback: Optional (percent, message) callable invoked synchronously
            for every event.
    """

    def __init__(self, callback: ProgressCallback | None = None):
        self._callbacks: list[ProgressCallback] = []
        self._events: list[ProgressEvent] = []
        if callback is not None:
            self.subscribe(callback)

    def subscribe(self, callback: ProgressCallback) -> None:
        self._callbacks.append(callback)

    def emit(self, percent: float, message: str) -> ProgressEvent:
        """Record an event (clamped to 0-100) and notify subscribers."""
        event = ProgressEvent(max(0, min(100, int(round(percent)))), message)
        self._events.append(event)
        logger.debug("Progress %3d%% %s", event.percent, event.message)
        for callback in self._callbacks:
            callback(event.percent, event.message)
        return event

    @property
    def events(self) -> tuple[ProgressEvent, ...]:
        return tuple(self._events)

    def __iter__(self) -> Iterator[ProgressEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self._events)


class CancellationToken:
    """Thread-safe flag a host sets to stop a generation between sections."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        if self._event.is_set():
            logger.info("Generation cancelled before '%s'", stage)
            raise GenerationCancelled(stage)
