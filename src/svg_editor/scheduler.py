"""Debounced synchronization between the rendered graphic and its text.

Two independent channels coalesce bursts of changes:

- graphic -> text: transform edits re-serialize the editable root into the
  document buffer after a short quiet period.
- text -> graphic: text edits re-parse the buffer and replace the rendered
  layer after a longer typing pause.

Each channel owns one pending timer handle. A new trigger cancels the
pending handle and schedules a fresh one (debounce, not throttle), so a
continuous stream of triggers postpones the callback indefinitely.
"""

import asyncio
import heapq
import itertools
import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

GRAPHIC_TO_TEXT_DELAY = 0.150  # seconds
TEXT_TO_GRAPHIC_DELAY = 0.250  # seconds


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class TimerLoop(Protocol):
    """The part of an asyncio event loop the scheduler needs."""

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle: ...


class Debouncer:
    """Run a callback once a trigger burst has been quiet for ``delay`` seconds."""

    def __init__(
        self,
        delay: float,
        callback: Callable[[], Any],
        loop: TimerLoop | None = None,
        name: str = "debounce",
    ):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self.name = name
        self._callback = callback
        self._loop = loop
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Check if a callback is scheduled and not yet run."""
        return self._handle is not None and not self._handle.cancelled()

    def trigger(self) -> None:
        """Restart the quiet period, cancelling any pending callback."""
        self.cancel()
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)
        logger.debug("%s: scheduled in %.3fs", self.name, self.delay)

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> bool:
        """Run the pending callback now.

        Returns:
            True if a callback was pending and has been run.
        """
        if not self.pending:
            return False
        self.cancel()
        self._fire()
        return True

    def _fire(self) -> None:
        self._handle = None
        logger.debug("%s: firing", self.name)
        self._callback()


class SyncScheduler:
    """Owns the graphic -> text and text -> graphic debounce channels."""

    def __init__(
        self,
        serialize: Callable[[], Any],
        render: Callable[[], Any],
        graphic_delay: float = GRAPHIC_TO_TEXT_DELAY,
        text_delay: float = TEXT_TO_GRAPHIC_DELAY,
        loop: TimerLoop | None = None,
    ):
        self.graphic_channel = Debouncer(
            graphic_delay, serialize, loop, name="graphic->text"
        )
        self.text_channel = Debouncer(text_delay, render, loop, name="text->graphic")

    def notify_graphic_changed(self) -> None:
        """A transform edit was committed; re-serialize after the quiet period."""
        self.graphic_channel.trigger()

    def notify_text_changed(self) -> None:
        """The text buffer was edited; re-render after the typing pause."""
        self.text_channel.trigger()

    @property
    def pending(self) -> bool:
        """Check if either channel has a callback scheduled."""
        return self.graphic_channel.pending or self.text_channel.pending

    def cancel_all(self) -> None:
        """Drop pending callbacks on both channels."""
        self.graphic_channel.cancel()
        self.text_channel.cancel()


class VirtualTimer:
    """Timer handle returned by VirtualLoop.call_later."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self._when = when
        self._callback = callback
        self._args = args
        self._cancelled = False

    def when(self) -> float:
        return self._when

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        self._callback(*self._args)


class VirtualLoop:
    """Single-threaded loop with a manually advanced clock.

    Implements the ``call_later`` subset of the asyncio loop API so
    scripted sessions can replay timed input deterministically.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, VirtualTimer]] = []
        self._counter = itertools.count()

    def time(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> VirtualTimer:
        """Schedule callback to run ``delay`` seconds from now."""
        timer = VirtualTimer(self._now + max(delay, 0.0), callback, args)
        heapq.heappush(self._queue, (timer.when(), next(self._counter), timer))
        return timer

    @property
    def pending_count(self) -> int:
        """Number of scheduled timers not yet run or cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every timer that comes due.

        Timers scheduled by callbacks run in the same call if they fall
        inside the window.

        Returns:
            Number of callbacks run.
        """
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards: {seconds}")
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._now = when
            timer._run()
            ran += 1
        self._now = target
        return ran

    def run_until_idle(self, limit: float = 3600.0) -> int:
        """Advance until no timers remain, at most ``limit`` seconds."""
        ran = 0
        deadline = self._now + limit
        while self.pending_count and self._now < deadline:
            next_when = min(
                when for when, _, timer in self._queue if not timer.cancelled()
            )
            ran += self.advance(max(next_when - self._now, 0.0))
        return ran
