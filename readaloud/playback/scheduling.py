"""Deferred-call schedulers for the inter-chunk settling delay.

Responsibilities:
- Provide a single hook for delaying the next utterance after a chunk ends.
- Keep timing policy independent from sequencer state transitions.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Protocol


class ScheduledCall(Protocol):
    """Cancellable reference to a deferred callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""


class Scheduler(Protocol):
    """Protocol for deferring a callback on the sequencer's event thread."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run `callback` once after `delay_seconds`."""


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        """Bind the scheduler to a loop."""

        self._loop = loop

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        """Defer via `loop.call_later`."""

        return self._loop.call_later(max(0.0, delay_seconds), callback)


@dataclass(slots=True)
class QueuedCall:
    """Callback waiting in a scheduler queue."""

    delay_seconds: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        """Mark the queued callback as cancelled."""

        self.cancelled = True


class ImmediateScheduler:
    """Scheduler that runs callbacks on the calling thread and ignores the delay.

    Callbacks scheduled while another one is running are queued and drained in
    order by the outermost call, so engines that report completion from inside
    `speak` advance through any number of chunks without growing the stack.
    Hosts that need the settling delay pass `AsyncioScheduler` instead.
    """

    def __init__(self) -> None:
        """Initialize an empty run queue."""

        self._queue: deque[QueuedCall] = deque()
        self._draining = False

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run the callback now, or after the callback currently running."""

        call = QueuedCall(delay_seconds=delay_seconds, callback=callback)
        self._queue.append(call)
        if not self._draining:
            self._drain()
        return call

    def _drain(self) -> None:
        self._draining = True
        try:
            while self._queue:
                call = self._queue.popleft()
                if call.cancelled:
                    continue
                call.cancelled = True
                call.callback()
        finally:
            self._draining = False
            self._queue.clear()


@dataclass(slots=True)
class ManualScheduler:
    """Scheduler that queues callbacks until the host pumps them."""

    calls: list[QueuedCall] = field(default_factory=list)

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        """Queue the callback."""

        call = QueuedCall(delay_seconds=delay_seconds, callback=callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> int:
        """Return how many queued callbacks are still live."""

        return sum(1 for call in self.calls if not call.cancelled)

    def run_pending(self) -> int:
        """Run live queued callbacks in order and return how many ran.

        Callbacks queued while running are left for the next pump.
        """

        queued, self.calls = self.calls, []
        ran = 0
        for call in queued:
            if call.cancelled:
                continue
            call.cancelled = True
            call.callback()
            ran += 1
        return ran
