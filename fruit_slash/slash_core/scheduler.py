"""
Scheduling
==========

Host-facing frame scheduling and session-owned deferred actions.

The game never owns a global timer. A host provides a FrameScheduler that
calls back once per rendered frame (like an animation-frame request), and
the session keeps its countdown and combo timeouts in a TimerQueue that is
advanced explicitly with the current time.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Dict, List, Optional, Protocol, Tuple


FrameCallback = Callable[[float], None]


class FrameScheduler(Protocol):
    """One-shot per-frame callbacks, re-requested every frame."""

    def request_frame(self, callback: FrameCallback) -> int:
        """Call `callback(timestamp_ms)` on the next frame. Returns a handle."""
        ...

    def cancel_frame(self, handle: int) -> None:
        """Cancel a pending request. Unknown handles are ignored."""
        ...


class ManualFrameScheduler:
    """
    FrameScheduler driven by explicit run_frame() calls.

    Used by tests and by hosts with their own main loop (the pygame shell).
    """

    def __init__(self) -> None:
        self._pending: Dict[int, FrameCallback] = {}
        self._handles = itertools.count(1)

    @property
    def pending_count(self) -> int:
        """Number of callbacks waiting for the next frame."""
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run_frame(self, timestamp_ms: float) -> int:
        """
        Run the callbacks that were pending when the frame started.

        Callbacks requested during the frame wait for the next one. If a
        callback raises, the callbacks after it stay pending, ahead of any
        requested during the frame, and the exception propagates.

        Returns:
            Number of callbacks invoked.
        """
        batch = list(self._pending.items())
        self._pending.clear()
        ran = 0
        try:
            for handle, callback in batch:
                ran += 1
                callback(timestamp_ms)
        finally:
            if ran < len(batch):
                requested = self._pending
                self._pending = dict(batch[ran:])
                self._pending.update(requested)
        return ran


class DeferredAction:
    """Handle to a scheduled callback. Cancelled actions never fire."""

    def __init__(
        self,
        due_ms: float,
        callback: Callable[[], None],
        interval_ms: Optional[float] = None
    ):
        self.due_ms = due_ms
        self.interval_ms = interval_ms
        self._callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None

    def cancel(self) -> None:
        self._cancelled = True

    def fire(self) -> None:
        self._callback()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else f"due={self.due_ms}"
        return f"DeferredAction({state})"


class TimerQueue:
    """
    Timeouts and intervals keyed on caller-supplied time.

    Actions fire in due-time order (ties in scheduling order) when advance()
    reaches their due time. An interval that falls several periods behind
    fires once per elapsed period.
    """

    def __init__(self, now_ms: float = 0.0) -> None:
        self._now = now_ms
        self._heap: List[Tuple[float, int, DeferredAction]] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> float:
        """Latest time the queue has advanced to."""
        return self._now

    @property
    def pending_count(self) -> int:
        """Number of scheduled, non-cancelled actions."""
        return sum(1 for _, _, action in self._heap if not action.cancelled)

    def _push(self, action: DeferredAction) -> DeferredAction:
        heapq.heappush(self._heap, (action.due_ms, next(self._seq), action))
        return action

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> DeferredAction:
        """Schedule `callback` once, `delay_ms` after the current time."""
        return self._push(DeferredAction(self._now + delay_ms, callback))

    def call_every(self, interval_ms: float, callback: Callable[[], None]) -> DeferredAction:
        """Schedule `callback` every `interval_ms`, first after one interval."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        return self._push(DeferredAction(self._now + interval_ms, callback, interval_ms))

    def advance(self, now_ms: float) -> int:
        """
        Move time forward and fire every action due by `now_ms`.

        Time never moves backwards: an earlier `now_ms` fires nothing.

        Returns:
            Number of actions fired.
        """
        if now_ms < self._now:
            return 0

        fired = 0
        while self._heap and self._heap[0][0] <= now_ms:
            due, _, action = heapq.heappop(self._heap)
            if action.cancelled:
                continue
            # Callbacks observe the time they were due at
            self._now = due
            if action.repeating:
                action.due_ms = due + action.interval_ms
                self._push(action)
            action.fire()
            fired += 1

        self._now = now_ms
        return fired

    def cancel_all(self) -> None:
        """Cancel and drop every pending action."""
        for _, _, action in self._heap:
            action.cancel()
        self._heap.clear()
