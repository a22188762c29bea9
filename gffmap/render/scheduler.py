"""
Trailing-edge redraw throttling.

At most one redraw is pending at any time. A request that arrives within
the minimum interval of the last redraw is deferred; later requests replace
the deferred payload but keep its firing time, so the last input of a burst
is always drawn and intermediate ones are dropped.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional


def monotonic_ms():
    return time.perf_counter() * 1000.0


@dataclass
class PendingRedraw:
    payload: Any
    due: float


class RedrawThrottle:
    """Bound how often redraw work runs under continuous input."""

    def __init__(self, interval_ms: float, clock: Optional[Callable[[], float]] = None):
        self.interval_ms = interval_ms
        self.clock = clock or monotonic_ms
        self.last_applied = float('-inf')
        self.pending: Optional[PendingRedraw] = None

    @property
    def next_due(self) -> Optional[float]:
        return self.pending.due if self.pending else None

    def mark_applied(self, now):
        """Record a redraw that ran at now, including ones run outside the throttle."""
        self.last_applied = max(self.last_applied, now)

    def submit(self, payload, now=None):
        """
        Offer a new redraw payload.

        Returns:
            The payload if the redraw should run now, otherwise None (the
            payload is kept as the pending redraw)
        """
        now = self.clock() if now is None else now

        if now - self.last_applied >= self.interval_ms:
            self.pending = None
            self.mark_applied(now)
            return payload

        if self.pending is None:
            self.pending = PendingRedraw(payload, now + self.interval_ms)
        else:
            self.pending.payload = payload
        return None

    def poll(self, now=None):
        """Return the pending payload once it is due, otherwise None."""
        if self.pending is None:
            return None
        now = self.clock() if now is None else now
        if now < self.pending.due:
            return None

        payload = self.pending.payload
        self.pending = None
        self.mark_applied(now)
        return payload

    def cancel(self):
        self.pending = None
