"""
Delivery buffer shared by the reducer (producer) and the scheduler (consumer).
"""

import threading

from ..models.events import ExpressionEvent


class DeliveryBuffer:
    """Ordered, thread-safe list of events waiting for delivery."""

    def __init__(self):
        self._events: list[ExpressionEvent] = []
        self._lock = threading.Lock()

    def append(self, event: ExpressionEvent) -> None:
        with self._lock:
            self._events.append(event)

    def snapshot(self) -> list[ExpressionEvent]:
        """Copy of the current contents, oldest first."""
        with self._lock:
            return list(self._events)

    def discard(self, count: int) -> None:
        """
        Drop the oldest `count` events.

        Used after a successful delivery of a snapshot: events appended while
        the delivery was in flight stay for the next one.
        """
        with self._lock:
            del self._events[:count]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
