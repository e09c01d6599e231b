"""
Expression Event Reducer - Run-length encodes the classification stream.

Consecutive identical labels are folded into one pending run. The run is
emitted as an ExpressionEvent when a different label arrives or when the
pipeline stops. Empty classifications neither extend nor break a run.
"""

import logging
import time
from collections.abc import Callable

from ..models.events import ExpressionEvent, PendingExpression

logger = logging.getLogger(__name__)


class ExpressionReducer:
    """
    Streaming run-length encoder over expression labels.

    Holds at most one PendingExpression; memory does not grow with the stream.
    """

    def __init__(
        self,
        emit: Callable[[ExpressionEvent], None],
        interval_provider: Callable[[], int],
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            emit: Receives every finished run
            interval_provider: Returns the current detection interval (ms, or -1)
            clock: Seconds since the epoch
        """
        self._emit = emit
        self._interval_provider = interval_provider
        self._clock = clock
        self._pending: PendingExpression | None = None

    @property
    def pending(self) -> PendingExpression | None:
        return self._pending

    def observe(self, value: str | None) -> ExpressionEvent | None:
        """
        Fold one classification into the current run.

        Args:
            value: Label for this frame; empty or None means no classification

        Returns:
            The event emitted because the previous run ended, if any
        """
        if not value:
            return None

        if self._pending is not None and value == self._pending.label:
            self._pending.repeat_count += 1
            return None

        event = self._finalize()
        self._pending = PendingExpression(
            label=value,
            first_observed_at_ms=int(self._clock() * 1000),
        )
        return event

    def flush(self) -> ExpressionEvent | None:
        """Emit the run in progress (if any) and clear it."""
        event = self._finalize()
        self._pending = None
        return event

    def _finalize(self) -> ExpressionEvent | None:
        if self._pending is None:
            return None

        event = ExpressionEvent.from_pending(self._pending, self._interval_provider())
        logger.debug(f"Expression '{event.label}' lasted {event.duration} {event.unit}")
        self._emit(event)
        return event
