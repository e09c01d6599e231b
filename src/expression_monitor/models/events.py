"""
Expression event models.

PendingExpression is the run currently being counted; ExpressionEvent is a
finished run, ready for the delivery buffer.
"""

from dataclasses import dataclass
from typing import Any

from ..utils.constants import UNKNOWN_DETECTION_INTERVAL

UNIT_SECONDS = "seconds"
UNIT_FRAMES = "frames"


@dataclass
class PendingExpression:
    """Run of identical classifications that has not ended yet."""

    label: str
    first_observed_at_ms: int
    repeat_count: int = 0

    @property
    def occurrences(self) -> int:
        return self.repeat_count + 1


@dataclass(frozen=True)
class ExpressionEvent:
    """
    A finished run of one expression.

    Attributes:
        label: Expression label reported by the classifier
        duration: Run length, in seconds when the detection interval was
            known at emission time, otherwise in frames
        timestamp_ms: Epoch milliseconds when the run started
        unit: "seconds" or "frames"
    """

    label: str
    duration: float
    timestamp_ms: int
    unit: str = UNIT_SECONDS

    @classmethod
    def from_pending(
        cls, pending: PendingExpression, detection_interval_ms: int
    ) -> "ExpressionEvent":
        """Finalize a pending run using the detection interval known right now."""
        duration, unit = compute_duration(pending.occurrences, detection_interval_ms)
        return cls(
            label=pending.label,
            duration=duration,
            timestamp_ms=pending.first_observed_at_ms,
            unit=unit,
        )

    def to_dict(self) -> dict[str, Any]:
        """Webhook representation."""
        return {
            "emotion": self.label,
            "duration": self.duration,
            "unit": self.unit,
            "timestamp": self.timestamp_ms,
        }


def compute_duration(occurrences: int, detection_interval_ms: int) -> tuple[float, str]:
    """
    Convert a frame count to a duration.

    Args:
        occurrences: Number of frames in the run
        detection_interval_ms: Milliseconds between classifications, or -1

    Returns:
        (duration, unit) - seconds if the interval is known, else raw frames
    """
    if detection_interval_ms == UNKNOWN_DETECTION_INTERVAL:
        return occurrences, UNIT_FRAMES
    return occurrences * (detection_interval_ms / 1000), UNIT_SECONDS
