"""
Pipeline state owned by the lifecycle controller.
"""

from dataclasses import dataclass
from enum import Enum

from ..utils.constants import (
    CPU_TIME_INTERVAL,
    UNKNOWN_DETECTION_INTERVAL,
    WEBGL_TIME_INTERVAL,
)
from .capture import CaptureHandle

DEFAULT_BACKEND_INTERVALS = {
    "webgl": WEBGL_TIME_INTERVAL,
    "cpu": CPU_TIME_INTERVAL,
}


class Phase(Enum):
    """Lifecycle phase of the pipeline."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass
class PipelineState:
    """
    Mutable state of one pipeline.

    Invariant: phase RUNNING implies capture_handle is set (the controller
    also guarantees a live worker channel); stop() returns to IDLE with no
    capture handle.
    """

    phase: Phase = Phase.IDLE
    capture_handle: CaptureHandle | None = None
    detection_interval_ms: int = UNKNOWN_DETECTION_INTERVAL

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING

    def replace_capture(self, handle: CaptureHandle | None) -> None:
        """Drop the current capture handle, then install the new one."""
        self.capture_handle = None
        self.capture_handle = handle

    def reset(self) -> None:
        """Return to IDLE. The detection interval belongs to the worker and is kept."""
        self.capture_handle = None
        self.phase = Phase.IDLE


def resolve_detection_interval(
    backend: str | None, intervals: dict[str, int] | None = None
) -> int:
    """
    Map a compute backend to its detection interval.

    Args:
        backend: Backend reported by the worker ("webgl", "cpu", ...)
        intervals: Backend -> interval mapping (defaults to webgl/cpu constants)

    Returns:
        Interval in milliseconds, or -1 for an unknown or missing backend
    """
    mapping = DEFAULT_BACKEND_INTERVALS if intervals is None else intervals
    if not backend:
        return UNKNOWN_DETECTION_INTERVAL
    return mapping.get(backend, UNKNOWN_DETECTION_INTERVAL)
