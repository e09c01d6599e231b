"""
Consolidated data models for the expression monitor.

This package contains the worker message protocol, the expression event
models, the capture protocols and the pipeline state.
"""

from .capture import CaptureFactory, CaptureHandle, MediaStream, Track, VideoSource
from .events import (
    UNIT_FRAMES,
    UNIT_SECONDS,
    ExpressionEvent,
    PendingExpression,
    compute_duration,
)
from .messages import (
    BackendReport,
    ClearTimeout,
    ExpressionReport,
    HostMessage,
    SetModelsUrl,
    SubmitFrame,
    WorkerMessage,
    parse_host_message,
    parse_worker_message,
)
from .state import Phase, PipelineState, resolve_detection_interval

__all__ = [
    # Messages
    "BackendReport",
    # Capture protocols
    "CaptureFactory",
    "CaptureHandle",
    "ClearTimeout",
    # Events
    "ExpressionEvent",
    "ExpressionReport",
    "HostMessage",
    "MediaStream",
    "PendingExpression",
    # State
    "Phase",
    "PipelineState",
    "SetModelsUrl",
    "SubmitFrame",
    "Track",
    "UNIT_FRAMES",
    "UNIT_SECONDS",
    "VideoSource",
    "WorkerMessage",
    "compute_duration",
    "parse_host_message",
    "parse_worker_message",
    "resolve_detection_interval",
]
