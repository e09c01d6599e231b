"""
Frame capture: track binding and the OpenCV camera source.
"""

from .binder import TrackBinder
from .camera import (
    CameraSource,
    CameraTrack,
    FrameCapture,
    FrameGrabError,
    initialize_camera,
)

__all__ = [
    "CameraSource",
    "CameraTrack",
    "FrameCapture",
    "FrameGrabError",
    "TrackBinder",
    "initialize_camera",
]
