"""
Capture Protocols - Interfaces for the video source and frame capture.

The pipeline never talks to a camera directly. It asks a VideoSource for the
active local track and hands the track's first video track to a capture
factory. Any implementation (OpenCV camera, conference SDK, test fake)
satisfying these protocols can be plugged in.
"""

from collections.abc import Callable
from typing import Any, Protocol


class CaptureHandle(Protocol):
    """Grabs frames from exactly one video track."""

    def grab_frame(self) -> Any:
        """
        Capture the current frame.

        Returns:
            Frame object (numpy array for the OpenCV implementation)

        Raises:
            Exception: If the frame cannot be captured
        """
        ...


class MediaStream(Protocol):
    """Stream carrying one or more video tracks."""

    def get_video_tracks(self) -> list[Any]:
        ...


class Track(Protocol):
    """Local video track as reported by the video source."""

    def get_original_stream(self) -> MediaStream | None:
        ...


class VideoSource(Protocol):
    """Provides the currently active local video track."""

    def get_active_local_video_track(self) -> Track | None:
        ...


CaptureFactory = Callable[[Any], CaptureHandle]
