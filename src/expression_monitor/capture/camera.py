"""
OpenCV camera source.

Implements the capture protocols on top of cv2.VideoCapture so the pipeline
can run against a local webcam or a network stream.
"""

import logging
import threading
import time

import cv2
import numpy as np

from ..utils.constants import CAMERA_RECONNECT_DELAY, MAX_CAMERA_RECONNECT_ATTEMPTS

logger = logging.getLogger(__name__)


class FrameGrabError(RuntimeError):
    """Raised when a frame cannot be read from the camera."""


def initialize_camera(
    camera_url: str | int,
    max_attempts: int = MAX_CAMERA_RECONNECT_ATTEMPTS,
    delay: float = CAMERA_RECONNECT_DELAY,
) -> cv2.VideoCapture | None:
    """
    Open a camera with retry logic.

    Args:
        camera_url: Camera URL, device path or device index
        max_attempts: Retries after the first attempt
        delay: Seconds between attempts

    Returns:
        Opened VideoCapture, or None if the camera cannot be opened
    """
    for attempt in range(max_attempts + 1):
        logger.info(f"Connecting to camera: {camera_url} (attempt {attempt + 1})")
        cap = cv2.VideoCapture(camera_url)

        if cap.isOpened():
            logger.info("Camera connected successfully")
            return cap

        cap.release()
        if attempt < max_attempts:
            logger.warning(f"Failed to connect, retrying in {delay}s...")
            time.sleep(delay)

    logger.error(f"Failed to connect to camera after {max_attempts + 1} attempts")
    return None


class CameraDevice:
    """Video track backed by an opened VideoCapture."""

    def __init__(self, capture: cv2.VideoCapture):
        self._capture = capture
        self._lock = threading.Lock()

    def read(self) -> np.ndarray:
        with self._lock:
            ok, frame = self._capture.read()
        if not ok:
            raise FrameGrabError("Failed to read frame from camera")
        return frame

    def release(self) -> None:
        with self._lock:
            self._capture.release()


class CameraStream:
    """Stream wrapper exposing the device as its only video track."""

    def __init__(self, device: CameraDevice):
        self._device = device

    def get_video_tracks(self) -> list[CameraDevice]:
        return [self._device]


class CameraTrack:
    """Local track for one camera URL. Opens the camera on first use."""

    def __init__(self, camera_url: str | int):
        self.camera_url = camera_url
        self._device: CameraDevice | None = None

    def get_original_stream(self) -> CameraStream | None:
        if self._device is None:
            capture = initialize_camera(self.camera_url)
            if capture is None:
                return None
            self._device = CameraDevice(capture)
        return CameraStream(self._device)

    def close(self) -> None:
        if self._device is not None:
            self._device.release()
            self._device = None


class CameraSource:
    """VideoSource for a single camera."""

    def __init__(self, camera_url: str | int):
        self._track = CameraTrack(camera_url)

    def get_active_local_video_track(self) -> CameraTrack | None:
        return self._track

    def close(self) -> None:
        self._track.close()


class FrameCapture:
    """Capture handle bound to one CameraDevice."""

    def __init__(self, device: CameraDevice):
        self._device = device

    def grab_frame(self) -> np.ndarray:
        return self._device.read()
