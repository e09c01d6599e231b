"""
Track Binder - Binds a frame capture handle to the active local video track.
"""

import logging
from typing import Any

from ..models.capture import CaptureFactory, CaptureHandle, VideoSource

logger = logging.getLogger(__name__)


class TrackBinder:
    """
    Produces capture handles for the pipeline.

    A new handle is created on every bind; the caller drops the previous one.
    Absence of a track, stream or video track is not an error - bind() simply
    returns None and the caller treats that as "cannot proceed".
    """

    def __init__(self, source: VideoSource, capture_factory: CaptureFactory):
        self._source = source
        self._capture_factory = capture_factory

    def bind(self, track: Any = None) -> CaptureHandle | None:
        """
        Create a capture handle for a track.

        Args:
            track: Track to bind; defaults to the source's active local track

        Returns:
            New capture handle, or None if no video track is available
        """
        if track is None:
            track = self._source.get_active_local_video_track()
        if track is None:
            logger.debug("No local video track")
            return None

        stream = track.get_original_stream()
        if stream is None:
            logger.debug("Local video track has no stream")
            return None

        video_tracks = stream.get_video_tracks()
        if not video_tracks:
            logger.debug("Stream has no video tracks")
            return None

        return self._capture_factory(video_tracks[0])
