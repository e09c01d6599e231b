"""
Pipeline Lifecycle Controller

State machine (IDLE/RUNNING) that wires the worker channel, track binder,
reducer and delivery scheduler together.

    load_worker()  spawn the worker channel, then start()
    start()        IDLE -> RUNNING: bind capture, first frame, start scheduler
    stop()         RUNNING -> IDLE: drop capture, CLEAR_TIMEOUT, flush run,
                   stop scheduler
    rebind_track() replace the capture handle, phase unchanged
    shutdown()     stop() and terminate the worker

Public calls and worker callbacks (listener thread) are serialized by one
re-entrant lock, so handlers never interleave. Expression reports are matched
against the outstanding frame under that lock.
"""

import logging
import threading
import time
from collections import Counter
from collections.abc import Callable
from typing import Any

from ..capture.binder import TrackBinder
from ..delivery import DeliveryOutcome, EventDelivery
from ..models.events import ExpressionEvent
from ..models.messages import BackendReport, ExpressionReport, WorkerMessage
from ..models.state import (
    DEFAULT_BACKEND_INTERVALS,
    Phase,
    PipelineState,
    resolve_detection_interval,
)
from ..utils.constants import UNKNOWN_DETECTION_INTERVAL, WEBHOOK_SEND_TIME_INTERVAL
from ..worker.channel import DetectionWorkerChannel
from ..worker.classifier import ClassifierFactory
from .buffer import DeliveryBuffer
from .reducer import ExpressionReducer
from .scheduler import DeliveryScheduler

logger = logging.getLogger(__name__)


class ExpressionPipeline:
    """
    Expression detection pipeline for one session.

    Owns the PipelineState, the delivery buffer and the scheduler; the worker
    channel is created by load_worker() and lives until shutdown().
    """

    def __init__(
        self,
        binder: TrackBinder,
        delivery: EventDelivery,
        models_url: str,
        classifier: str | ClassifierFactory,
        intervals_ms: dict[str, int] | None = None,
        send_interval_seconds: float = WEBHOOK_SEND_TIME_INTERVAL / 1000,
        start_method: str | None = None,
        channel_factory: Callable[..., Any] = DetectionWorkerChannel.spawn,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            binder: Produces capture handles for the active video track
            delivery: Backend that receives buffered events
            models_url: Base URL the worker loads its model from
            classifier: Classifier factory or "module:attribute" import path
            intervals_ms: Backend -> detection interval mapping
            send_interval_seconds: Delivery tick period
            start_method: multiprocessing start method for the worker
            channel_factory: Creates the worker channel (DetectionWorkerChannel.spawn)
            clock: Seconds since the epoch, used for event timestamps
        """
        self._binder = binder
        self._models_url = models_url
        self._classifier = classifier
        self._intervals = dict(intervals_ms or DEFAULT_BACKEND_INTERVALS)
        self._start_method = start_method
        self._channel_factory = channel_factory

        self._lock = threading.RLock()
        self._channel: DetectionWorkerChannel | None = None

        self.state = PipelineState()
        self.buffer = DeliveryBuffer()
        self._totals: Counter = Counter()

        self._reducer = ExpressionReducer(
            emit=self._on_expression_event,
            interval_provider=lambda: self.state.detection_interval_ms,
            clock=clock,
        )
        self._scheduler = DeliveryScheduler(self.buffer, delivery, send_interval_seconds)

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def channel(self) -> DetectionWorkerChannel | None:
        return self._channel

    @property
    def scheduler(self) -> DeliveryScheduler:
        return self._scheduler

    @property
    def reducer(self) -> ExpressionReducer:
        return self._reducer

    # ---- lifecycle ----
    def load_worker(self) -> bool:
        """
        Spawn the detection worker (once) and start the pipeline.

        Returns:
            True if the pipeline is running afterwards
        """
        with self._lock:
            if self._channel is None:
                channel = self._channel_factory(
                    self._models_url,
                    self._classifier,
                    self._handle_worker_message,
                    intervals_ms=self._intervals,
                    start_method=self._start_method,
                )
                if channel is None:
                    logger.warning("Expression detection unavailable: no background worker")
                    return False
                self._channel = channel

            self.start()
            return self.state.running

    def start(self) -> bool:
        """
        Start detection.

        No-op if already running, if no worker is loaded, or if no local
        video track is available.

        Returns:
            True if this call moved the pipeline to RUNNING
        """
        with self._lock:
            if self.state.running:
                return False
            if self._channel is None:
                logger.debug("Cannot start: worker not loaded")
                return False

            handle = self.state.capture_handle or self._binder.bind()
            if handle is None:
                logger.debug("Cannot start: no local video track")
                return False

            self.state.replace_capture(handle)
            self.state.phase = Phase.RUNNING
            self._channel.submit_frame(handle)
            self._scheduler.start()
            logger.info("Expression detection started")
            return True

    def stop(self) -> None:
        """Stop detection; the run in progress is flushed to the buffer. Idempotent."""
        with self._lock:
            if not self.state.running:
                return

            self.state.replace_capture(None)
            if self._channel is not None:
                self._channel.clear_timeout()
            self._reducer.flush()
            self._scheduler.stop()
            self.state.reset()
            logger.info("Expression detection stopped")

    def shutdown(self) -> None:
        """Stop detection and terminate the worker."""
        self.stop()

        with self._lock:
            channel = self._channel
            self._channel = None
            self.state.detection_interval_ms = UNKNOWN_DETECTION_INTERVAL

        # Outside the lock: the listener thread may be waiting for it
        if channel is not None:
            channel.terminate()

        self._log_summary()

    # ---- track changes ----
    def rebind_track(self, track: Any = None) -> bool:
        """
        Bind a new capture handle without changing the phase.

        While IDLE the handle is kept for the next start().

        Args:
            track: New track; defaults to the source's active local track

        Returns:
            True if a new handle was installed
        """
        with self._lock:
            handle = self._binder.bind(track)
            if handle is None:
                logger.debug("Rebind skipped: no video track")
                return False
            self.state.replace_capture(handle)
            logger.debug(f"Capture rebound ({self.state.phase.value})")
            return True

    def change_track(self, track: Any) -> bool:
        return self.rebind_track(track)

    def reset_track(self) -> bool:
        return self.rebind_track(None)

    def handle_track_muted(self, muted: bool) -> None:
        """Muting the local video stops detection; unmuting starts it again."""
        if muted:
            self.stop()
        else:
            self.start()

    def handle_track_added(self, track: Any) -> None:
        """A new local video track replaces the bound one and (re)starts detection."""
        with self._lock:
            self.rebind_track(track)
            self.start()

    # ---- delivery ----
    def deliver_now(self) -> DeliveryOutcome:
        """Run one delivery attempt outside the schedule."""
        return self._scheduler.tick()

    def expression_totals(self) -> dict[str, float]:
        """Cumulative duration per expression since the pipeline was created."""
        with self._lock:
            return dict(self._totals)

    # ---- worker callbacks ----
    def _handle_worker_message(self, message: WorkerMessage) -> None:
        with self._lock:
            if self._channel is None:
                logger.debug(f"Ignoring {type(message).__name__}: worker shut down")
                return

            if isinstance(message, BackendReport):
                interval = resolve_detection_interval(message.value, self._intervals)
                self.state.detection_interval_ms = interval
                logger.info(f"Worker backend: {message.value} (detection interval {interval} ms)")

            elif isinstance(message, ExpressionReport):
                if not self.state.running:
                    logger.debug("Ignoring classification received while idle")
                    return
                if not self._channel.accept_report(message):
                    logger.debug(f"Discarding stale classification for frame {message.frame_id}")
                    return
                self._channel.submit_frame(self.state.capture_handle)
                self._reducer.observe(message.value)

    def _on_expression_event(self, event: ExpressionEvent) -> None:
        self.buffer.append(event)
        self._totals[event.label] += event.duration

    def _log_summary(self) -> None:
        totals = self.expression_totals()
        logger.info("=" * 50)
        logger.info(f"Session: {sum(totals.values()):.1f} total, {len(self.buffer)} undelivered")
        if totals:
            summary = ", ".join(
                f"{label} {duration:.1f}" for label, duration in Counter(totals).most_common()
            )
            logger.info(f"  {summary}")
        logger.info("=" * 50)
