"""
Detection Worker Channel - Host side of the worker message protocol.

Owns the worker process, its two queues and a listener thread that turns
worker payloads into typed messages for the pipeline. Frame submissions are
a strict ping-pong: a new frame is only posted once the previous one has
been answered (or abandoned with CLEAR_TIMEOUT).
"""

import itertools
import logging
import multiprocessing
import pickle
import threading
from collections.abc import Callable
from typing import Any

from ..models.capture import CaptureHandle
from ..models.messages import (
    ClearTimeout,
    ExpressionReport,
    HostMessage,
    SetModelsUrl,
    SubmitFrame,
    WorkerMessage,
    parse_worker_message,
)
from ..models.state import DEFAULT_BACKEND_INTERVALS
from ..utils.constants import WORKER_PROCESS_NAME, WORKER_SHUTDOWN_TIMEOUT
from .classifier import ClassifierFactory
from .runtime import run_worker

logger = logging.getLogger(__name__)


class DetectionWorkerChannel:
    """
    Bidirectional channel to the detection worker.

    Use DetectionWorkerChannel.spawn() to create one; it returns None when
    the host cannot run background workers.
    """

    def __init__(
        self,
        process: Any,
        inbound: Any,
        outbound: Any,
        on_message: Callable[[WorkerMessage], None],
    ):
        """
        Wrap an already started worker process.

        Args:
            process: Started worker process (multiprocessing.Process-like)
            inbound: Queue the worker reads host messages from
            outbound: Queue the worker writes its messages to
            on_message: Callback for every worker message; expression reports
                must pass accept_report() before they are used
        """
        self._process = process
        self._inbound = inbound
        self._outbound = outbound
        self._on_message = on_message

        self._lock = threading.Lock()
        self._frame_ids = itertools.count(1)
        self._outstanding: int | None = None
        self._closed = False

        self._listener = threading.Thread(
            target=self._listen,
            name="WorkerListener",
            daemon=True,
        )
        self._listener.start()

    @classmethod
    def spawn(
        cls,
        models_url: str,
        classifier: str | ClassifierFactory,
        on_message: Callable[[WorkerMessage], None],
        intervals_ms: dict[str, int] | None = None,
        start_method: str | None = None,
        mp_context: Any = None,
    ) -> "DetectionWorkerChannel | None":
        """
        Start the worker process and send it the models URL.

        Args:
            models_url: Base URL the classifier loads its model from
            classifier: Classifier factory or "module:attribute" import path
            on_message: Callback for worker messages
            intervals_ms: Backend -> detection interval mapping
            start_method: multiprocessing start method (default: platform default)
            mp_context: Object providing Queue() and Process(); overrides start_method

        Returns:
            Running channel, or None if background workers are unavailable
        """
        intervals = dict(intervals_ms or DEFAULT_BACKEND_INTERVALS)

        try:
            ctx = mp_context or multiprocessing.get_context(start_method)
            inbound = ctx.Queue()
            outbound = ctx.Queue()
            process = ctx.Process(
                target=run_worker,
                args=(inbound, outbound, classifier, intervals),
                name=WORKER_PROCESS_NAME,
                daemon=True,
            )
            process.start()
        except (ImportError, OSError, ValueError, AttributeError, pickle.PicklingError) as e:
            logger.warning(f"Background workers not supported on this host: {e}")
            return None

        logger.info(f"Started {WORKER_PROCESS_NAME}")
        channel = cls(process, inbound, outbound, on_message)
        channel.post(SetModelsUrl(url=models_url))
        return channel

    @property
    def alive(self) -> bool:
        return not self._closed

    @property
    def outstanding_frame(self) -> int | None:
        """Id of the frame awaiting classification, if any."""
        with self._lock:
            return self._outstanding

    def post(self, message: HostMessage) -> None:
        """Send one message to the worker."""
        if self._closed:
            logger.debug(f"Dropping {type(message).__name__}: channel closed")
            return
        self._inbound.put(message.to_dict())

    def submit_frame(self, capture: CaptureHandle | None) -> bool:
        """
        Grab a frame and submit it for classification.

        A failed grab still submits an empty frame so the worker answers and
        the request/response loop keeps going.

        Args:
            capture: Capture handle to grab from

        Returns:
            True if a submission was posted, False if skipped
        """
        if capture is None or self._closed:
            return False

        with self._lock:
            if self._outstanding is not None:
                logger.debug(f"Frame {self._outstanding} still outstanding, not submitting")
                return False
            frame_id = next(self._frame_ids)
            self._outstanding = frame_id

        try:
            frame = capture.grab_frame()
        except Exception as e:
            logger.warning(f"Failed to grab frame: {e}")
            frame = None

        self.post(SubmitFrame(frame=frame, frame_id=frame_id))
        return True

    def clear_timeout(self) -> None:
        """Cancel the worker's scheduled classification and abandon the outstanding frame."""
        with self._lock:
            self._outstanding = None
        self.post(ClearTimeout())

    def terminate(self, timeout: float = WORKER_SHUTDOWN_TIMEOUT) -> None:
        """Shut the worker down; idempotent."""
        if self._closed:
            return
        self._closed = True

        self._inbound.put(None)
        self._process.join(timeout=timeout)
        if self._process.is_alive():
            logger.warning(f"{WORKER_PROCESS_NAME} did not shutdown gracefully")
            terminate = getattr(self._process, "terminate", None)
            if terminate is not None:
                terminate()

        # Unblock the listener
        self._outbound.put(None)
        self._listener.join(timeout=timeout)
        logger.info(f"{WORKER_PROCESS_NAME} stopped")

    def _listen(self) -> None:
        """Listener thread: dispatch worker messages until shutdown."""
        while True:
            data = self._outbound.get()
            if data is None:
                break

            message = parse_worker_message(data)
            if message is None:
                continue

            try:
                self._on_message(message)
            except Exception as e:
                logger.error(f"Error handling worker message: {e}", exc_info=True)

        logger.debug("Worker listener exited")

    def accept_report(self, report: ExpressionReport) -> bool:
        """
        Match a report against the outstanding frame and release it.

        The on_message receiver calls this under its own lock, before acting
        on the report.

        Returns:
            False for a stale report (cleared frame or another frame id)
        """
        with self._lock:
            if self._outstanding is None:
                return False
            if report.frame_id is not None and report.frame_id != self._outstanding:
                return False
            self._outstanding = None
            return True
