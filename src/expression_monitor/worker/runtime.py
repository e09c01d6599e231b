"""
Detection Worker - Body of the background process that classifies frames.

Runs in its own process and talks to the host only through two queues:
inbound carries host messages (dicts), outbound carries worker messages.
A None on the inbound queue shuts the worker down.

Each frame submission is answered with exactly one facial-expression
message, delayed by the backend's detection interval so the host's
request/response loop runs at the expected cadence.
"""

import logging
import queue
import time
from typing import Any

from ..models.messages import (
    BackendReport,
    ClearTimeout,
    ExpressionReport,
    SetModelsUrl,
    SubmitFrame,
    parse_host_message,
)
from ..utils.constants import CPU_TIME_INTERVAL
from .classifier import ClassifierFactory, ExpressionClassifier, load_classifier_factory

logger = logging.getLogger(__name__)


class _WorkerState:
    """Classifier and the one scheduled classification, if any."""

    def __init__(self, factory: ClassifierFactory, intervals_ms: dict[str, int]):
        self.factory = factory
        self.intervals_ms = intervals_ms
        self.classifier: ExpressionClassifier | None = None
        self.pending: SubmitFrame | None = None
        self.deadline: float = 0.0

    def delay_seconds(self) -> float:
        """Delay before answering a frame; unknown backends use the cpu interval."""
        backend = getattr(self.classifier, "backend", None)
        interval = self.intervals_ms.get(backend, -1) if backend else -1
        if interval < 0:
            interval = self.intervals_ms.get("cpu", CPU_TIME_INTERVAL)
        return interval / 1000

    def timeout(self) -> float | None:
        if self.pending is None:
            return None
        return max(0.0, self.deadline - time.monotonic())


def run_worker(
    inbound: Any,
    outbound: Any,
    classifier: str | ClassifierFactory,
    intervals_ms: dict[str, int],
) -> None:
    """
    Worker main loop.

    Args:
        inbound: Queue of host message dicts (None = shutdown)
        outbound: Queue receiving worker message dicts
        classifier: Classifier factory or its "module:attribute" import path
        intervals_ms: Backend -> detection interval mapping
    """
    try:
        factory = load_classifier_factory(classifier)
    except Exception as e:
        logger.error(f"Cannot load classifier {classifier!r}: {e}", exc_info=True)
        factory = None

    state = _WorkerState(factory, intervals_ms)

    while True:
        try:
            data = inbound.get(timeout=state.timeout())
        except queue.Empty:
            _classify_pending(state, outbound)
            continue

        if data is None:
            logger.debug("Worker received shutdown signal")
            break

        message = parse_host_message(data)

        if isinstance(message, SetModelsUrl):
            _load_classifier(state, message.url, outbound)
        elif isinstance(message, SubmitFrame):
            state.pending = message
            state.deadline = time.monotonic() + state.delay_seconds()
        elif isinstance(message, ClearTimeout):
            state.pending = None

    logger.debug("Worker loop exited")


def _load_classifier(state: _WorkerState, models_url: str, outbound: Any) -> None:
    """Build the classifier and report its backend."""
    if state.factory is None:
        return

    try:
        state.classifier = state.factory(models_url)
    except Exception as e:
        logger.error(f"Failed to load classifier from {models_url}: {e}", exc_info=True)
        state.classifier = None
        return

    backend = getattr(state.classifier, "backend", "") or ""
    logger.info(f"Classifier loaded (backend: {backend or 'unknown'})")
    outbound.put(BackendReport(value=backend).to_dict())


def _classify_pending(state: _WorkerState, outbound: Any) -> None:
    """Answer the scheduled frame. Missing frames or classifier answer empty."""
    submission = state.pending
    state.pending = None
    if submission is None:
        return

    value = ""
    if submission.frame is not None and state.classifier is not None:
        try:
            value = state.classifier.classify(submission.frame) or ""
        except Exception as e:
            logger.warning(f"Classification failed: {e}")

    outbound.put(ExpressionReport(value=value, frame_id=submission.frame_id).to_dict())
