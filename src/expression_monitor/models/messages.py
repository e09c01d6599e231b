"""
Worker Message Protocol - Typed messages exchanged with the detection worker.

Host -> worker:
    {"id": "SET_MODELS_URL", "url": str}
    {"id": "CLEAR_TIMEOUT"}
    {"id": "SET_TIMEOUT", "imageBitmap": frame | None, "frameId": int}

Worker -> host:
    {"type": "tf-backend", "value": "webgl" | "cpu" | str}
    {"type": "facial-expression", "value": str, "frameId": int}

Messages cross the process boundary as plain dicts; these classes are the
typed view on either side of the queue.
"""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Host -> worker ids
SET_MODELS_URL = "SET_MODELS_URL"
CLEAR_TIMEOUT = "CLEAR_TIMEOUT"
SET_TIMEOUT = "SET_TIMEOUT"

# Worker -> host types
TF_BACKEND = "tf-backend"
FACIAL_EXPRESSION = "facial-expression"


@dataclass(frozen=True)
class SetModelsUrl:
    """Tells the worker where to load the classification model from."""

    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": SET_MODELS_URL, "url": self.url}


@dataclass(frozen=True)
class ClearTimeout:
    """Asks the worker to cancel any scheduled classification."""

    def to_dict(self) -> dict[str, Any]:
        return {"id": CLEAR_TIMEOUT}


@dataclass(frozen=True)
class SubmitFrame:
    """One frame submission; the worker answers with exactly one ExpressionReport."""

    frame: Any
    frame_id: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": SET_TIMEOUT, "imageBitmap": self.frame, "frameId": self.frame_id}


@dataclass(frozen=True)
class BackendReport:
    """Compute backend the worker's classifier settled on."""

    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": TF_BACKEND, "value": self.value}


@dataclass(frozen=True)
class ExpressionReport:
    """Classification of one frame. Empty value means no confident classification."""

    value: str
    frame_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": FACIAL_EXPRESSION, "value": self.value, "frameId": self.frame_id}


HostMessage = SetModelsUrl | ClearTimeout | SubmitFrame
WorkerMessage = BackendReport | ExpressionReport


def parse_host_message(data: dict[str, Any]) -> HostMessage | None:
    """
    Parse a host -> worker payload.

    Args:
        data: Raw message dict taken off the worker's inbound queue

    Returns:
        Typed message, or None if the id is unknown
    """
    message_id = data.get("id")

    if message_id == SET_MODELS_URL:
        return SetModelsUrl(url=data.get("url") or "")
    if message_id == CLEAR_TIMEOUT:
        return ClearTimeout()
    if message_id == SET_TIMEOUT:
        return SubmitFrame(frame=data.get("imageBitmap"), frame_id=data.get("frameId", 0))

    logger.warning(f"Unknown host message id: {message_id}")
    return None


def parse_worker_message(data: dict[str, Any]) -> WorkerMessage | None:
    """
    Parse a worker -> host payload.

    A backend report without a value is treated as absent, matching workers
    that have not settled on a backend yet.

    Args:
        data: Raw message dict taken off the worker's outbound queue

    Returns:
        Typed message, or None if the type is unknown or carries no backend
    """
    message_type = data.get("type")

    if message_type == TF_BACKEND:
        value = data.get("value")
        if not value:
            return None
        return BackendReport(value=str(value))

    if message_type == FACIAL_EXPRESSION:
        return ExpressionReport(
            value=data.get("value") or "",
            frame_id=data.get("frameId"),
        )

    logger.warning(f"Unknown worker message type: {message_type}")
    return None
