"""
Webhook Delivery - Posts buffered expression events to an HTTP endpoint.

Payload (POST {url}/emotions):
    {
        "meetingFqn": "...",
        "sessionId": "...",
        "submitted": 1700000000000,
        "emotions": [{"emotion": "happy", "duration": 3.0, "unit": "seconds",
                      "timestamp": 1699999990000}],
        "participantId": "...",
        "participantName": "...",
        "participantJid": "..."
    }
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import requests

from ..config.schemas import Config
from ..models.events import ExpressionEvent
from ..utils.constants import WEBHOOK_PATH, WEBHOOK_TIMEOUT
from . import DEFAULT_MAX_RETRIES, DeliveryOutcome, EventDelivery, with_retry

logger = logging.getLogger(__name__)


@dataclass
class SessionInfo:
    """Identifies the meeting and participant the events belong to."""

    meeting_fqn: str = ""
    session_id: str = ""
    participant_id: str = ""
    participant_name: str = ""
    participant_jid: str = ""


class WebhookDelivery(EventDelivery):
    """
    Delivery backend that sends JSON batches to a webhook.

    Config options (webhook section):
        url: Base URL of the endpoint; events are posted to {url}/emotions.
             Without a url nothing is sent and NOT_CONFIGURED is returned.
        token: Optional bearer token
        timeout: Request timeout in seconds
        max_retries: Retries on transient errors
    """

    def __init__(
        self,
        url: str | None,
        session: SessionInfo | None = None,
        token: str | None = None,
        timeout: float = WEBHOOK_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self._url = url.rstrip("/") if url else None
        self._session = session or SessionInfo()
        self._token = token
        self._timeout = timeout
        self._max_retries = max_retries

        if self._url:
            logger.debug(f"WebhookDelivery initialized -> {self._url}{WEBHOOK_PATH}")

    @classmethod
    def from_config(cls, config: Config) -> "WebhookDelivery":
        return cls(
            url=config.webhook.url,
            session=SessionInfo(**config.session.model_dump()),
            token=config.webhook.token,
            timeout=config.webhook.timeout,
            max_retries=config.webhook.max_retries,
        )

    @property
    def endpoint(self) -> str | None:
        return f"{self._url}{WEBHOOK_PATH}" if self._url else None

    def build_payload(self, events: Sequence[ExpressionEvent]) -> dict[str, Any]:
        return {
            "meetingFqn": self._session.meeting_fqn,
            "sessionId": self._session.session_id,
            "submitted": int(time.time() * 1000),
            "emotions": [event.to_dict() for event in events],
            "participantId": self._session.participant_id,
            "participantName": self._session.participant_name,
            "participantJid": self._session.participant_jid,
        }

    def deliver(self, events: Sequence[ExpressionEvent]) -> DeliveryOutcome:
        """
        Post the events to the webhook endpoint.

        Args:
            events: Buffered events, oldest first

        Returns:
            SENT on a 2xx response, FAILED on any other response or network
            error, NOT_CONFIGURED without a url, NOTHING_TO_SEND for no events
        """
        if not events:
            return DeliveryOutcome.NOTHING_TO_SEND

        endpoint = self.endpoint
        if not endpoint:
            return DeliveryOutcome.NOT_CONFIGURED

        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        payload = self.build_payload(events)

        try:
            response = with_retry(
                lambda: requests.post(
                    endpoint,
                    json=payload,
                    headers=headers,
                    timeout=self._timeout,
                ),
                max_retries=self._max_retries,
            )
        except requests.RequestException as e:
            logger.error(f"Could not send expressions to webhook: {e}")
            return DeliveryOutcome.FAILED

        if not response.ok:
            logger.warning(
                f"Webhook failed: {response.status_code} {response.text[:100]}"
            )
            return DeliveryOutcome.FAILED

        logger.debug(f"Delivered {len(events)} expression event(s) to {endpoint}")
        return DeliveryOutcome.SENT
