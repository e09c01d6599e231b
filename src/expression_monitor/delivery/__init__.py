"""
Delivery - Pluggable backends that ship buffered expression events.

Provides the common interface used by the delivery scheduler:
- webhook: JSON POST to an HTTP endpoint

Only a SENT outcome allows the scheduler to drop the delivered events.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from enum import Enum

import requests

from ..models.events import ExpressionEvent

logger = logging.getLogger(__name__)

# Retry configuration
DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 1.0  # seconds


class DeliveryOutcome(Enum):
    """Result of one delivery attempt."""

    SENT = "sent"
    NOT_CONFIGURED = "not_configured"
    FAILED = "failed"
    NOTHING_TO_SEND = "nothing_to_send"


def with_retry(
    func: Callable[[], requests.Response],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
) -> requests.Response:
    """
    Execute a request function with exponential backoff retry.

    Retries on transient network errors (timeout, connection error) and 5xx.
    Does NOT retry on 4xx client errors.

    Args:
        func: Callable that performs the request and returns Response
        max_retries: Maximum number of retry attempts (default: 2)
        base_delay: Initial delay in seconds, doubles each retry (default: 1.0)

    Returns:
        The last Response object

    Raises:
        requests.RequestException: If all retries exhausted on network errors
    """
    for attempt in range(max_retries + 1):
        try:
            response = func()
            if response.status_code < 500:
                return response
            if attempt < max_retries:
                delay = base_delay * (2**attempt)
                logger.warning(
                    f"Server error {response.status_code}, retry {attempt + 1}/{max_retries} in {delay}s"
                )
                time.sleep(delay)
                continue
            return response

        except (requests.Timeout, requests.ConnectionError) as e:
            if attempt < max_retries:
                delay = base_delay * (2**attempt)
                logger.warning(
                    f"Network error, retry {attempt + 1}/{max_retries} in {delay}s: {e}"
                )
                time.sleep(delay)
            else:
                raise

    raise requests.RequestException("Retry exhausted")


class EventDelivery(ABC):
    """Abstract base class for delivery backends."""

    @abstractmethod
    def deliver(self, events: Sequence[ExpressionEvent]) -> DeliveryOutcome:
        """
        Deliver a batch of events.

        Args:
            events: Current buffer contents, oldest first

        Returns:
            DeliveryOutcome - only SENT means the endpoint accepted the batch
        """
        pass


__all__ = [
    "DeliveryOutcome",
    "EventDelivery",
    "with_retry",
]
