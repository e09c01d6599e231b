"""
Tests for the webhook delivery backend and the retry helper.
"""

import unittest
from unittest.mock import MagicMock, patch

import requests

from src.expression_monitor.config import validate_config_pydantic
from src.expression_monitor.delivery import DeliveryOutcome, with_retry
from src.expression_monitor.delivery.webhook import SessionInfo, WebhookDelivery
from src.expression_monitor.models.events import ExpressionEvent

POST = "src.expression_monitor.delivery.webhook.requests.post"

EVENTS = [
    ExpressionEvent(label="happy", duration=3.0, timestamp_ms=1000),
    ExpressionEvent(label="sad", duration=2.0, timestamp_ms=4000),
]


def response(status: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = "body"
    return resp


class TestWebhookDelivery(unittest.TestCase):
    """Test webhook POST behavior and outcomes."""

    def setUp(self):
        self.session = SessionInfo(
            meeting_fqn="tenant/room",
            session_id="s-1",
            participant_id="p-1",
            participant_name="Alex",
            participant_jid="alex@example.com",
        )

    def test_posts_batch(self):
        """Test events are posted to {url}/emotions with session fields."""
        delivery = WebhookDelivery("https://hooks.example.com/", session=self.session)

        with patch(POST, return_value=response(200)) as post:
            outcome = delivery.deliver(EVENTS)

        self.assertEqual(outcome, DeliveryOutcome.SENT)
        post.assert_called_once()
        args, kwargs = post.call_args
        self.assertEqual(args[0], "https://hooks.example.com/emotions")
        payload = kwargs["json"]
        self.assertEqual(payload["meetingFqn"], "tenant/room")
        self.assertEqual(payload["sessionId"], "s-1")
        self.assertEqual(payload["participantJid"], "alex@example.com")
        self.assertIsInstance(payload["submitted"], int)
        self.assertEqual(
            payload["emotions"][0],
            {"emotion": "happy", "duration": 3.0, "unit": "seconds", "timestamp": 1000},
        )
        self.assertNotIn("Authorization", kwargs["headers"])

    def test_bearer_token(self):
        """Test a configured token is sent as a bearer header."""
        delivery = WebhookDelivery("https://hooks.example.com", token="secret")

        with patch(POST, return_value=response(204)) as post:
            delivery.deliver(EVENTS)

        self.assertEqual(post.call_args.kwargs["headers"]["Authorization"], "Bearer secret")

    def test_not_configured(self):
        """Test no request is made without a url."""
        delivery = WebhookDelivery(None)

        with patch(POST) as post:
            self.assertEqual(delivery.deliver(EVENTS), DeliveryOutcome.NOT_CONFIGURED)
        post.assert_not_called()
        self.assertIsNone(delivery.endpoint)

    def test_nothing_to_send(self):
        """Test an empty batch is not posted."""
        delivery = WebhookDelivery("https://hooks.example.com")

        with patch(POST) as post:
            self.assertEqual(delivery.deliver([]), DeliveryOutcome.NOTHING_TO_SEND)
        post.assert_not_called()

    def test_http_error_is_failure(self):
        """Test a non-2xx response fails the delivery."""
        delivery = WebhookDelivery("https://hooks.example.com", max_retries=0)

        with patch(POST, return_value=response(404)):
            self.assertEqual(delivery.deliver(EVENTS), DeliveryOutcome.FAILED)

    def test_network_error_is_failure(self):
        """Test connection errors fail the delivery instead of raising."""
        delivery = WebhookDelivery("https://hooks.example.com", max_retries=0)

        with patch(POST, side_effect=requests.ConnectionError("refused")):
            self.assertEqual(delivery.deliver(EVENTS), DeliveryOutcome.FAILED)

    def test_from_config(self):
        """Test the backend is built from the webhook and session sections."""
        config = validate_config_pydantic(
            {
                "worker": {"classifier": "pkg.module:make"},
                "webhook": {"url": "https://hooks.example.com", "token": "t", "timeout": 3},
                "session": {"session_id": "abc"},
            }
        )

        delivery = WebhookDelivery.from_config(config)

        self.assertEqual(delivery.endpoint, "https://hooks.example.com/emotions")
        self.assertEqual(delivery.build_payload([])["sessionId"], "abc")


class TestWithRetry(unittest.TestCase):
    """Test the retry helper."""

    @patch("src.expression_monitor.delivery.time.sleep")
    def test_retries_server_errors(self, sleep):
        """Test 5xx responses are retried with backoff."""
        func = MagicMock(side_effect=[response(503), response(502), response(200)])

        result = with_retry(func, max_retries=2, base_delay=1.0)

        self.assertEqual(result.status_code, 200)
        self.assertEqual(func.call_count, 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0])

    @patch("src.expression_monitor.delivery.time.sleep")
    def test_client_errors_not_retried(self, sleep):
        """Test 4xx responses are returned immediately."""
        func = MagicMock(return_value=response(400))

        self.assertEqual(with_retry(func).status_code, 400)
        func.assert_called_once()
        sleep.assert_not_called()

    @patch("src.expression_monitor.delivery.time.sleep")
    def test_raises_after_last_attempt(self, sleep):
        """Test the last transient exception propagates."""
        func = MagicMock(side_effect=requests.Timeout("slow"))

        with self.assertRaises(requests.Timeout):
            with_retry(func, max_retries=1)
        self.assertEqual(func.call_count, 2)


if __name__ == "__main__":
    unittest.main()
