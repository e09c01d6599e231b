"""
Tests for the worker message protocol and pipeline state helpers.
"""

import unittest

from src.expression_monitor.models.capture import CaptureHandle
from src.expression_monitor.models.events import (
    UNIT_FRAMES,
    UNIT_SECONDS,
    ExpressionEvent,
    PendingExpression,
    compute_duration,
)
from src.expression_monitor.models.messages import (
    BackendReport,
    ClearTimeout,
    ExpressionReport,
    SetModelsUrl,
    SubmitFrame,
    parse_host_message,
    parse_worker_message,
)
from src.expression_monitor.models.state import (
    Phase,
    PipelineState,
    resolve_detection_interval,
)


class TestHostMessages(unittest.TestCase):
    """Test host -> worker payloads."""

    def test_wire_format(self):
        """Test each host message serializes with its protocol id."""
        self.assertEqual(
            SetModelsUrl("https://models/").to_dict(),
            {"id": "SET_MODELS_URL", "url": "https://models/"},
        )
        self.assertEqual(ClearTimeout().to_dict(), {"id": "CLEAR_TIMEOUT"})
        self.assertEqual(
            SubmitFrame(frame=None, frame_id=7).to_dict(),
            {"id": "SET_TIMEOUT", "imageBitmap": None, "frameId": 7},
        )

    def test_parse_known_ids(self):
        """Test payloads parse back to typed messages."""
        self.assertEqual(
            parse_host_message({"id": "SET_MODELS_URL", "url": "u"}), SetModelsUrl("u")
        )
        self.assertEqual(parse_host_message({"id": "CLEAR_TIMEOUT"}), ClearTimeout())
        self.assertEqual(
            parse_host_message({"id": "SET_TIMEOUT", "imageBitmap": "f", "frameId": 3}),
            SubmitFrame(frame="f", frame_id=3),
        )

    def test_parse_unknown_id(self):
        """Test unknown ids are ignored."""
        with self.assertLogs("src.expression_monitor.models.messages", level="WARNING"):
            self.assertIsNone(parse_host_message({"id": "RESIZE"}))


class TestWorkerMessages(unittest.TestCase):
    """Test worker -> host payloads."""

    def test_backend_report(self):
        """Test tf-backend messages carry the backend name."""
        self.assertEqual(
            parse_worker_message({"type": "tf-backend", "value": "webgl"}),
            BackendReport("webgl"),
        )

    def test_backend_report_without_value(self):
        """Test a backend report with no value is treated as absent."""
        self.assertIsNone(parse_worker_message({"type": "tf-backend", "value": ""}))
        self.assertIsNone(parse_worker_message({"type": "tf-backend"}))

    def test_expression_report(self):
        """Test facial-expression messages, including a missing value."""
        self.assertEqual(
            parse_worker_message({"type": "facial-expression", "value": "happy", "frameId": 2}),
            ExpressionReport("happy", frame_id=2),
        )
        self.assertEqual(
            parse_worker_message({"type": "facial-expression", "value": None}),
            ExpressionReport(""),
        )

    def test_unknown_type(self):
        """Test unknown message types are dropped."""
        with self.assertLogs("src.expression_monitor.models.messages", level="WARNING"):
            self.assertIsNone(parse_worker_message({"type": "face-box"}))

    def test_report_round_trip(self):
        """Test a serialized report parses to an equal message."""
        report = ExpressionReport("sad", frame_id=11)
        self.assertEqual(parse_worker_message(report.to_dict()), report)


class TestDetectionInterval(unittest.TestCase):
    """Test backend -> interval resolution."""

    def test_known_backends(self):
        """Test webgl and cpu map to their intervals."""
        self.assertEqual(resolve_detection_interval("webgl"), 1000)
        self.assertEqual(resolve_detection_interval("cpu"), 6000)

    def test_unknown_backend(self):
        """Test unknown or missing backends resolve to -1."""
        self.assertEqual(resolve_detection_interval("wasm"), -1)
        self.assertEqual(resolve_detection_interval(""), -1)
        self.assertEqual(resolve_detection_interval(None), -1)

    def test_custom_mapping(self):
        """Test a configured mapping replaces the defaults."""
        intervals = {"webgl": 500}
        self.assertEqual(resolve_detection_interval("webgl", intervals), 500)
        self.assertEqual(resolve_detection_interval("cpu", intervals), -1)


class TestEvents(unittest.TestCase):
    """Test event construction and webhook representation."""

    def test_compute_duration(self):
        """Test duration in seconds or frames."""
        self.assertEqual(compute_duration(3, 1000), (3, UNIT_SECONDS))
        self.assertEqual(compute_duration(2, 6000), (12, UNIT_SECONDS))
        self.assertEqual(compute_duration(4, -1), (4, UNIT_FRAMES))

    def test_from_pending(self):
        """Test a pending run finalizes to an event."""
        pending = PendingExpression("happy", first_observed_at_ms=1234, repeat_count=2)
        event = ExpressionEvent.from_pending(pending, 1000)

        self.assertEqual(pending.occurrences, 3)
        self.assertEqual(
            event.to_dict(),
            {"emotion": "happy", "duration": 3.0, "unit": "seconds", "timestamp": 1234},
        )


class FakeHandle:
    def grab_frame(self):
        return "frame"


class TestPipelineState(unittest.TestCase):
    """Test the lifecycle state record."""

    def test_defaults(self):
        """Test a new state is idle, unbound and without an interval."""
        state = PipelineState()

        self.assertEqual(state.phase, Phase.IDLE)
        self.assertFalse(state.running)
        self.assertIsNone(state.capture_handle)
        self.assertEqual(state.detection_interval_ms, -1)

    def test_reset_keeps_interval(self):
        """Test reset drops the handle and phase but keeps the worker's interval."""
        state = PipelineState()
        state.replace_capture(FakeHandle())
        state.phase = Phase.RUNNING
        state.detection_interval_ms = 1000

        state.reset()

        self.assertEqual(state.phase, Phase.IDLE)
        self.assertIsNone(state.capture_handle)
        self.assertEqual(state.detection_interval_ms, 1000)

    def test_handle_satisfies_protocol(self):
        """Test a grab_frame() object is usable as a capture handle."""
        handle: CaptureHandle = FakeHandle()
        self.assertEqual(handle.grab_frame(), "frame")


if __name__ == "__main__":
    unittest.main()
