"""
Tests for configuration validation, file loading and environment overrides.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from src.expression_monitor.config import (
    ConfigValidationError,
    find_config_file,
    load_config_with_env,
    read_config_file,
    require_valid_config,
    validate_config_full,
)
from src.expression_monitor.utils.constants import (
    ENV_CAMERA_URL,
    ENV_WEBHOOK_TOKEN,
    ENV_WEBHOOK_URL,
)


def base_config() -> dict:
    return {
        "camera": {"url": 0},
        "worker": {
            "models_url": "https://models.example.com/",
            "classifier": "my_models.expressions:make_classifier",
        },
        "webhook": {"url": "https://hooks.example.com"},
        "session": {"session_id": "s-1"},
    }


class TestConfigValidation(unittest.TestCase):
    """Test configuration validation logic."""

    def test_valid_config(self):
        """Test that a complete config passes without warnings."""
        result = validate_config_full(base_config())

        self.assertTrue(result.valid, f"Errors: {result.errors}")
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.derived["endpoint"], "https://hooks.example.com/emotions")
        self.assertEqual(result.derived["send_interval_seconds"], 15.0)
        self.assertEqual(
            result.derived["detection_intervals_ms"], {"webgl": 1000, "cpu": 6000}
        )

    def test_missing_worker_section(self):
        """Test that the worker section is required."""
        config = base_config()
        del config["worker"]

        result = validate_config_full(config)

        self.assertFalse(result.valid)
        self.assertIn("Missing required section: 'worker'", result.errors)

    def test_not_a_mapping(self):
        """Test that an empty or scalar YAML document is rejected."""
        self.assertFalse(validate_config_full(None).valid)
        self.assertFalse(validate_config_full("worker").valid)

    def test_invalid_classifier_path(self):
        """Test that the classifier must be a 'module:attribute' path."""
        config = base_config()
        config["worker"]["classifier"] = "my_models.make_classifier"

        result = validate_config_full(config)

        self.assertFalse(result.valid)
        self.assertTrue(any(e.startswith("worker.classifier") for e in result.errors))

    def test_invalid_webhook_url(self):
        """Test that webhook URLs must be http(s)."""
        config = base_config()
        config["webhook"]["url"] = "ftp://hooks.example.com"

        result = validate_config_full(config)

        self.assertFalse(result.valid)
        self.assertTrue(any("webhook.url" in e for e in result.errors))

    def test_non_positive_interval(self):
        """Test that detection intervals must be positive."""
        config = base_config()
        config["detection"] = {"webgl_interval_ms": 0}

        self.assertFalse(validate_config_full(config).valid)

    def test_unknown_section(self):
        """Test that unknown top-level sections are rejected."""
        config = base_config()
        config["notifications"] = {}

        self.assertFalse(validate_config_full(config).valid)

    def test_warnings_for_missing_optional_values(self):
        """Test warnings when webhook, models URL and session are unset."""
        config = {"worker": {"classifier": "pkg:factory"}}

        result = validate_config_full(config)

        self.assertTrue(result.valid)
        self.assertEqual(len(result.warnings), 3)
        self.assertIsNone(result.derived["endpoint"])

    def test_empty_webhook_url_is_unset(self):
        """Test that an empty webhook url means not configured."""
        config = base_config()
        config["webhook"]["url"] = ""

        result = validate_config_full(config)

        self.assertTrue(result.valid)
        self.assertIsNone(result.config.webhook.url)

    def test_require_valid_config(self):
        """Test the parsed config is returned or an error raised."""
        parsed = require_valid_config(base_config())
        self.assertEqual(parsed.worker.classifier, "my_models.expressions:make_classifier")

        with self.assertRaises(ConfigValidationError) as ctx:
            require_valid_config({})
        self.assertIn("Missing required section: 'worker'", ctx.exception.errors)


class TestEnvironmentOverrides(unittest.TestCase):
    """Test environment variable overrides."""

    def test_camera_url_override(self):
        """Test that CAMERA_URL overrides the configured camera."""
        with patch.dict(os.environ, {ENV_CAMERA_URL: "rtsp://cam.local/stream"}):
            config = load_config_with_env(base_config())

        self.assertEqual(config["camera"]["url"], "rtsp://cam.local/stream")

    def test_camera_index_override(self):
        """Test that numeric camera overrides become device indexes."""
        with patch.dict(os.environ, {ENV_CAMERA_URL: "2"}):
            config = load_config_with_env({"worker": {}})

        self.assertEqual(config["camera"]["url"], 2)

    def test_webhook_overrides(self):
        """Test webhook url and token from the environment."""
        env = {ENV_WEBHOOK_URL: "https://other.example.com", ENV_WEBHOOK_TOKEN: "tok"}
        with patch.dict(os.environ, env):
            config = load_config_with_env(base_config())

        self.assertEqual(config["webhook"]["url"], "https://other.example.com")
        self.assertEqual(config["webhook"]["token"], "tok")

    def test_no_overrides(self):
        """Test the config is unchanged without environment variables."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_with_env(base_config())

        self.assertEqual(config, base_config())


class TestConfigFiles(unittest.TestCase):
    """Test config file discovery and pointer files."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.dir = Path(self.tmp.name)

    def test_read_config_file(self):
        """Test a YAML file is read into a dict."""
        path = self.dir / "config.yaml"
        path.write_text("worker:\n  classifier: pkg:factory\n", encoding="utf-8")

        self.assertEqual(read_config_file(path), {"worker": {"classifier": "pkg:factory"}})

    def test_pointer_file(self):
        """Test a 'use:' pointer loads the referenced file."""
        (self.dir / "configs").mkdir()
        (self.dir / "configs" / "office.yaml").write_text(
            "camera:\n  url: 1\n", encoding="utf-8"
        )
        pointer = self.dir / "config.yaml"
        pointer.write_text("use: configs/office.yaml\n", encoding="utf-8")

        self.assertEqual(read_config_file(pointer), {"camera": {"url": 1}})

    def test_empty_file(self):
        """Test an empty YAML file reads as an empty dict."""
        path = self.dir / "config.yaml"
        path.write_text("", encoding="utf-8")

        self.assertEqual(read_config_file(path), {})

    def test_find_explicit_path(self):
        """Test an explicit path is only used if it exists."""
        path = self.dir / "custom.yaml"
        self.assertIsNone(find_config_file(str(path)))

        path.write_text("{}", encoding="utf-8")
        self.assertEqual(find_config_file(str(path)), path)


if __name__ == "__main__":
    unittest.main()
