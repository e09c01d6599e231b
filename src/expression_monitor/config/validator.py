"""
Configuration Validator - Validates config syntax and semantic correctness.

Provides comprehensive validation with detailed error messages.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ..utils.constants import WEBHOOK_PATH
from .schemas import Config, validate_config_pydantic

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when a configuration cannot be used to run the pipeline."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass
class ValidationResult:
    """Result of config validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    derived: dict[str, Any] = field(default_factory=dict)
    config: Config | None = None


def validate_config_full(config: dict | None) -> ValidationResult:
    """
    Comprehensive config validation with detailed error messages.

    Args:
        config: Configuration dictionary to validate

    Returns:
        ValidationResult with errors, warnings, and derived settings.
    """
    result = ValidationResult(valid=True)

    if not isinstance(config, dict):
        result.errors.append("Configuration must be a mapping")
        result.valid = False
        return result

    if "worker" not in config:
        result.errors.append("Missing required section: 'worker'")
        result.valid = False
        return result

    try:
        parsed = validate_config_pydantic(config)
    except ValidationError as e:
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            result.errors.append(f"{location}: {error['msg']}")
        result.valid = False
        return result

    result.config = parsed
    _check_warnings(parsed, result)

    result.derived["detection_intervals_ms"] = parsed.detection.intervals()
    result.derived["send_interval_seconds"] = parsed.webhook.send_interval_ms / 1000
    result.derived["endpoint"] = (
        f"{parsed.webhook.url.rstrip('/')}{WEBHOOK_PATH}" if parsed.webhook.url else None
    )

    return result


def _check_warnings(config: Config, result: ValidationResult) -> None:
    """Semantic checks that do not prevent running."""
    if not config.webhook.url:
        result.warnings.append(
            "webhook.url not set: events will be buffered but never delivered"
        )
    if not config.worker.models_url:
        result.warnings.append("worker.models_url is empty")
    if not config.session.session_id:
        result.warnings.append("session.session_id is empty")


def require_valid_config(config: dict | None) -> Config:
    """
    Validate and return the parsed configuration.

    Raises:
        ConfigValidationError: If validation fails
    """
    result = validate_config_full(config)
    if not result.valid:
        raise ConfigValidationError(result.errors)
    for warning in result.warnings:
        logger.warning(warning)
    return result.config


def print_validation_result(result: ValidationResult) -> None:
    """Print validation result to stdout."""
    print("\n" + "=" * 70)
    print("CONFIGURATION VALIDATION")
    print("=" * 70)

    if result.errors:
        print(f"\nErrors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  x {error}")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  ! {warning}")

    if result.derived:
        print("\nDerived settings:")
        for key, value in result.derived.items():
            print(f"  {key}: {value}")

    print("\n" + ("Configuration is valid" if result.valid else "Configuration is INVALID"))
    print("=" * 70 + "\n")
