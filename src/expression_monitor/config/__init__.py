"""
Configuration loading and validation.

- load_config_with_env: Apply environment variable overrides
- validate_config_full: Comprehensive validation with errors/warnings
- require_valid_config: Validate and return the parsed Config

Pydantic schemas available for type-safe validation:
- Config: Complete configuration schema
- validate_config_pydantic: Validate and parse config to Pydantic model
"""

from .loader import find_config_file, load_config_with_env, read_config_file
from .schemas import (
    CameraConfig,
    Config,
    DetectionConfig,
    SessionConfig,
    WebhookConfig,
    WorkerConfig,
    validate_config_pydantic,
)
from .validator import (
    ConfigValidationError,
    ValidationResult,
    print_validation_result,
    require_valid_config,
    validate_config_full,
)

__all__ = [
    "CameraConfig",
    # Pydantic validation
    "Config",
    # Exception
    "ConfigValidationError",
    "DetectionConfig",
    "SessionConfig",
    "ValidationResult",
    "WebhookConfig",
    "WorkerConfig",
    # Config loading
    "find_config_file",
    "load_config_with_env",
    # Display
    "print_validation_result",
    "read_config_file",
    "require_valid_config",
    # Validation
    "validate_config_full",
    "validate_config_pydantic",
]
