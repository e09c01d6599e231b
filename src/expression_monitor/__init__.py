"""
Expression Monitor

Classifies a user's facial expression from a live video stream, collapses
per-frame classifications into timed expression events and delivers them
to a webhook in periodic batches.

Package structure:
  capture/   - Track binding and the OpenCV camera source
  worker/    - Background classification process and its message channel
  pipeline/  - Reducer, delivery buffer/scheduler, lifecycle controller
  delivery/  - Webhook delivery backend
  models/    - Messages, events, capture protocols, pipeline state
  config/    - Configuration loading and validation
  utils/     - Constants
"""

__version__ = "1.0.0"

from .config import (
    Config,
    ConfigValidationError,
    ValidationResult,
    validate_config_full,
)
from .delivery import DeliveryOutcome, EventDelivery
from .models import ExpressionEvent, Phase
from .pipeline import ExpressionPipeline, ExpressionReducer
from .worker import DetectionWorkerChannel

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    # Delivery
    "DeliveryOutcome",
    # Worker
    "DetectionWorkerChannel",
    "EventDelivery",
    # Models
    "ExpressionEvent",
    # Pipeline
    "ExpressionPipeline",
    "ExpressionReducer",
    "Phase",
    "ValidationResult",
    "validate_config_full",
]
