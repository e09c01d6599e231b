"""
Utility modules for constants.
"""

from .constants import (
    CPU_TIME_INTERVAL,
    ENV_CAMERA_URL,
    ENV_WEBHOOK_TOKEN,
    ENV_WEBHOOK_URL,
    UNKNOWN_DETECTION_INTERVAL,
    WEBGL_TIME_INTERVAL,
    WEBHOOK_SEND_TIME_INTERVAL,
)

__all__ = [
    "CPU_TIME_INTERVAL",
    "ENV_CAMERA_URL",
    "ENV_WEBHOOK_TOKEN",
    "ENV_WEBHOOK_URL",
    "UNKNOWN_DETECTION_INTERVAL",
    "WEBGL_TIME_INTERVAL",
    "WEBHOOK_SEND_TIME_INTERVAL",
]
