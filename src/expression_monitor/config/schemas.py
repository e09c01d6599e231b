"""
Pydantic schemas for configuration validation.

Provides type-safe, declarative validation with clear error messages.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.constants import (
    CPU_TIME_INTERVAL,
    WEBGL_TIME_INTERVAL,
    WEBHOOK_SEND_TIME_INTERVAL,
    WEBHOOK_TIMEOUT,
)


class StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class CameraConfig(BaseModel):
    """Camera settings."""

    url: str | int = Field(default=0, description="Camera URL, device path or index")


class WorkerConfig(BaseModel):
    """Detection worker settings."""

    models_url: str = Field(default="", description="Base URL of the classification model")
    classifier: str = Field(..., description="Classifier factory as 'module:attribute'")
    start_method: Literal["fork", "spawn", "forkserver"] | None = None

    @field_validator("classifier")
    @classmethod
    def validate_classifier(cls, v: str) -> str:
        module_name, sep, attr = v.partition(":")
        if not sep or not module_name or not attr:
            raise ValueError("classifier must be 'module:attribute'")
        return v


class DetectionConfig(BaseModel):
    """Detection interval per compute backend."""

    webgl_interval_ms: int = Field(default=WEBGL_TIME_INTERVAL, gt=0)
    cpu_interval_ms: int = Field(default=CPU_TIME_INTERVAL, gt=0)

    def intervals(self) -> dict[str, int]:
        return {"webgl": self.webgl_interval_ms, "cpu": self.cpu_interval_ms}


class WebhookConfig(BaseModel):
    """Webhook delivery settings."""

    url: str | None = None
    token: str | None = None
    send_interval_ms: int = Field(default=WEBHOOK_SEND_TIME_INTERVAL, gt=0)
    timeout: float = Field(default=WEBHOOK_TIMEOUT, gt=0)
    max_retries: int = Field(default=2, ge=0)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v or None


class SessionConfig(BaseModel):
    """Meeting and participant identifiers included in every delivery."""

    meeting_fqn: str = ""
    session_id: str = ""
    participant_id: str = ""
    participant_name: str = ""
    participant_jid: str = ""


class RuntimeConfig(BaseModel):
    """Runtime settings."""

    default_duration_hours: float = Field(default=1.0, gt=0)


class Config(StrictModel):
    """Complete configuration schema."""

    camera: CameraConfig = Field(default_factory=CameraConfig)
    worker: WorkerConfig
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


def validate_config_pydantic(config: dict) -> Config:
    """
    Validate configuration using Pydantic.

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated Config object

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return Config(**config)
