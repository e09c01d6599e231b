"""
Configuration Loader - Reads YAML config files and applies environment overrides.
"""

import logging
import os
from pathlib import Path

import yaml

from ..utils.constants import ENV_CAMERA_URL, ENV_WEBHOOK_TOKEN, ENV_WEBHOOK_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.yaml"


def find_config_file(config_path: str = DEFAULT_CONFIG_NAME) -> Path | None:
    """
    Find config file in standard locations.

    Search order:
    1. Specified path (if not the default name, only that path is used)
    2. Current directory (config.yaml)
    3. ~/.config/expression-monitor/config.yaml

    Returns:
        Path to config file, or None if not found
    """
    if config_path != DEFAULT_CONFIG_NAME:
        specified = Path(config_path)
        return specified if specified.exists() else None

    search_paths = [
        Path.cwd() / DEFAULT_CONFIG_NAME,
        Path.home() / ".config" / "expression-monitor" / DEFAULT_CONFIG_NAME,
    ]
    for path in search_paths:
        if path.exists():
            return path
    return None


def read_config_file(config_file: Path) -> dict:
    """
    Read a YAML config file.

    Supports pointer files: if the file only contains `use: path/to/config.yaml`,
    that file (relative to the pointer) is loaded instead.

    Raises:
        yaml.YAMLError: If the YAML is invalid
    """
    with open(config_file, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if isinstance(config, dict) and list(config.keys()) == ["use"]:
        pointer_path = Path(config_file).parent / config["use"]
        logger.info(f"Config pointer: {config_file} -> {config['use']}")
        with open(pointer_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

    return config


def load_config_with_env(config: dict) -> dict:
    """
    Apply environment variable overrides to config.

    Args:
        config: Base configuration dictionary

    Returns:
        Configuration with environment variables applied
    """
    if ENV_CAMERA_URL in os.environ:
        logger.info(f"Using camera URL from environment: {ENV_CAMERA_URL}")
        camera_url = os.environ[ENV_CAMERA_URL]
        # Device indexes come through the environment as strings
        config.setdefault("camera", {})["url"] = (
            int(camera_url) if camera_url.isdigit() else camera_url
        )

    if ENV_WEBHOOK_URL in os.environ:
        logger.info(f"Using webhook URL from environment: {ENV_WEBHOOK_URL}")
        config.setdefault("webhook", {})["url"] = os.environ[ENV_WEBHOOK_URL]

    if ENV_WEBHOOK_TOKEN in os.environ:
        config.setdefault("webhook", {})["token"] = os.environ[ENV_WEBHOOK_TOKEN]

    return config
