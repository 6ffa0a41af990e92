"""
Configuration loader for the Terraform resource reconcilers.
"""

import os
from dataclasses import dataclass
from typing import Optional

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Config:
    """Configuration class for the reconcilers."""

    aws_region: Optional[str] = None
    log_level: str = "INFO"
    max_retries: int = 3
    timeout_seconds: int = 30
    operation_timeout_seconds: int = 1800
    poll_interval_seconds: int = 10
    max_poll_interval_seconds: int = 60


def _positive_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def load_config() -> Config:
    """
    Loads and validates configuration from the environment.

    Returns:
        Config object with validated settings

    Raises:
        ValueError: If a configuration value is invalid
    """
    aws_region = os.environ.get("AWS_REGION") or None
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}, got {log_level!r}"
        )

    max_retries = _positive_int("MAX_RETRIES", "3")
    timeout_seconds = _positive_int("TIMEOUT_SECONDS", "30")
    operation_timeout_seconds = _positive_int("OPERATION_TIMEOUT_SECONDS", "1800")
    poll_interval_seconds = _positive_int("POLL_INTERVAL_SECONDS", "10")
    max_poll_interval_seconds = _positive_int("MAX_POLL_INTERVAL_SECONDS", "60")

    if max_poll_interval_seconds < poll_interval_seconds:
        raise ValueError(
            "MAX_POLL_INTERVAL_SECONDS must not be lower than POLL_INTERVAL_SECONDS"
        )

    return Config(
        aws_region=aws_region,
        log_level=log_level,
        max_retries=max_retries,
        timeout_seconds=timeout_seconds,
        operation_timeout_seconds=operation_timeout_seconds,
        poll_interval_seconds=poll_interval_seconds,
        max_poll_interval_seconds=max_poll_interval_seconds,
    )
