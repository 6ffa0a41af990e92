"""
Utility functions for the Terraform resource reconcilers.
"""

import functools
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar, cast

from botocore.exceptions import BotoCoreError, ClientError

from .errors import RemoteError


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Sets up logging configuration for the reconcilers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("resource_reconciler")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Prevent duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


F = TypeVar("F", bound=Callable[..., Any])


def remote_operation(operation: str) -> Callable[[F], F]:
    """
    Decorator for consistent error handling and logging around AWS API calls.

    The wrapped function must take the boto3 client as its first positional
    argument and the resource identity as its second. AWS ClientError and
    BotoCoreError are logged and re-raised as RemoteError carrying the
    operation name and identity.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(client: Any, identity: str, *args: Any, **kwargs: Any) -> Any:
            logger = logging.getLogger("resource_reconciler")
            try:
                return func(client, identity, *args, **kwargs)
            except ClientError as e:
                error = e.response.get("Error", {})
                code = error.get("Code", "")
                message = error.get("Message", "") or str(e)
                logger.error(f"AWS ClientError during {operation} ({identity}): {e}")
                raise RemoteError(operation, identity, message, code=code) from e
            except BotoCoreError as e:
                logger.error(f"AWS transport error during {operation} ({identity}): {e}")
                raise RemoteError(operation, identity, str(e)) from e

        return cast(F, wrapper)

    return decorator


def format_rfc3339(value: Optional[datetime]) -> str:
    """
    Formats a boto3 timestamp as an RFC 3339 string in UTC.

    Naive datetimes are assumed to already be UTC. Returns an empty string
    when the remote value is missing.
    """
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def load_json_document(content: str, logger: Optional[logging.Logger] = None) -> Dict:
    """
    Parses a JSON document (desired config or prior state) into a dict.

    Args:
        content: Raw JSON content as string
        logger: Logger instance for error logging

    Returns:
        Parsed document as dict

    Raises:
        ValueError: If the content is not valid JSON or not a JSON object
    """
    if logger is None:
        logger = setup_logging()

    if not content.strip():
        return {}
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON document: {e}")
        raise ValueError(f"Invalid JSON document: {e}")
    if not isinstance(document, dict):
        raise ValueError("JSON document did not parse to an object.")
    return document
