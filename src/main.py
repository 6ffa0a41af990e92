"""
AWS Lambda entry point for the Terraform resource reconcilers.
"""

import json
from typing import Any, Dict

from .config import load_config
from .errors import OperationTimeoutError, RemoteError, ValidationError
from .resource_reconciler import reconcile
from .resource_reconciler.clients import build_clients
from .utils import setup_logging


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "body": json.dumps(body),
        "headers": {"Content-Type": "application/json"},
    }


def _error_body(error: str, e: Exception) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error, "message": str(e)}
    for attribute in ("operation", "identity", "code", "applied", "failed", "pending", "state"):
        value = getattr(e, attribute, None)
        if value not in (None, ""):
            body[attribute] = value
    return body


def lambda_handler(event: dict, context: object) -> dict:
    """
    AWS Lambda handler function.

    Args:
        event: Reconcile request with resource_type, action, id, config and state
        context: Lambda context

    Returns:
        Dictionary with statusCode and body containing the reconcile result
    """
    logger = setup_logging()
    try:
        # Load and validate configuration
        config = load_config()
        logger = setup_logging(config.log_level)
        logger.info(
            f"Starting {event.get('action')} for {event.get('resource_type')} "
            f"{event.get('id') or '<new>'}"
        )

        clients = build_clients(config)
        result = reconcile(event, clients, config)

        logger.info(
            f"Reconcile completed. Lifecycle state: {result.get('lifecycle_state')}"
        )
        return _response(200, result)

    except ValidationError as e:
        logger.error(f"Validation error: {str(e)}")
        return _response(400, _error_body("Validation error", e))

    except ValueError as e:
        # Configuration or request errors
        logger.error(f"Configuration error: {str(e)}")
        return _response(400, _error_body("Configuration error", e))

    except OperationTimeoutError as e:
        logger.error(f"Operation timed out: {str(e)}")
        return _response(504, _error_body("Operation timed out", e))

    except RemoteError as e:
        logger.error(f"Remote error: {str(e)}")
        return _response(502, _error_body("Remote error", e))

    except Exception as e:
        # Unexpected errors
        logger.error(f"Unexpected error: {str(e)}")
        return _response(500, _error_body("Internal server error", e))
