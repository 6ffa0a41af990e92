"""
Waiters for long-running Route 53 Domains operations.

Mutating Route 53 Domains calls return an OperationId; the operation then
moves through SUBMITTED and IN_PROGRESS before ending as SUCCESSFUL, FAILED or
ERROR. Only the status check is repeated here, never the mutating call.
"""

import time
from dataclasses import dataclass

from ..errors import OperationFailedError, OperationTimeoutError
from ..utils import remote_operation, setup_logging
from .types import ApiPayload, Route53DomainsClient

logger = setup_logging()

PENDING_STATUSES = ("SUBMITTED", "IN_PROGRESS")
SUCCESS_STATUS = "SUCCESSFUL"
FAILURE_STATUSES = ("FAILED", "ERROR")


@dataclass
class PollSettings:
    """Back-off settings for operation polling."""

    interval_seconds: float = 10
    max_interval_seconds: float = 60
    backoff_factor: float = 2.0


@remote_operation("get operation detail")
def get_operation_detail(
    conn: Route53DomainsClient, identity: str, operation_id: str
) -> ApiPayload:
    return conn.get_operation_detail(OperationId=operation_id)


def wait_for_operation(
    conn: Route53DomainsClient,
    identity: str,
    operation: str,
    operation_id: str,
    timeout_seconds: float,
    settings: PollSettings = PollSettings(),
) -> ApiPayload:
    """
    Poll an operation until it succeeds, fails or runs out of time.

    Args:
        conn: Boto3 Route 53 Domains client
        identity: Domain name the operation applies to
        operation: Name of the mutating call, used in errors
        operation_id: OperationId returned by the mutating call
        timeout_seconds: Upper bound on total waiting time
        settings: Poll interval and back-off

    Returns:
        The final operation detail

    Raises:
        OperationFailedError: If the operation ends as FAILED or ERROR
        OperationTimeoutError: If the operation is still pending at the deadline
        RemoteError: If a status check call itself fails
    """
    deadline = time.monotonic() + timeout_seconds
    interval = settings.interval_seconds

    while True:
        detail = get_operation_detail(conn, identity, operation_id)
        status = detail.get("Status", "")

        if status == SUCCESS_STATUS:
            logger.debug(f"Operation {operation_id} for {identity} succeeded")
            return detail
        if status in FAILURE_STATUSES:
            raise OperationFailedError(
                operation, identity, operation_id, status, detail.get("Message", "")
            )
        if status not in PENDING_STATUSES:
            logger.warning(
                f"Unexpected status {status!r} for operation {operation_id}; continuing to poll"
            )

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise OperationTimeoutError(operation, identity, operation_id, timeout_seconds)

        logger.debug(
            f"Operation {operation_id} for {identity} is {status}; "
            f"checking again in {min(interval, remaining):g}s"
        )
        time.sleep(min(interval, remaining))
        interval = min(interval * settings.backoff_factor, settings.max_interval_seconds)
