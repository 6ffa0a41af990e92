"""
Exception types raised by the resource reconcilers.

Every error carries the operation that was attempted and the identity of the
managed entity (alarm name, domain name) so that callers can report it
without further context.
"""

from typing import Any, Dict, List, Optional, Sequence


class ReconcileError(Exception):
    """Base class for all reconciler errors."""

    def __init__(self, operation: str, identity: str, message: str) -> None:
        self.operation = operation
        self.identity = identity
        self.message = message
        super().__init__(f"{operation} failed for {identity or '<unset>'}: {message}")


class ValidationError(ReconcileError):
    """Desired configuration is invalid. Raised before any remote call is made."""


class RemoteError(ReconcileError):
    """The remote API rejected or failed a call."""

    def __init__(
        self, operation: str, identity: str, message: str, code: Optional[str] = None
    ) -> None:
        self.code = code or ""
        if code:
            message = f"{code}: {message}"
        super().__init__(operation, identity, message)


class OperationFailedError(RemoteError):
    """A long-running remote operation finished in a FAILED or ERROR status."""

    def __init__(
        self, operation: str, identity: str, operation_id: str, status: str, message: str
    ) -> None:
        self.operation_id = operation_id
        self.status = status
        super().__init__(
            operation,
            identity,
            f"operation {operation_id} ended with status {status}: {message or 'no details'}",
        )


class PartialUpdateError(RemoteError):
    """
    One aspect of a multi-aspect update failed.

    Aspects applied before the failure are not rolled back.
    """

    def __init__(
        self,
        operation: str,
        identity: str,
        applied: Sequence[str],
        failed: str,
        pending: Sequence[str],
        cause: ReconcileError,
        state: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.applied: List[str] = list(applied)
        self.failed = failed
        self.pending: List[str] = list(pending)
        self.cause = cause
        # Remote state re-read after the failure, when it could be fetched
        self.state = state
        summary = (
            f"aspect {failed!r} failed ({cause.message}); "
            f"applied: {', '.join(self.applied) or 'none'}; "
            f"not attempted: {', '.join(self.pending) or 'none'}"
        )
        super().__init__(operation, identity, summary, code=getattr(cause, "code", None))


class OperationTimeoutError(ReconcileError):
    """Polling a long-running remote operation exceeded its time bound."""

    def __init__(
        self, operation: str, identity: str, operation_id: str, timeout_seconds: float
    ) -> None:
        self.operation_id = operation_id
        self.timeout_seconds = timeout_seconds
        super().__init__(
            operation,
            identity,
            f"timed out after {timeout_seconds:g}s waiting for operation {operation_id}",
        )
