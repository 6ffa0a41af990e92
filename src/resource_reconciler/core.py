"""
Core reconciliation orchestration logic.

This module contains the main entry point used by the Lambda handler and the
command-line runner. It resolves the reconciler for a resource type and runs
one lifecycle action against it.
"""

from typing import Any, Dict, Type

from ..config import Config
from ..utils import setup_logging
from .clients import ProviderClients
from .reconcilers import (
    CloudWatchMetricAlarmReconciler,
    ResourceReconciler,
    Route53DomainsRegisteredDomainReconciler,
)

logger = setup_logging()

RESOURCE_RECONCILERS: Dict[str, Type[ResourceReconciler]] = {
    CloudWatchMetricAlarmReconciler.resource_type: CloudWatchMetricAlarmReconciler,
    Route53DomainsRegisteredDomainReconciler.resource_type: Route53DomainsRegisteredDomainReconciler,
}

ACTIONS = ("create", "read", "update", "delete", "import", "plan")


def build_reconciler(
    resource_type: str, clients: ProviderClients, config: Config
) -> ResourceReconciler:
    """
    Instantiate the reconciler for a resource type with its client injected.

    Raises:
        ValueError: If the resource type is not supported
    """
    reconciler_class = RESOURCE_RECONCILERS.get(resource_type)
    if reconciler_class is None:
        raise ValueError(
            f"Unsupported resource type {resource_type!r}. "
            f"Supported types: {', '.join(sorted(RESOURCE_RECONCILERS))}"
        )
    return reconciler_class.from_config(getattr(clients, reconciler_class.service), config)


def reconcile(request: Dict[str, Any], clients: ProviderClients, config: Config) -> Dict[str, Any]:
    """
    Run one lifecycle action for one managed entity.

    Args:
        request: Dictionary with resource_type, action, and optionally id,
            config (desired record) and state (prior snapshot)
        clients: AWS clients to inject into the reconciler
        config: Reconciler configuration

    Returns:
        Dictionary with the entity's id, observed state and lifecycle state;
        plan requests also carry the list of differences

    Raises:
        ValueError: If the request is malformed
        ReconcileError: If validation or a remote call fails
    """
    resource_type = request.get("resource_type")
    action = request.get("action")
    if not resource_type:
        raise ValueError("resource_type is required")
    if action not in ACTIONS:
        raise ValueError(f"action must be one of {', '.join(ACTIONS)}, got {action!r}")

    identity = request.get("id") or ""
    reconciler = build_reconciler(resource_type, clients, config)
    logger.info(f"Running {action} for {resource_type} {identity or '<new>'}")

    if action == "import":
        if not identity:
            raise ValueError("id is required to import a resource")
        data = reconciler.import_resource(identity)
    else:
        data = reconciler.new_resource_data(
            config=request.get("config") or {},
            state=request.get("state") or {},
            identity=identity,
        )
        if action in ("read", "update", "delete") and not identity:
            raise ValueError(f"id is required for {action}")

    result: Dict[str, Any] = {"resource_type": resource_type, "action": action}
    if action == "create":
        reconciler.create(data)
    elif action == "read":
        reconciler.read(data)
    elif action == "update":
        reconciler.update(data)
    elif action == "delete":
        reconciler.delete(data)
    elif action == "plan":
        result["differences"] = reconciler.diff(data)

    result.update(data.snapshot())
    return result
