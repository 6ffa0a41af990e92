"""
Terraform Resource Reconciler Package.

This package drives AWS resources towards a declarative desired state and
mirrors the observed remote state back for drift detection. It supports
CloudWatch metric alarms and Route 53 Domains registered domains.

Each lifecycle action:
1. Validates cross-field constraints before any remote call
2. Issues only the remote calls needed for the desired state
3. Reads the entity back so computed fields are populated
4. Treats an entity that vanished remotely as absent rather than as an error
"""

from .core import reconcile
from .resource_data import LifecycleState, ResourceData

__all__ = ["LifecycleState", "ResourceData", "reconcile"]
