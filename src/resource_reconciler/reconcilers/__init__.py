"""
Resource Reconcilers Package.

This package contains one reconciler per supported Terraform resource type.
"""

from .base import OperationTimeouts, ResourceReconciler
from .cloudwatch_reconcilers import CloudWatchMetricAlarmReconciler
from .route53domains_reconcilers import Route53DomainsRegisteredDomainReconciler

__all__ = [
    "CloudWatchMetricAlarmReconciler",
    "OperationTimeouts",
    "ResourceReconciler",
    "Route53DomainsRegisteredDomainReconciler",
]
