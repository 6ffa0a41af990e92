"""
AWS client construction.

Clients are built once from configuration and handed to each reconciler at
construction; nothing here is stored at module level.
"""

from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.config import Config as BotocoreConfig

from ..config import Config
from .types import CloudWatchClient, Route53DomainsClient

# Route 53 Domains is only served from us-east-1
ROUTE53DOMAINS_REGION = "us-east-1"


@dataclass
class ProviderClients:
    """The boto3 clients used by the reconcilers."""

    cloudwatch: CloudWatchClient
    route53domains: Route53DomainsClient


def botocore_config(config: Config) -> BotocoreConfig:
    """Retry and timeout settings shared by every client."""
    return BotocoreConfig(
        retries={"max_attempts": config.max_retries, "mode": "standard"},
        connect_timeout=config.timeout_seconds,
        read_timeout=config.timeout_seconds,
    )


def build_clients(config: Config, session: Optional[boto3.session.Session] = None) -> ProviderClients:
    """
    Create the AWS service clients for all supported resource types.

    Args:
        config: Reconciler configuration
        session: Optional boto3 session; a new one is created otherwise

    Returns:
        ProviderClients holding one client per service
    """
    session = session or boto3.session.Session(region_name=config.aws_region)
    client_config = botocore_config(config)
    return ProviderClients(
        cloudwatch=session.client("cloudwatch", config=client_config),
        route53domains=session.client(
            "route53domains", region_name=ROUTE53DOMAINS_REGION, config=client_config
        ),
    )
