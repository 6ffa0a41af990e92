#!/usr/bin/env python3
"""
Command-line interface for running a resource reconciler locally.

This script runs one lifecycle action against AWS from your local machine.
It requires AWS credentials to be configured (via AWS CLI, environment variables, or IAM roles).

Usage:
    python run_reconciler.py --resource-type aws_cloudwatch_metric_alarm --action create --config-file alarm.json
    python run_reconciler.py --resource-type aws_cloudwatch_metric_alarm --action read --id cpu-high
    python run_reconciler.py --resource-type aws_route53domains_registered_domain --action plan \
        --id example.com --config-file domain.json --state-file domain.state.json
"""

import argparse
import json
import sys
from typing import Any, Dict

from src.config import Config
from src.errors import ReconcileError
from src.resource_reconciler import reconcile
from src.resource_reconciler.clients import build_clients
from src.resource_reconciler.core import ACTIONS, RESOURCE_RECONCILERS
from src.utils import load_json_document, setup_logging


def _read_document(path: str) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r") as f:
        return load_json_document(f.read())


def main() -> None:
    """Main entry point for the command-line reconciler."""
    parser = argparse.ArgumentParser(
        description="Run one lifecycle action of a Terraform resource reconciler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_reconciler.py --resource-type aws_cloudwatch_metric_alarm --action create --config-file alarm.json
  python run_reconciler.py --resource-type aws_route53domains_registered_domain --action import --id example.com
        """,
    )

    parser.add_argument(
        "--resource-type",
        required=True,
        choices=sorted(RESOURCE_RECONCILERS),
        help="Terraform resource type to reconcile",
    )

    parser.add_argument(
        "--action",
        required=True,
        choices=ACTIONS,
        help="Lifecycle action to run",
    )

    parser.add_argument(
        "--id",
        default="",
        help="Identity of an existing entity (alarm name or domain name)",
    )

    parser.add_argument(
        "--config-file",
        default="",
        help="JSON file holding the desired configuration",
    )

    parser.add_argument(
        "--state-file",
        default="",
        help="JSON file holding the prior state snapshot",
    )

    parser.add_argument(
        "--region",
        default=None,
        help="AWS region for CloudWatch calls (default: boto3 configuration)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--max-retries",
        type=int,
        default=3,
        help="Maximum number of retries for AWS API calls (default: 3)",
    )

    parser.add_argument(
        "--timeout-seconds",
        type=int,
        default=30,
        help="Timeout for AWS API calls in seconds (default: 30)",
    )

    parser.add_argument(
        "--operation-timeout-seconds",
        type=int,
        default=1800,
        help="Upper bound for waiting on long-running operations (default: 1800)",
    )

    parser.add_argument(
        "--poll-interval-seconds",
        type=int,
        default=10,
        help="Initial delay between long-running operation status checks (default: 10)",
    )

    parser.add_argument(
        "--max-poll-interval-seconds",
        type=int,
        default=60,
        help="Upper bound for the delay between status checks (default: 60)",
    )

    parser.add_argument(
        "--output-format",
        choices=["json", "pretty"],
        default="pretty",
        help="Output format for the result (default: pretty)",
    )

    args = parser.parse_args()
    if args.max_poll_interval_seconds < args.poll_interval_seconds:
        parser.error("--max-poll-interval-seconds must not be lower than --poll-interval-seconds")

    logger = setup_logging(args.log_level)
    logger.info("Starting resource reconciler from command line")

    config = Config(
        aws_region=args.region,
        log_level=args.log_level,
        max_retries=args.max_retries,
        timeout_seconds=args.timeout_seconds,
        operation_timeout_seconds=args.operation_timeout_seconds,
        poll_interval_seconds=args.poll_interval_seconds,
        max_poll_interval_seconds=args.max_poll_interval_seconds,
    )

    try:
        request = {
            "resource_type": args.resource_type,
            "action": args.action,
            "id": args.id,
            "config": _read_document(args.config_file),
            "state": _read_document(args.state_file),
        }
        result = reconcile(request, build_clients(config), config)
    except (ReconcileError, ValueError, OSError) as e:
        logger.error(f"Error running {args.action}: {str(e)}")
        print(f"ERROR: {str(e)}", file=sys.stderr)
        sys.exit(1)

    if args.output_format == "json":
        print(json.dumps(result, indent=2))
    else:
        print_result(result)
    sys.exit(0)


def print_result(result: Dict[str, Any]) -> None:
    """Print a human-readable reconcile result."""
    print("\n" + "=" * 60)
    print(f"{result['resource_type']} :: {result['action'].upper()}")
    print("=" * 60)

    print(f"\nIdentity: {result.get('id') or '(none)'}")
    print(f"Lifecycle state: {result.get('lifecycle_state')}")

    if "differences" in result:
        differences = result["differences"]
        print(f"\n=== Planned Changes ({len(differences)}) ===")
        if differences:
            for diff in differences:
                print(f"  ~ {diff['attribute']}: {diff['old_value']!r} -> {diff['new_value']!r}")
        else:
            print("No changes. Remote state matches the configuration.")

    state = result.get("state")
    if state:
        print(f"\n=== Observed State ({len(state)} attributes) ===")
        for key in sorted(state):
            print(f"  {key} = {json.dumps(state[key])}")
    elif result["action"] != "plan":
        print("\nEntity is absent.")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
