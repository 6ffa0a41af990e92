"""
Route 53 Domains Comparators Module.

This module contains functions for comparing desired domain aspects with the
observed ones. Each aspect has its own comparator so that updates only touch
the aspects that actually differ.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..flatteners.route53domains_flatteners import CONTACT_FIELDS, contact_block
from .base import (
    ComparisonResult,
    compare_scalar,
    compare_string_maps,
    compare_string_sets,
    merge_results,
)


def compare_contact_detail(
    attribute: str, old_value: Any, new_value: Any
) -> ComparisonResult:
    """
    Compare two contact blocks field by field.

    Both sides may be given either as a contact dict or as the single-element
    list used in configuration. A missing desired contact is never reported
    as a change, since the registry always holds one.
    """
    old_contact = contact_block(old_value) or {}
    new_contact = contact_block(new_value)
    if new_contact is None:
        return ComparisonResult.from_differences([])

    results = [
        compare_scalar(f"{attribute}.{name}", old_contact.get(name), new_contact.get(name))
        for name in CONTACT_FIELDS
    ]
    results.append(
        compare_string_maps(
            f"{attribute}.extra_params",
            old_contact.get("extra_params"),
            new_contact.get("extra_params"),
        )
    )
    return merge_results(*results)


def compare_nameservers(
    attribute: str,
    old_value: Optional[List[Mapping[str, Any]]],
    new_value: Optional[List[Mapping[str, Any]]],
) -> ComparisonResult:
    """
    Compare two name_server lists.

    Order is significant for the list itself; glue IPs are compared as a set.
    An empty desired list means the name servers are not managed.
    """
    old_servers = list(old_value or [])
    new_servers = list(new_value or [])
    if not new_servers:
        return ComparisonResult.from_differences([])
    if len(old_servers) != len(new_servers):
        return ComparisonResult.from_differences(
            [
                {
                    "attribute": attribute,
                    "old_value": [server.get("name") for server in old_servers],
                    "new_value": [server.get("name") for server in new_servers],
                }
            ]
        )

    results = []
    for index, (old_server, new_server) in enumerate(zip(old_servers, new_servers)):
        results.append(
            compare_scalar(f"{attribute}.{index}.name", old_server.get("name"), new_server.get("name"))
        )
        results.append(
            compare_string_sets(
                f"{attribute}.{index}.glue_ips",
                old_server.get("glue_ips"),
                new_server.get("glue_ips"),
            )
        )
    return merge_results(*results)


def compare_tags(
    attribute: str, old_value: Optional[Mapping[str, Any]], new_value: Optional[Mapping[str, Any]]
) -> ComparisonResult:
    return compare_string_maps(attribute, old_value, new_value)


def diff_tags(
    old_tags: Optional[Mapping[str, Any]], new_tags: Optional[Mapping[str, Any]]
) -> Tuple[Dict[str, str], List[str]]:
    """
    Work out which tags to write and which to remove.

    Returns:
        Tuple of (tags to create or overwrite, keys to delete)
    """
    old_map = dict(old_tags or {})
    new_map = dict(new_tags or {})
    updates = {
        key: str(value)
        for key, value in new_map.items()
        if key not in old_map or str(old_map[key]) != str(value)
    }
    removals = sorted(key for key in old_map if key not in new_map)
    return updates, removals
