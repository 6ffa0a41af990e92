"""
Static field validators.

These cover single-field rules (ranges, enumerations, formats). Cross-field
rules live with each reconciler. Every validator raises ValidationError.
"""

import ipaddress
import re
from typing import Any, Iterable, Sequence

from ..errors import ValidationError

ARN_PATTERN = re.compile(r"^arn:[\w-]+:[\w-]+:[\w-]*:[\w-]*:.+$")


def int_at_least(operation: str, identity: str, name: str, value: Any, minimum: int) -> None:
    if value is None:
        return
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        raise ValidationError(operation, identity, f"`{name}` must be an integer >= {minimum}, got {value!r}")


def number(operation: str, identity: str, name: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(operation, identity, f"`{name}` must be a number, got {value!r}")


def string_in_slice(
    operation: str,
    identity: str,
    name: str,
    value: Any,
    allowed: Sequence[str],
    ignore_case: bool = False,
) -> None:
    if value is None or value == "":
        return
    candidates = [item.lower() for item in allowed] if ignore_case else list(allowed)
    candidate = value.lower() if ignore_case and isinstance(value, str) else value
    if candidate not in candidates:
        raise ValidationError(
            operation, identity, f"`{name}` must be one of {', '.join(allowed)}, got {value!r}"
        )


def arns(operation: str, identity: str, name: str, values: Iterable[str]) -> None:
    for value in values or []:
        if not isinstance(value, str) or not ARN_PATTERN.match(value):
            raise ValidationError(operation, identity, f"`{name}` entry {value!r} is not a valid ARN")


def ip_addresses(operation: str, identity: str, name: str, values: Iterable[str]) -> None:
    for value in values or []:
        try:
            ipaddress.ip_address(value)
        except ValueError:
            raise ValidationError(operation, identity, f"`{name}` entry {value!r} is not an IP address")


def max_items(operation: str, identity: str, name: str, values: Sequence[Any], limit: int) -> None:
    if values and len(values) > limit:
        raise ValidationError(
            operation, identity, f"`{name}` accepts at most {limit} items, got {len(values)}"
        )
