"""
Base Comparators Module.

Explicit, field-by-field comparison helpers shared by the service-specific
comparators. Every comparator returns a ComparisonResult instead of a bare
boolean so that callers can log exactly which attributes differ.

Key points:
- Unset values (None, "", [], {}) are treated as equal to one another.
- Set-typed attributes are compared without regard to order.
- Map-typed attributes are compared key by key.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..types import Difference


class Change(str, Enum):
    """Outcome of comparing a desired value against an observed one."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"


@dataclass
class ComparisonResult:
    """Typed result of a comparator, with the differing attributes listed."""

    change: Change
    differences: List[Difference] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.change is Change.CHANGED

    @classmethod
    def from_differences(cls, differences: List[Difference]) -> "ComparisonResult":
        return cls(Change.CHANGED if differences else Change.UNCHANGED, differences)


UNCHANGED = ComparisonResult(Change.UNCHANGED)


def is_unset(value: Any) -> bool:
    """Return True for values that carry no information (None or empty)."""
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def difference(attribute: str, old_value: Any, new_value: Any) -> Difference:
    return {"attribute": attribute, "old_value": old_value, "new_value": new_value}


def compare_scalar(attribute: str, old_value: Any, new_value: Any) -> ComparisonResult:
    """Compare two plain values, treating every unset value as equal."""
    if is_unset(old_value) and is_unset(new_value):
        return UNCHANGED
    if old_value == new_value:
        return UNCHANGED
    return ComparisonResult(Change.CHANGED, [difference(attribute, old_value, new_value)])


def compare_string_sets(
    attribute: str, old_value: Optional[Iterable[str]], new_value: Optional[Iterable[str]]
) -> ComparisonResult:
    """Compare two collections of strings as unordered sets."""
    old_set = set(old_value or [])
    new_set = set(new_value or [])
    if old_set == new_set:
        return UNCHANGED
    return ComparisonResult(
        Change.CHANGED,
        [difference(attribute, sorted(old_set), sorted(new_set))],
    )


def compare_string_maps(
    attribute: str,
    old_value: Optional[Mapping[str, Any]],
    new_value: Optional[Mapping[str, Any]],
) -> ComparisonResult:
    """Compare two string maps key by key; one difference entry per key."""
    old_map: Dict[str, Any] = dict(old_value or {})
    new_map: Dict[str, Any] = dict(new_value or {})
    differences = []
    for key in sorted(set(old_map) | set(new_map)):
        old_item = old_map.get(key)
        new_item = new_map.get(key)
        if old_item != new_item:
            differences.append(difference(f"{attribute}.{key}", old_item, new_item))
    return ComparisonResult.from_differences(differences)


def merge_results(*results: ComparisonResult) -> ComparisonResult:
    differences: List[Difference] = []
    for result in results:
        differences.extend(result.differences)
    return ComparisonResult.from_differences(differences)
