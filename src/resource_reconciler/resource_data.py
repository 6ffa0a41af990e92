"""
Working record passed to every lifecycle operation.

ResourceData pairs the desired configuration with the last known state
snapshot of one managed entity, and tracks its identity and lifecycle state.
Reads write observed values into a fresh state snapshot; the prior snapshot is
kept so that updates can tell which fields changed.
"""

import copy
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Tuple

from .comparators.base import ComparisonResult, compare_scalar, is_unset
from .types import DesiredRecord, FieldValue, RemoteRecord

Comparator = Callable[[str, Any, Any], ComparisonResult]


class LifecycleState(str, Enum):
    """Lifecycle of a managed entity. PRESENT and ABSENT are the stable states."""

    ABSENT = "absent"
    CREATING = "creating"
    PRESENT = "present"
    UPDATING = "updating"
    DELETING = "deleting"


class ResourceData:
    """
    Desired config, prior state and identity of a single managed entity.

    Args:
        config: Desired record from configuration
        state: Prior state snapshot (as written by the last read)
        identity: Identity of the entity, empty when not yet created
        defaults: Values used for fields the config leaves unset
        computed: Optional fields whose value falls back to the prior state
            when the config leaves them unset
        is_new_resource: True while the entity is being created
    """

    def __init__(
        self,
        config: Optional[DesiredRecord] = None,
        state: Optional[RemoteRecord] = None,
        identity: str = "",
        defaults: Optional[DesiredRecord] = None,
        computed: Iterable[str] = (),
        is_new_resource: bool = False,
    ) -> None:
        self.config: DesiredRecord = dict(config or {})
        self.prior_state: RemoteRecord = copy.deepcopy(dict(state or {}))
        self.state: RemoteRecord = copy.deepcopy(self.prior_state)
        self.defaults: DesiredRecord = dict(defaults or {})
        self.computed: FrozenSet[str] = frozenset(computed)
        self.is_new_resource = is_new_resource
        self._id = identity
        if identity:
            self.lifecycle_state = LifecycleState.PRESENT
        else:
            self.lifecycle_state = LifecycleState.ABSENT

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, identity: str) -> None:
        """Set the identity. An empty identity marks the entity as gone."""
        self._id = identity
        if not identity:
            self.state = {}

    def get(self, key: str) -> FieldValue:
        """Desired value of a field, falling back to defaults then computed state."""
        value = self.config.get(key)
        if value is not None:
            return value
        if key in self.defaults:
            return copy.deepcopy(self.defaults[key])
        if key in self.computed:
            return self.prior_state.get(key)
        return None

    def get_ok(self, key: str) -> Tuple[FieldValue, bool]:
        """Return the desired value and whether it is set to a non-zero value."""
        value = self.get(key)
        if isinstance(value, bool):
            return value, value
        if isinstance(value, (int, float)):
            return value, value != 0
        return value, not is_unset(value)

    def has_change(self, key: str, comparator: Optional[Comparator] = None) -> bool:
        """
        Whether the desired value of a field differs from the prior state.

        Args:
            key: Field name
            comparator: Explicit comparator for nested structures; plain
                equality (with unset values treated as equal) otherwise
        """
        compare = comparator or compare_scalar
        return compare(key, self.prior_state.get(key), self.get(key)).changed

    def has_changes(
        self, *keys: str, comparator_for: Optional[Callable[[str], Comparator]] = None
    ) -> bool:
        """Whether any of the fields changed, comparing each with comparator_for(key)."""
        return any(
            self.has_change(key, comparator_for(key) if comparator_for else None)
            for key in keys
        )

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the record for callers and entry points."""
        return {
            "id": self._id,
            "state": copy.deepcopy(self.state) if self._id else None,
            "lifecycle_state": self.lifecycle_state.value,
        }
