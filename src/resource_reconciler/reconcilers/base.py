"""
Base Resource Reconciler Module.

This module contains the abstract lifecycle shared by every resource type:
create, read, update, delete and import. Subclasses implement the remote calls
for one resource type; the base class handles validation ordering, lifecycle
state transitions and the treatment of vanished entities.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from ...config import Config
from ...errors import PartialUpdateError, RemoteError, ValidationError
from ...utils import setup_logging
from ..comparators.base import ComparisonResult, compare_scalar
from ..resource_data import LifecycleState, ResourceData
from ..types import DesiredRecord, Difference, RemoteRecord

logger = setup_logging()


@dataclass
class OperationTimeouts:
    """Upper bounds, in seconds, for polling long-running operations."""

    create: float = 1800
    update: float = 1800
    delete: float = 1800


class ResourceReconciler(ABC):
    """
    Drives one resource type's remote state towards its desired state.

    Args:
        conn: Boto3 client for the resource's service
        timeouts: Polling bounds for long-running operations
    """

    resource_type: str = ""
    # Attribute of ProviderClients holding this resource type's client
    service: str = ""
    identity_field: str = ""
    defaults: Dict[str, Any] = {}
    computed: Iterable[str] = ()
    declared_fields: Iterable[str] = ()

    def __init__(self, conn: Any, timeouts: Optional[OperationTimeouts] = None) -> None:
        self.conn = conn
        self.timeouts = timeouts or OperationTimeouts()

    @classmethod
    def from_config(cls, conn: Any, config: Config) -> "ResourceReconciler":
        """Build a reconciler whose polling bounds come from configuration."""
        timeout = config.operation_timeout_seconds
        return cls(conn, OperationTimeouts(create=timeout, update=timeout, delete=timeout))

    def new_resource_data(
        self,
        config: Optional[DesiredRecord] = None,
        state: Optional[RemoteRecord] = None,
        identity: str = "",
    ) -> ResourceData:
        """Build a ResourceData carrying this resource type's defaults."""
        return ResourceData(
            config=config,
            state=state,
            identity=identity,
            defaults=self.defaults,
            computed=self.computed,
        )

    def comparator_for(self, field_name: str) -> Callable[[str, Any, Any], ComparisonResult]:
        return compare_scalar

    def diff(self, data: ResourceData) -> List[Difference]:
        """List declared fields whose desired value differs from the prior state."""
        differences: List[Difference] = []
        for name in self.declared_fields:
            result = self.comparator_for(name)(name, data.prior_state.get(name), data.get(name))
            differences.extend(result.differences)
        return differences

    def create(self, data: ResourceData) -> str:
        """
        Create the entity and populate its computed fields.

        Returns:
            The identity of the created entity

        Raises:
            ValidationError: Before any remote call, if the config is invalid
            RemoteError: If a remote call fails
        """
        identity = str(data.get(self.identity_field) or "")
        self.validate(data, identity)

        previous_state = data.lifecycle_state
        previous_prior_state = data.prior_state
        data.lifecycle_state = LifecycleState.CREATING
        data.is_new_resource = True
        try:
            self._create(data)
            self.read(data)
        except PartialUpdateError:
            # The entity exists and some of its config was applied
            data.lifecycle_state = LifecycleState.PRESENT
            raise
        except Exception:
            data.lifecycle_state = previous_state
            if previous_state is LifecycleState.ABSENT:
                data.set_id("")
                data.prior_state = previous_prior_state
            raise
        finally:
            data.is_new_resource = False
        data.lifecycle_state = LifecycleState.PRESENT
        logger.info(f"{self.resource_type} {data.id} created")
        return data.id

    def read(self, data: ResourceData) -> Optional[RemoteRecord]:
        """
        Refresh the state snapshot from the remote API.

        Returns:
            The observed record, or None when the entity no longer exists

        Raises:
            RemoteError: If a remote call fails, or if the entity is missing
                while it is being created
        """
        found = self._read(data)
        if not found:
            if data.is_new_resource:
                raise RemoteError(
                    "read",
                    data.id,
                    f"{self.resource_type} not found immediately after creation",
                    code="NotFound",
                )
            logger.warning(f"{self.resource_type} {data.id} not found, removing from state")
            data.set_id("")
            data.lifecycle_state = LifecycleState.ABSENT
            return None
        data.prior_state = dict(data.state)
        if data.lifecycle_state is LifecycleState.ABSENT:
            data.lifecycle_state = LifecycleState.PRESENT
        return data.state

    def update(self, data: ResourceData) -> None:
        """
        Apply changed fields to the remote entity, then refresh the snapshot.

        Raises:
            ValidationError: If the config is invalid or would change the identity
            RemoteError: If a remote call fails
        """
        desired_identity = str(data.get(self.identity_field) or "")
        if desired_identity and desired_identity != data.id:
            raise ValidationError(
                "update",
                data.id,
                f"changing `{self.identity_field}` to {desired_identity!r} requires replacement",
            )
        self.validate(data, data.id)

        previous_state = data.lifecycle_state
        data.lifecycle_state = LifecycleState.UPDATING
        try:
            applied = self._update(data)
            if applied:
                self.read(data)
        except Exception:
            data.lifecycle_state = previous_state
            raise
        if data.id:
            data.lifecycle_state = LifecycleState.PRESENT
        if applied:
            logger.info(f"{self.resource_type} {data.id} updated")
        else:
            logger.debug(f"{self.resource_type} {data.id} unchanged, no update issued")

    def delete(self, data: ResourceData) -> None:
        """
        Delete the entity. Deleting an entity that is already gone succeeds.

        Raises:
            RemoteError: If a remote call fails
        """
        previous_state = data.lifecycle_state
        data.lifecycle_state = LifecycleState.DELETING
        try:
            if not self._read(data):
                logger.debug(f"{self.resource_type} {data.id} is already gone")
            else:
                logger.info(f"Deleting {self.resource_type}: {data.id}")
                self._delete(data)
                logger.info(f"{self.resource_type} {data.id} deleted")
        except Exception:
            data.lifecycle_state = previous_state
            raise
        data.set_id("")
        data.lifecycle_state = LifecycleState.ABSENT

    def import_resource(self, identity: str) -> ResourceData:
        """
        Adopt an existing entity by identity.

        Raises:
            RemoteError: If the entity does not exist or a remote call fails
        """
        data = self.new_resource_data(identity=identity)
        if self.read(data) is None:
            raise RemoteError(
                "import", identity, f"{self.resource_type} does not exist", code="NotFound"
            )
        return data

    @abstractmethod
    def validate(self, data: ResourceData, identity: str) -> None:
        """Check cross-field and static constraints; raise ValidationError."""

    @abstractmethod
    def _create(self, data: ResourceData) -> None:
        """Issue the create call(s) and set the identity."""

    @abstractmethod
    def _read(self, data: ResourceData) -> bool:
        """Fetch the entity into data.state. Return False when it does not exist."""

    @abstractmethod
    def _update(self, data: ResourceData) -> bool:
        """Issue update call(s) for changed fields. Return True if any were made."""

    @abstractmethod
    def _delete(self, data: ResourceData) -> None:
        """Issue the delete call(s)."""
