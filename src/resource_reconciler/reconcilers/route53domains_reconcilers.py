"""
Route 53 Domains Reconcilers Module.

This module reconciles aws_route53domains_registered_domain resources. A
registered domain is adopted rather than created: the domain must already be
registered in the account. Its aspects (contacts, contact privacy, auto-renew,
name servers, transfer lock and tags) are updated independently and only
when they differ, so that unrelated changes never trigger side effects such
as contact email verification.
"""

from typing import Any, Callable, Dict, List, Optional

from botocore.exceptions import ClientError

from ...config import Config
from ...errors import (
    OperationTimeoutError,
    PartialUpdateError,
    ReconcileError,
    RemoteError,
    ValidationError,
)
from ...utils import remote_operation, setup_logging
from .. import validators
from ..comparators.base import ComparisonResult, compare_scalar
from ..comparators.route53domains_comparators import (
    compare_contact_detail,
    compare_nameservers,
    compare_tags,
    diff_tags,
)
from ..flatteners.route53domains_flatteners import (
    contact_block,
    expand_contact_detail,
    expand_nameservers,
    expand_tags,
    flatten_domain_detail,
    flatten_tags,
)
from ..resource_data import ResourceData
from ..types import ApiPayload, RemoteRecord, Route53DomainsClient
from ..waiters import PollSettings, wait_for_operation
from .base import OperationTimeouts, ResourceReconciler

logger = setup_logging()

OPERATION = "validate registered domain"

CONTACT_KEYS = ("admin_contact", "registrant_contact", "tech_contact")
PRIVACY_KEYS = ("admin_privacy", "registrant_privacy", "tech_privacy")

# Aspects in the order they are applied
ASPECTS = ("contacts", "contact_privacy", "auto_renew", "name_server", "transfer_lock", "tags")

MAX_NAME_SERVERS = 6
MAX_GLUE_IPS = 2


@remote_operation("get domain detail")
def find_domain_detail(conn: Route53DomainsClient, domain_name: str) -> Optional[ApiPayload]:
    """Return the domain detail, or None if the domain is not registered here."""
    try:
        response = conn.get_domain_detail(DomainName=domain_name)
    except ClientError as e:
        error = e.response.get("Error", {})
        if error.get("Code") == "InvalidInput" and "not found" in error.get("Message", "").lower():
            return None
        raise
    response.pop("ResponseMetadata", None)
    return response


@remote_operation("update domain contact")
def update_domain_contact(
    conn: Route53DomainsClient, domain_name: str, contacts: Dict[str, ApiPayload]
) -> str:
    response = conn.update_domain_contact(DomainName=domain_name, **contacts)
    return response["OperationId"]


@remote_operation("update domain contact privacy")
def update_domain_contact_privacy(
    conn: Route53DomainsClient, domain_name: str, admin: bool, registrant: bool, tech: bool
) -> str:
    response = conn.update_domain_contact_privacy(
        DomainName=domain_name,
        AdminPrivacy=admin,
        RegistrantPrivacy=registrant,
        TechPrivacy=tech,
    )
    return response["OperationId"]


@remote_operation("update domain auto renew")
def set_domain_auto_renew(conn: Route53DomainsClient, domain_name: str, enabled: bool) -> None:
    if enabled:
        conn.enable_domain_auto_renew(DomainName=domain_name)
    else:
        conn.disable_domain_auto_renew(DomainName=domain_name)


@remote_operation("update domain nameservers")
def update_domain_nameservers(
    conn: Route53DomainsClient, domain_name: str, nameservers: List[ApiPayload]
) -> str:
    response = conn.update_domain_nameservers(DomainName=domain_name, Nameservers=nameservers)
    return response["OperationId"]


@remote_operation("update domain transfer lock")
def set_domain_transfer_lock(conn: Route53DomainsClient, domain_name: str, enabled: bool) -> str:
    if enabled:
        response = conn.enable_domain_transfer_lock(DomainName=domain_name)
    else:
        response = conn.disable_domain_transfer_lock(DomainName=domain_name)
    return response["OperationId"]


@remote_operation("delete domain")
def delete_domain(conn: Route53DomainsClient, domain_name: str) -> str:
    response = conn.delete_domain(DomainName=domain_name)
    return response["OperationId"]


@remote_operation("list tags for domain")
def list_domain_tags(conn: Route53DomainsClient, domain_name: str) -> Dict[str, str]:
    response = conn.list_tags_for_domain(DomainName=domain_name)
    return flatten_tags(response.get("TagList"))


@remote_operation("update tags for domain")
def update_domain_tags(
    conn: Route53DomainsClient, domain_name: str, updates: Dict[str, str], removals: List[str]
) -> None:
    if removals:
        conn.delete_tags_for_domain(DomainName=domain_name, TagsToDelete=removals)
    if updates:
        conn.update_tags_for_domain(DomainName=domain_name, TagsToUpdate=expand_tags(updates))


class Route53DomainsRegisteredDomainReconciler(ResourceReconciler):
    """Reconciler for aws_route53domains_registered_domain."""

    resource_type = "aws_route53domains_registered_domain"
    service = "route53domains"
    identity_field = "domain_name"
    defaults = {
        "admin_privacy": True,
        "auto_renew": True,
        "registrant_privacy": True,
        "tech_privacy": True,
        "transfer_lock": True,
    }
    computed = ("name_server",)
    declared_fields = (
        "admin_contact",
        "admin_privacy",
        "auto_renew",
        "domain_name",
        "name_server",
        "registrant_contact",
        "registrant_privacy",
        "tags",
        "tech_contact",
        "tech_privacy",
        "transfer_lock",
    )

    def __init__(
        self,
        conn: Route53DomainsClient,
        timeouts: Optional[OperationTimeouts] = None,
        poll_settings: Optional[PollSettings] = None,
    ) -> None:
        super().__init__(conn, timeouts)
        self.poll_settings = poll_settings or PollSettings()

    @classmethod
    def from_config(
        cls, conn: Route53DomainsClient, config: Config
    ) -> "Route53DomainsRegisteredDomainReconciler":
        timeout = config.operation_timeout_seconds
        return cls(
            conn,
            OperationTimeouts(create=timeout, update=timeout, delete=timeout),
            PollSettings(
                interval_seconds=config.poll_interval_seconds,
                max_interval_seconds=config.max_poll_interval_seconds,
            ),
        )

    def comparator_for(self, field_name: str) -> Callable[[str, Any, Any], ComparisonResult]:
        if field_name in CONTACT_KEYS:
            return compare_contact_detail
        if field_name == "name_server":
            return compare_nameservers
        if field_name == "tags":
            return compare_tags
        return compare_scalar

    def validate(self, data: ResourceData, identity: str) -> None:
        if not identity:
            raise ValidationError(OPERATION, identity, "`domain_name` is required")

        for key in CONTACT_KEYS:
            value = data.config.get(key)
            if isinstance(value, list):
                validators.max_items(OPERATION, identity, key, value, 1)

        name_servers = data.config.get("name_server") or []
        validators.max_items(OPERATION, identity, "name_server", name_servers, MAX_NAME_SERVERS)
        for index, name_server in enumerate(name_servers):
            if not name_server.get("name"):
                raise ValidationError(OPERATION, identity, f"`name_server.{index}.name` is required")
            glue_ips = name_server.get("glue_ips") or []
            validators.max_items(OPERATION, identity, f"name_server.{index}.glue_ips", glue_ips, MAX_GLUE_IPS)
            validators.ip_addresses(OPERATION, identity, f"name_server.{index}.glue_ips", glue_ips)

    def _observe(self, domain_name: str) -> Optional[RemoteRecord]:
        detail = find_domain_detail(self.conn, domain_name)
        if detail is None:
            return None
        record = flatten_domain_detail(detail)
        tags = list_domain_tags(self.conn, domain_name)
        record["tags"] = tags
        record["tags_all"] = dict(tags)
        return record

    def _changed_aspects(self, data: ResourceData) -> List[str]:
        """List the aspects whose desired value differs from the last known state."""
        checks = {
            "contacts": data.has_changes(*CONTACT_KEYS, comparator_for=self.comparator_for),
            "contact_privacy": data.has_changes(*PRIVACY_KEYS),
            "auto_renew": data.has_change("auto_renew"),
            "name_server": data.has_change("name_server", compare_nameservers),
            "transfer_lock": data.has_change("transfer_lock"),
            "tags": data.has_change("tags", compare_tags),
        }
        return [aspect for aspect in ASPECTS if checks[aspect]]

    def _wait(self, operation: str, domain_name: str, operation_id: str, timeout: float) -> None:
        wait_for_operation(
            self.conn, domain_name, operation, operation_id, timeout, self.poll_settings
        )

    def _apply_aspect(self, data: ResourceData, aspect: str, timeout: float) -> None:
        domain_name = data.id
        baseline = data.prior_state
        if aspect == "contacts":
            contacts = {}
            for key, api_key in zip(CONTACT_KEYS, ("AdminContact", "RegistrantContact", "TechContact")):
                if data.has_change(key, compare_contact_detail):
                    contacts[api_key] = expand_contact_detail(contact_block(data.get(key)) or {})
            operation_id = update_domain_contact(self.conn, domain_name, contacts)
            self._wait("update domain contact", domain_name, operation_id, timeout)
        elif aspect == "contact_privacy":
            operation_id = update_domain_contact_privacy(
                self.conn,
                domain_name,
                bool(data.get("admin_privacy")),
                bool(data.get("registrant_privacy")),
                bool(data.get("tech_privacy")),
            )
            self._wait("update domain contact privacy", domain_name, operation_id, timeout)
        elif aspect == "auto_renew":
            set_domain_auto_renew(self.conn, domain_name, bool(data.get("auto_renew")))
        elif aspect == "name_server":
            nameservers = expand_nameservers(data.get("name_server") or [])
            operation_id = update_domain_nameservers(self.conn, domain_name, nameservers)
            self._wait("update domain nameservers", domain_name, operation_id, timeout)
        elif aspect == "transfer_lock":
            operation_id = set_domain_transfer_lock(
                self.conn, domain_name, bool(data.get("transfer_lock"))
            )
            self._wait("update domain transfer lock", domain_name, operation_id, timeout)
        elif aspect == "tags":
            updates, removals = diff_tags(baseline.get("tags"), data.get("tags"))
            update_domain_tags(self.conn, domain_name, updates, removals)

    def _refresh_after_partial_update(self, data: ResourceData) -> None:
        """
        Re-read the domain after some aspects were applied.

        The prior state then reflects what the registry now holds, so a retry
        only re-sends the aspects that did not go through.
        """
        try:
            found = self._read(data)
        except ReconcileError as e:
            logger.warning(f"Could not refresh Route 53 Domains Domain {data.id}: {str(e)}")
            return
        if found:
            data.prior_state = dict(data.state)

    def _apply_aspects(
        self, data: ResourceData, aspects: List[str], operation: str, timeout: float
    ) -> None:
        """
        Apply aspects in order, stopping at the first failure.

        Aspects already applied are not rolled back. When at least one aspect
        was applied before the failure, the domain is re-read and the error is
        raised as a PartialUpdateError listing applied, failed and pending
        aspects along with the refreshed state.
        """
        applied: List[str] = []
        for index, aspect in enumerate(aspects):
            logger.debug(f"Applying {aspect} to Route 53 Domains Domain {data.id}")
            try:
                self._apply_aspect(data, aspect, timeout)
            except (RemoteError, OperationTimeoutError) as e:
                if not applied:
                    raise
                self._refresh_after_partial_update(data)
                raise PartialUpdateError(
                    operation,
                    data.id,
                    applied,
                    aspect,
                    aspects[index + 1:],
                    e,
                    state=dict(data.state),
                ) from e
            applied.append(aspect)

    def _create(self, data: ResourceData) -> None:
        domain_name = str(data.get("domain_name"))
        observed = self._observe(domain_name)
        if observed is None:
            raise RemoteError(
                "create",
                domain_name,
                "domain is not registered in this account",
                code="NotFound",
            )
        data.set_id(str(observed["domain_name"]))
        data.state = observed
        data.prior_state = dict(observed)

        aspects = self._changed_aspects(data)
        if aspects:
            logger.info(f"Route 53 Domains Domain {data.id}: applying {', '.join(aspects)}")
        self._apply_aspects(data, aspects, "create", self.timeouts.create)

    def _read(self, data: ResourceData) -> bool:
        observed = self._observe(data.id)
        if observed is None:
            return False
        data.state = observed
        return True

    def _update(self, data: ResourceData) -> bool:
        aspects = self._changed_aspects(data)
        if not aspects:
            return False
        logger.info(f"Route 53 Domains Domain {data.id}: updating {', '.join(aspects)}")
        self._apply_aspects(data, aspects, "update", self.timeouts.update)
        return True

    def _delete(self, data: ResourceData) -> None:
        operation_id = delete_domain(self.conn, data.id)
        self._wait("delete domain", data.id, operation_id, self.timeouts.delete)
