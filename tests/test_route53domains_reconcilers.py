"""
Tests for the Route 53 Domains registered domain reconciler.
"""

import copy
import unittest
from datetime import datetime, timezone
from typing import Any, Dict, List
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from src.errors import (
    OperationFailedError,
    PartialUpdateError,
    RemoteError,
    ValidationError,
)
from src.resource_reconciler.reconcilers.route53domains_reconcilers import (
    Route53DomainsRegisteredDomainReconciler,
)
from src.resource_reconciler.resource_data import LifecycleState

CONTACT = {
    "ContactType": "PERSON",
    "FirstName": "Jane",
    "LastName": "Doe",
    "AddressLine1": "1 Main Street",
    "City": "Seattle",
    "State": "WA",
    "CountryCode": "US",
    "ZipCode": "98101",
    "PhoneNumber": "+1.2065550100",
    "Email": "jane@example.com",
}

DOMAIN_DETAIL = {
    "DomainName": "example.com",
    "Nameservers": [
        {"Name": "ns-1.awsdns-01.org", "GlueIps": []},
        {"Name": "ns-2.awsdns-02.com"},
    ],
    "AutoRenew": True,
    "AdminContact": CONTACT,
    "RegistrantContact": CONTACT,
    "TechContact": CONTACT,
    "AdminPrivacy": True,
    "RegistrantPrivacy": True,
    "TechPrivacy": True,
    "RegistrarName": "Amazon Registrar, Inc.",
    "WhoIsServer": "whois.registrar.amazon.com",
    "RegistrarUrl": "http://registrar.amazon.com",
    "AbuseContactEmail": "abuse@registrar.amazon.com",
    "AbuseContactPhone": "+1.2062661000",
    "CreationDate": datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    "ExpirationDate": datetime(2027, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    "UpdatedDate": datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone.utc),
    "StatusList": ["clientTransferProhibited"],
    "ResponseMetadata": {"HTTPStatusCode": 200},
}

TAGS = [
    {"Key": "Environment", "Value": "prod"},
    {"Key": "aws:cloudformation:stack-name", "Value": "dns"},
]

CURRENT_NAME_SERVERS = [{"name": "ns-1.awsdns-01.org"}, {"name": "ns-2.awsdns-02.com"}]

HOSTMASTER_CONTACT = {
    "contact_type": "PERSON",
    "first_name": "Jane",
    "last_name": "Doe",
    "address_line_1": "1 Main Street",
    "city": "Seattle",
    "state": "WA",
    "country_code": "US",
    "zip_code": "98101",
    "phone_number": "+1.2065550100",
    "email": "hostmaster@example.com",
}

MUTATING_CALLS = (
    "update_domain_contact",
    "update_domain_contact_privacy",
    "enable_domain_auto_renew",
    "disable_domain_auto_renew",
    "update_domain_nameservers",
    "enable_domain_transfer_lock",
    "disable_domain_transfer_lock",
    "update_tags_for_domain",
    "delete_tags_for_domain",
    "delete_domain",
)


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def make_route53domains() -> MagicMock:
    """Build a Route 53 Domains client double whose operations succeed at once."""
    remote: Dict[str, Any] = {"detail": copy.deepcopy(DOMAIN_DETAIL), "tags": copy.deepcopy(TAGS)}
    conn = MagicMock()
    counter = {"next": 0}

    def operation_id() -> Dict[str, str]:
        counter["next"] += 1
        return {"OperationId": f"op-{counter['next']}"}

    def get_domain_detail(DomainName: str) -> Dict[str, Any]:
        if remote["detail"] is None or remote["detail"]["DomainName"] != DomainName:
            raise _client_error(
                "InvalidInput", f"Domain {DomainName} not found in account", "GetDomainDetail"
            )
        return copy.deepcopy(remote["detail"])

    def update_domain_contact(DomainName: str, **contacts: Any) -> Dict[str, str]:
        remote["detail"].update(copy.deepcopy(contacts))
        return operation_id()

    def update_domain_contact_privacy(
        DomainName: str, AdminPrivacy: bool, RegistrantPrivacy: bool, TechPrivacy: bool
    ) -> Dict[str, str]:
        remote["detail"].update(
            AdminPrivacy=AdminPrivacy, RegistrantPrivacy=RegistrantPrivacy, TechPrivacy=TechPrivacy
        )
        return operation_id()

    def set_auto_renew(enabled: bool):
        def call(DomainName: str) -> Dict[str, Any]:
            remote["detail"]["AutoRenew"] = enabled
            return {}

        return call

    def set_transfer_lock(enabled: bool):
        def call(DomainName: str) -> Dict[str, str]:
            statuses = [s for s in remote["detail"]["StatusList"] if s != "clientTransferProhibited"]
            if enabled:
                statuses.append("clientTransferProhibited")
            remote["detail"]["StatusList"] = statuses
            return operation_id()

        return call

    def update_domain_nameservers(DomainName: str, Nameservers: List[Dict[str, Any]]) -> Dict[str, str]:
        remote["detail"]["Nameservers"] = copy.deepcopy(Nameservers)
        return operation_id()

    def list_tags_for_domain(DomainName: str) -> Dict[str, Any]:
        return {"TagList": copy.deepcopy(remote["tags"])}

    def update_tags_for_domain(DomainName: str, TagsToUpdate: List[Dict[str, str]]) -> Dict[str, Any]:
        keys = {tag["Key"] for tag in TagsToUpdate}
        remote["tags"] = [t for t in remote["tags"] if t["Key"] not in keys] + copy.deepcopy(TagsToUpdate)
        return {}

    def delete_tags_for_domain(DomainName: str, TagsToDelete: List[str]) -> Dict[str, Any]:
        remote["tags"] = [t for t in remote["tags"] if t["Key"] not in TagsToDelete]
        return {}

    def delete_domain(DomainName: str) -> Dict[str, str]:
        remote["detail"] = None
        return operation_id()

    conn.get_domain_detail.side_effect = get_domain_detail
    conn.update_domain_contact.side_effect = update_domain_contact
    conn.update_domain_contact_privacy.side_effect = update_domain_contact_privacy
    conn.enable_domain_auto_renew.side_effect = set_auto_renew(True)
    conn.disable_domain_auto_renew.side_effect = set_auto_renew(False)
    conn.enable_domain_transfer_lock.side_effect = set_transfer_lock(True)
    conn.disable_domain_transfer_lock.side_effect = set_transfer_lock(False)
    conn.update_domain_nameservers.side_effect = update_domain_nameservers
    conn.list_tags_for_domain.side_effect = list_tags_for_domain
    conn.update_tags_for_domain.side_effect = update_tags_for_domain
    conn.delete_tags_for_domain.side_effect = delete_tags_for_domain
    conn.delete_domain.side_effect = delete_domain
    conn.get_operation_detail.side_effect = lambda OperationId: {
        "OperationId": OperationId,
        "Status": "SUCCESSFUL",
    }
    conn.remote = remote
    return conn


def mutating_calls(conn: MagicMock) -> List[str]:
    return [name for name, _, _ in conn.method_calls if name in MUTATING_CALLS]


class TestRoute53DomainsRegisteredDomainReconciler(unittest.TestCase):
    """Test the registered domain lifecycle against a client double."""

    def setUp(self) -> None:
        self.conn = make_route53domains()
        self.reconciler = Route53DomainsRegisteredDomainReconciler(self.conn)

    def _imported(self, **config: Any):
        data = self.reconciler.import_resource("example.com")
        data.config = dict(
            {"domain_name": "example.com", "tags": {"Environment": "prod"}}, **config
        )
        return data

    def test_create_adopts_matching_domain_without_mutations(self) -> None:
        data = self.reconciler.new_resource_data(
            config={
                "domain_name": "example.com",
                "name_server": CURRENT_NAME_SERVERS,
                "tags": {"Environment": "prod"},
            }
        )

        self.assertEqual(self.reconciler.create(data), "example.com")

        self.assertEqual(mutating_calls(self.conn), [])
        self.conn.get_operation_detail.assert_not_called()
        self.assertEqual(data.lifecycle_state, LifecycleState.PRESENT)
        self.assertEqual(self.reconciler.diff(data), [])

    def test_read_flattens_domain_detail(self) -> None:
        data = self.reconciler.import_resource("example.com")

        state = data.state
        self.assertEqual(state["creation_date"], "2020-01-02T03:04:05Z")
        self.assertEqual(state["expiration_date"], "2027-01-02T03:04:05Z")
        self.assertEqual(state["tags"], {"Environment": "prod"})
        self.assertEqual(state["tags_all"], {"Environment": "prod"})
        self.assertTrue(state["transfer_lock"])
        self.assertEqual(
            state["name_server"],
            [
                {"name": "ns-1.awsdns-01.org", "glue_ips": []},
                {"name": "ns-2.awsdns-02.com", "glue_ips": []},
            ],
        )
        self.assertEqual(state["admin_contact"][0]["email"], "jane@example.com")
        self.assertEqual(state["admin_contact"][0]["extra_params"], {})
        self.assertEqual(state["registrar_name"], "Amazon Registrar, Inc.")
        self.assertNotIn("ResponseMetadata", state)

    def test_create_applies_only_differing_aspects(self) -> None:
        data = self.reconciler.new_resource_data(
            config={
                "domain_name": "example.com",
                "name_server": [
                    {"name": "ns1.example.net"},
                    {"name": "ns2.example.net"},
                ],
                "tags": {"Environment": "staging", "Team": "web"},
            }
        )

        self.reconciler.create(data)

        self.assertEqual(
            mutating_calls(self.conn), ["update_domain_nameservers", "update_tags_for_domain"]
        )
        self.conn.update_domain_nameservers.assert_called_once_with(
            DomainName="example.com",
            Nameservers=[{"Name": "ns1.example.net"}, {"Name": "ns2.example.net"}],
        )
        self.conn.update_tags_for_domain.assert_called_once_with(
            DomainName="example.com",
            TagsToUpdate=[
                {"Key": "Environment", "Value": "staging"},
                {"Key": "Team", "Value": "web"},
            ],
        )
        self.conn.get_operation_detail.assert_called_once_with(OperationId="op-1")
        self.assertEqual(data.state["tags"], {"Environment": "staging", "Team": "web"})
        self.assertEqual(data.state["name_server"][0]["name"], "ns1.example.net")

    def test_create_unregistered_domain(self) -> None:
        data = self.reconciler.new_resource_data(config={"domain_name": "example.org"})

        with self.assertRaises(RemoteError) as context:
            self.reconciler.create(data)

        self.assertEqual(context.exception.code, "NotFound")
        self.assertEqual(data.id, "")
        self.assertEqual(data.lifecycle_state, LifecycleState.ABSENT)
        self.assertEqual(mutating_calls(self.conn), [])

    def test_update_only_auto_renew(self) -> None:
        data = self._imported(auto_renew=False)

        self.reconciler.update(data)

        self.assertEqual(mutating_calls(self.conn), ["disable_domain_auto_renew"])
        self.conn.get_operation_detail.assert_not_called()
        self.assertFalse(data.state["auto_renew"])
        self.assertEqual(data.lifecycle_state, LifecycleState.PRESENT)

    def test_update_without_changes_makes_no_calls(self) -> None:
        data = self._imported()
        calls_before = len(self.conn.method_calls)

        self.reconciler.update(data)

        self.assertEqual(len(self.conn.method_calls), calls_before)
        self.assertEqual(data.lifecycle_state, LifecycleState.PRESENT)

    def test_update_sends_only_changed_contact(self) -> None:
        admin = dict(HOSTMASTER_CONTACT)
        data = self._imported(admin_contact=[admin])

        self.reconciler.update(data)

        self.assertEqual(mutating_calls(self.conn), ["update_domain_contact"])
        kwargs = self.conn.update_domain_contact.call_args.kwargs
        self.assertEqual(set(kwargs), {"DomainName", "AdminContact"})
        self.assertEqual(kwargs["AdminContact"]["Email"], "hostmaster@example.com")
        self.assertEqual(data.state["admin_contact"][0]["email"], "hostmaster@example.com")
        self.assertEqual(data.state["tech_contact"][0]["email"], "jane@example.com")

    def test_update_removes_tags(self) -> None:
        data = self._imported(tags={})

        self.reconciler.update(data)

        self.conn.delete_tags_for_domain.assert_called_once_with(
            DomainName="example.com", TagsToDelete=["Environment"]
        )
        self.conn.update_tags_for_domain.assert_not_called()
        self.assertEqual(data.state["tags"], {})

    def test_partial_update_failure(self) -> None:
        self.conn.update_domain_nameservers.side_effect = _client_error(
            "InvalidInput", "Name server ns1.invalid is not reachable", "UpdateDomainNameservers"
        )
        data = self._imported(
            auto_renew=False,
            name_server=[{"name": "ns1.invalid"}],
            transfer_lock=False,
        )

        with self.assertRaises(PartialUpdateError) as context:
            self.reconciler.update(data)

        error = context.exception
        self.assertEqual(error.applied, ["auto_renew"])
        self.assertEqual(error.failed, "name_server")
        self.assertEqual(error.pending, ["transfer_lock"])
        self.assertEqual(error.code, "InvalidInput")
        self.assertIsInstance(error.cause, RemoteError)
        self.conn.disable_domain_transfer_lock.assert_not_called()
        # auto_renew stays applied
        self.assertFalse(self.conn.remote["detail"]["AutoRenew"])
        self.assertEqual(data.lifecycle_state, LifecycleState.PRESENT)
        self.assertFalse(data.state["auto_renew"])
        self.assertFalse(data.prior_state["auto_renew"])
        self.assertFalse(error.state["auto_renew"])

    def test_retry_after_partial_failure_skips_applied_aspects(self) -> None:
        admin = dict(HOSTMASTER_CONTACT)
        disable_auto_renew = self.conn.disable_domain_auto_renew.side_effect
        self.conn.disable_domain_auto_renew.side_effect = _client_error(
            "InternalFailure", "Try again later", "DisableDomainAutoRenew"
        )
        data = self._imported(admin_contact=[admin], auto_renew=False)

        with self.assertRaises(PartialUpdateError) as context:
            self.reconciler.update(data)
        self.assertEqual(context.exception.applied, ["contacts"])
        self.assertEqual(data.prior_state["admin_contact"][0]["email"], "hostmaster@example.com")

        self.conn.disable_domain_auto_renew.side_effect = disable_auto_renew
        self.reconciler.update(data)

        self.assertEqual(self.conn.update_domain_contact.call_count, 1)
        self.assertEqual(self.conn.disable_domain_auto_renew.call_count, 2)
        self.assertFalse(data.state["auto_renew"])
        self.assertEqual(data.lifecycle_state, LifecycleState.PRESENT)

    def test_partial_failure_during_create_keeps_domain_present(self) -> None:
        self.conn.update_tags_for_domain.side_effect = _client_error(
            "InvalidInput", "Tag value is too long", "UpdateTagsForDomain"
        )
        data = self.reconciler.new_resource_data(
            config={"domain_name": "example.com", "auto_renew": False, "tags": {"Team": "web"}}
        )

        with self.assertRaises(PartialUpdateError) as context:
            self.reconciler.create(data)

        self.assertEqual(context.exception.applied, ["auto_renew"])
        self.assertEqual(context.exception.failed, "tags")
        self.assertEqual(data.id, "example.com")
        self.assertEqual(data.lifecycle_state, LifecycleState.PRESENT)
        self.assertFalse(data.prior_state["auto_renew"])

    def test_failure_before_any_aspect_during_create_leaves_domain_absent(self) -> None:
        self.conn.disable_domain_auto_renew.side_effect = _client_error(
            "TLDRulesViolation", "Auto-renew cannot be disabled", "DisableDomainAutoRenew"
        )
        data = self.reconciler.new_resource_data(
            config={"domain_name": "example.com", "auto_renew": False, "tags": {"Environment": "prod"}}
        )

        with self.assertRaises(RemoteError):
            self.reconciler.create(data)

        self.assertEqual(data.id, "")
        self.assertEqual(data.lifecycle_state, LifecycleState.ABSENT)

    def test_first_aspect_failure_is_not_partial(self) -> None:
        self.conn.disable_domain_auto_renew.side_effect = _client_error(
            "TLDRulesViolation", "Auto-renew cannot be disabled", "DisableDomainAutoRenew"
        )
        data = self._imported(auto_renew=False, transfer_lock=False)

        with self.assertRaises(RemoteError) as context:
            self.reconciler.update(data)

        self.assertNotIsInstance(context.exception, PartialUpdateError)
        self.assertEqual(context.exception.code, "TLDRulesViolation")
        self.conn.disable_domain_transfer_lock.assert_not_called()

    def test_failed_operation(self) -> None:
        self.conn.get_operation_detail.side_effect = lambda OperationId: {
            "OperationId": OperationId,
            "Status": "ERROR",
            "Message": "Registry unavailable",
        }
        data = self._imported(transfer_lock=False)

        with self.assertRaises(OperationFailedError) as context:
            self.reconciler.update(data)

        self.assertEqual(context.exception.status, "ERROR")
        self.assertEqual(context.exception.operation, "update domain transfer lock")

    def test_read_missing_domain(self) -> None:
        data = self.reconciler.import_resource("example.com")
        self.conn.remote["detail"] = None

        self.assertIsNone(self.reconciler.read(data))
        self.assertEqual(data.id, "")
        self.assertEqual(data.lifecycle_state, LifecycleState.ABSENT)

    def test_read_other_errors_propagate(self) -> None:
        self.conn.get_domain_detail.side_effect = _client_error(
            "InvalidInput", "Domain name is malformed", "GetDomainDetail"
        )
        data = self.reconciler.new_resource_data(identity="example..com")

        with self.assertRaises(RemoteError):
            self.reconciler.read(data)

    def test_delete(self) -> None:
        data = self.reconciler.import_resource("example.com")

        self.reconciler.delete(data)

        self.conn.delete_domain.assert_called_once_with(DomainName="example.com")
        self.conn.get_operation_detail.assert_called_once_with(OperationId="op-1")
        self.assertEqual(data.id, "")
        self.assertEqual(data.lifecycle_state, LifecycleState.ABSENT)

    def test_delete_already_absent(self) -> None:
        self.conn.remote["detail"] = None
        data = self.reconciler.new_resource_data(identity="example.com")

        self.reconciler.delete(data)

        self.conn.delete_domain.assert_not_called()
        self.assertEqual(data.lifecycle_state, LifecycleState.ABSENT)

    def test_too_many_name_servers(self) -> None:
        data = self.reconciler.new_resource_data(
            config={
                "domain_name": "example.com",
                "name_server": [{"name": f"ns{i}.example.net"} for i in range(7)],
            }
        )

        with self.assertRaises(ValidationError):
            self.reconciler.create(data)
        self.assertEqual(self.conn.method_calls, [])

    def test_invalid_glue_ip(self) -> None:
        data = self.reconciler.new_resource_data(
            config={
                "domain_name": "example.com",
                "name_server": [{"name": "ns1.example.com", "glue_ips": ["999.1.1.1"]}],
            }
        )

        with self.assertRaises(ValidationError) as context:
            self.reconciler.create(data)
        self.assertIn("999.1.1.1", str(context.exception))
        self.assertEqual(self.conn.method_calls, [])


if __name__ == "__main__":
    unittest.main()
