"""
Route 53 Domains Flatteners Module.

Expanders build request structures from desired fields and flatteners map
GetDomainDetail responses back onto them.
"""

from typing import Any, Dict, List, Mapping, Optional

from ...utils import format_rfc3339
from ..types import ApiPayload, RemoteRecord

TRANSFER_LOCK_STATUS = "clientTransferProhibited"

# Contact field name -> ContactDetail key
CONTACT_FIELDS = {
    "address_line_1": "AddressLine1",
    "address_line_2": "AddressLine2",
    "city": "City",
    "contact_type": "ContactType",
    "country_code": "CountryCode",
    "email": "Email",
    "fax": "Fax",
    "first_name": "FirstName",
    "last_name": "LastName",
    "organization_name": "OrganizationName",
    "phone_number": "PhoneNumber",
    "state": "State",
    "zip_code": "ZipCode",
}


def expand_contact_detail(contact: Mapping[str, Any]) -> ApiPayload:
    """Build a ContactDetail, leaving out fields that are not set."""
    detail: ApiPayload = {}
    for field_name, api_key in CONTACT_FIELDS.items():
        value = contact.get(field_name)
        if value:
            detail[api_key] = value
    extra_params = contact.get("extra_params") or {}
    if extra_params:
        detail["ExtraParams"] = [
            {"Name": name, "Value": str(value)} for name, value in sorted(extra_params.items())
        ]
    return detail


def flatten_contact_detail(detail: ApiPayload) -> Dict[str, Any]:
    contact: Dict[str, Any] = {
        field_name: detail.get(api_key, "") for field_name, api_key in CONTACT_FIELDS.items()
    }
    contact["extra_params"] = {
        param["Name"]: param["Value"] for param in detail.get("ExtraParams") or []
    }
    return contact


def contact_block(value: Any) -> Optional[Dict[str, Any]]:
    """Unwrap the single-element contact list used in configuration."""
    if isinstance(value, list):
        if not value or value[0] is None:
            return None
        return value[0]
    if isinstance(value, dict) and value:
        return value
    return None


def expand_nameservers(name_servers: List[Mapping[str, Any]]) -> List[ApiPayload]:
    """Build the Nameservers list, keeping the configured order."""
    nameservers = []
    for name_server in name_servers:
        entry: ApiPayload = {"Name": name_server["name"]}
        glue_ips = name_server.get("glue_ips") or []
        if glue_ips:
            entry["GlueIps"] = sorted(glue_ips)
        nameservers.append(entry)
    return nameservers


def flatten_nameservers(nameservers: Optional[List[ApiPayload]]) -> List[Dict[str, Any]]:
    return [
        {"name": nameserver["Name"], "glue_ips": sorted(nameserver.get("GlueIps") or [])}
        for nameserver in nameservers or []
    ]


def has_transfer_lock(status_list: Optional[List[str]]) -> bool:
    return TRANSFER_LOCK_STATUS in (status_list or [])


def flatten_tags(tag_list: Optional[List[ApiPayload]]) -> Dict[str, str]:
    """Convert a Key/Value tag list into a map, ignoring AWS-reserved keys."""
    return {
        tag["Key"]: tag.get("Value", "")
        for tag in tag_list or []
        if not tag["Key"].startswith("aws:")
    }


def expand_tags(tags: Mapping[str, Any]) -> List[ApiPayload]:
    return [{"Key": key, "Value": str(value)} for key, value in sorted(tags.items())]


def flatten_domain_detail(detail: ApiPayload) -> RemoteRecord:
    """
    Map a GetDomainDetail response onto the domain's fields.

    Tags are not part of the domain detail and are added by the caller.
    """
    record: RemoteRecord = {
        "abuse_contact_email": detail.get("AbuseContactEmail", ""),
        "abuse_contact_phone": detail.get("AbuseContactPhone", ""),
        "admin_privacy": detail.get("AdminPrivacy", False),
        "auto_renew": detail.get("AutoRenew", False),
        "creation_date": format_rfc3339(detail.get("CreationDate")),
        "domain_name": detail.get("DomainName", ""),
        "expiration_date": format_rfc3339(detail.get("ExpirationDate")),
        "name_server": flatten_nameservers(detail.get("Nameservers")),
        "registrant_privacy": detail.get("RegistrantPrivacy", False),
        "registrar_name": detail.get("RegistrarName", ""),
        "registrar_url": detail.get("RegistrarUrl", ""),
        "reseller": detail.get("Reseller", ""),
        "status_list": list(detail.get("StatusList") or []),
        "tech_privacy": detail.get("TechPrivacy", False),
        "transfer_lock": has_transfer_lock(detail.get("StatusList")),
        "updated_date": format_rfc3339(detail.get("UpdatedDate")),
        "whois_server": detail.get("WhoIsServer", ""),
    }
    for field_name, api_key in (
        ("admin_contact", "AdminContact"),
        ("registrant_contact", "RegistrantContact"),
        ("tech_contact", "TechContact"),
    ):
        contact = detail.get(api_key)
        record[field_name] = [flatten_contact_detail(contact)] if contact else []
    return record
