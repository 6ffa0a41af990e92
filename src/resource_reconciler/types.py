"""
Type definitions for the Terraform resource reconcilers.

boto3 does not provide static type stubs for service clients and their methods
are generated at runtime, so clients are annotated as Any for clarity only.
"""

from typing import Any, Dict, List, Union

# Specific AWS client types
CloudWatchClient = Any
Route53DomainsClient = Any

# Record types
FieldValue = Union[str, int, float, bool, List, Dict, None]
DesiredRecord = Dict[str, FieldValue]
RemoteRecord = Dict[str, FieldValue]

# Raw boto3 request / response payloads
ApiPayload = Dict[str, Any]

# Difference entries produced by comparators
Difference = Dict[str, Any]
