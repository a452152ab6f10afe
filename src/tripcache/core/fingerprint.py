"""
Cache key derivation.

A fingerprint identifies one logical provider request. It depends only
on the endpoint label and the parameter values, never on the order the
caller inserted the parameters in.
"""

import hashlib
import json
from typing import Any

from tripcache.core.exceptions import KeyDerivationError
from tripcache.core.validation import validate_endpoint, validate_parameters


def canonical_parameters(parameters: Any) -> str:
    """Serialize parameters to their canonical JSON form.

    Keys are sorted and separators are compact, so equal mappings always
    produce identical text.

    Raises:
        KeyDerivationError: If the parameters violate the flat scalar contract.
    """
    validated = validate_parameters(parameters)
    ordered = {key: validated[key] for key in sorted(validated)}
    try:
        return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise KeyDerivationError("parameters", repr(parameters), str(e))


def derive_fingerprint(provider_endpoint: str, parameters: Any) -> str:
    """Derive the cache fingerprint for a provider request.

    Args:
        provider_endpoint: Label of the logical API call (e.g. "locations").
        parameters: Flat mapping of request parameters.

    Returns:
        Hex SHA-256 digest of ``endpoint:canonical_json``.

    Raises:
        KeyDerivationError: If the endpoint or parameters are invalid.

    Example:
        >>> a = derive_fingerprint("locations", {"keyword": "paris", "subType": "CITY"})
        >>> b = derive_fingerprint("locations", {"subType": "CITY", "keyword": "paris"})
        >>> a == b
        True
    """
    endpoint = validate_endpoint(provider_endpoint)
    data = f"{endpoint}:{canonical_parameters(parameters)}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
