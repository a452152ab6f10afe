"""
Input validation utilities for tripcache.

Enforces the cache boundary contract: provider endpoints are non-empty
labels and request parameters are flat mappings of string keys to
scalar values. Nested structures are rejected rather than serialized,
so two callers can never disagree about how a parameter set hashes.
"""

import math
from collections.abc import Mapping
from typing import Any, Union

from tripcache.core.exceptions import KeyDerivationError, ValidationError

Scalar = Union[str, int, float, bool]
Parameters = Mapping[str, Scalar]

# Maximum response size (10 MB)
MAX_RESPONSE_SIZE = 10 * 1024 * 1024


def validate_endpoint(provider_endpoint: Any) -> str:
    """Validate a provider endpoint label.

    Args:
        provider_endpoint: Label such as "locations" or "gemini".

    Returns:
        The endpoint, unchanged.

    Raises:
        KeyDerivationError: If the endpoint is not a non-empty string.
    """
    if not isinstance(provider_endpoint, str) or not provider_endpoint:
        raise KeyDerivationError(
            "provider_endpoint",
            repr(provider_endpoint),
            "Endpoint must be a non-empty string",
        )
    return provider_endpoint


def validate_parameters(parameters: Any) -> dict[str, Scalar]:
    """Validate a request parameter mapping.

    Args:
        parameters: Mapping of parameter names to scalar values.

    Returns:
        A plain dict copy of the parameters.

    Raises:
        KeyDerivationError: If the mapping has non-string keys or
            non-scalar values (None, nested mappings, sequences,
            non-finite floats, arbitrary objects).
    """
    if not isinstance(parameters, Mapping):
        raise KeyDerivationError(
            "parameters",
            type(parameters).__name__,
            "Parameters must be a mapping",
        )

    validated: dict[str, Scalar] = {}
    for key, value in parameters.items():
        if not isinstance(key, str):
            raise KeyDerivationError(
                "parameters", repr(key), "Parameter names must be strings"
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise KeyDerivationError(
                f"parameters.{key}", repr(value), "Float values must be finite"
            )
        if not isinstance(value, (str, int, float, bool)):
            raise KeyDerivationError(
                f"parameters.{key}",
                repr(value),
                "Values must be str, int, float or bool; nested structures are not allowed",
            )
        validated[key] = value

    return validated


def validate_ttl_seconds(ttl_seconds: float) -> float:
    """Validate a time-to-live.

    Raises:
        ValidationError: If the TTL is negative or not finite.
    """
    if not math.isfinite(ttl_seconds) or ttl_seconds < 0:
        raise ValidationError("ttl", str(ttl_seconds), "TTL must be a finite, non-negative duration")
    return ttl_seconds


def validate_response_size(
    content_length: int | None,
    max_size: int = MAX_RESPONSE_SIZE,
) -> None:
    """Validate that a response size is within acceptable limits.

    Args:
        content_length: The Content-Length header value (may be None).
        max_size: Maximum allowed response size in bytes.

    Raises:
        ValidationError: If the response is too large.
    """
    if content_length is not None and content_length > max_size:
        size_mb = content_length / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            "response_size",
            f"{size_mb:.1f} MB",
            f"Response exceeds maximum size of {max_mb:.0f} MB",
        )
