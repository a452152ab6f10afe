"""
Custom exceptions for tripcache.
"""


class TripCacheError(Exception):
    """Base exception for all tripcache errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class CacheError(TripCacheError):
    """Raised when a cache store operation fails."""

    def __init__(self, operation: str, details: str | None = None):
        super().__init__(f"Cache error during {operation}", details=details)
        self.operation = operation


class ValidationError(TripCacheError):
    """Raised when data validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason


class KeyDerivationError(ValidationError):
    """Raised when a cache fingerprint cannot be derived from the inputs.

    This is a caller contract violation, so unlike ``CacheError`` it is
    never downgraded to a cache miss.
    """


class ConfigurationError(TripCacheError):
    """Raised when a required setting (usually an API key) is missing."""

    def __init__(self, setting: str, details: str | None = None):
        super().__init__(f"Missing configuration: {setting}", details=details)
        self.setting = setting


class ProviderError(TripCacheError):
    """Base class for failures talking to a third-party provider."""

    def __init__(self, provider: str, message: str, details: str | None = None):
        super().__init__(message, details=details)
        self.provider = provider


class NetworkError(ProviderError):
    """Raised when a network request fails."""

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        details: str | None = None,
        provider: str = "http",
    ):
        message = f"Network request failed: {url}"
        if status_code:
            message += f" (status {status_code})"
        super().__init__(provider, message, details=details)
        self.url = url
        self.status_code = status_code


class RateLimitError(ProviderError):
    """Raised when an API rate limit is exceeded."""

    def __init__(
        self,
        service: str,
        reset_time: int | None = None,
    ):
        details = None
        if reset_time:
            details = f"Rate limit resets in {reset_time} seconds."
        super().__init__(service, f"Rate limit exceeded for {service}", details=details)
        self.service = service
        self.reset_time = reset_time


class AuthenticationError(ProviderError):
    """Raised when a provider rejects our credentials."""

    def __init__(self, provider: str, details: str | None = None):
        super().__init__(provider, f"Authentication failed for {provider}", details=details)


class ProviderNotFoundError(ProviderError):
    """Raised when a provider has no data for the requested resource."""

    def __init__(self, provider: str, resource: str):
        super().__init__(
            provider,
            f"Not found on {provider}: {resource}",
            details="The provider returned no matching resource.",
        )
        self.resource = resource


class ProviderResponseError(ProviderError):
    """Raised when a provider answers with something we cannot parse."""

    def __init__(self, provider: str, details: str | None = None, raw: str | None = None):
        super().__init__(provider, f"Unusable response from {provider}", details=details)
        self.raw = raw
