"""
Custom exceptions for the flight schedule service.

Provides a hierarchy of exceptions for different error scenarios:
- Input validation and authentication
- Provider errors (AeroDataBox schedule API)
- Store errors (date layout / route+month aggregate layout)
- Database errors (SQLite collection run tracking)
"""


class FlightServiceError(Exception):
    """Base exception for all flight service errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationError(FlightServiceError):
    """Malformed input (IATA code, date, month, query combination)."""
    pass


class AuthError(FlightServiceError):
    """Missing or invalid authenticated principal."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderError(FlightServiceError):
    """Base exception for schedule provider errors."""
    pass


class ProviderResponseError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, response_body: str | None = None):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class RateLimitError(ProviderError):
    """Provider signalled throttling (HTTP 429)."""

    def __init__(self, message: str = "Provider rate limit exceeded", retry_after: int | None = None):
        self.retry_after = retry_after
        super().__init__(message)


class APIConnectionError(ProviderError):
    """Error when unable to connect to the provider."""
    pass


class APITimeoutError(ProviderError):
    """Error when a provider request times out."""

    def __init__(self, message: str, timeout: float | None = None):
        self.timeout = timeout
        super().__init__(message)


class MalformedPayloadError(ProviderError):
    """Provider payload could not be decoded or has the wrong shape."""
    pass


# =============================================================================
# Store Exceptions
# =============================================================================

class StoreError(FlightServiceError):
    """Base exception for schedule store errors."""
    pass


class PartialWriteError(StoreError):
    """A record reached one storage layout but not the other."""

    def __init__(self, message: str, layout: str | None = None, record_id: str | None = None):
        self.layout = layout
        self.record_id = record_id
        super().__init__(message)


# =============================================================================
# Database Exceptions
# =============================================================================

class DatabaseError(FlightServiceError):
    """Base exception for run-tracking database errors."""
    pass


class IngestionRecordError(DatabaseError):
    """Error when creating or querying collection run records."""
    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(FlightServiceError):
    """Error with service configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Error when required configuration is missing."""

    def __init__(self, config_key: str):
        self.config_key = config_key
        super().__init__(f"Missing required configuration: {config_key}")


def categorize_error(error: Exception) -> tuple[str, str]:
    """
    Categorize an error for logging and run records.

    Returns:
        Tuple of (error_category, error_message)
    """
    if isinstance(error, RateLimitError):
        category = "RATE_LIMIT"
        message = f"Provider rate limit exceeded. Retry after {error.retry_after}s"
    elif isinstance(error, APITimeoutError):
        category = "API_TIMEOUT"
        message = f"Provider request timed out after {error.timeout}s"
    elif isinstance(error, APIConnectionError):
        category = "API_CONNECTION"
        message = f"Failed to connect to provider: {error}"
    elif isinstance(error, ProviderResponseError):
        category = "API_ERROR"
        message = f"Provider error (HTTP {error.status_code}): {error.message}"
    elif isinstance(error, MalformedPayloadError):
        category = "PAYLOAD"
        message = f"Malformed provider payload: {error}"
    elif isinstance(error, ProviderError):
        category = "PROVIDER"
        message = f"Provider error: {error}"
    elif isinstance(error, PartialWriteError):
        category = "PARTIAL_WRITE"
        message = f"Record {error.record_id} not written to {error.layout} layout: {error.message}"
    elif isinstance(error, StoreError):
        category = "STORE"
        message = f"Store error: {error}"
    elif isinstance(error, DatabaseError):
        category = "DATABASE"
        message = f"Database error: {error}"
    elif isinstance(error, ValidationError):
        category = "VALIDATION"
        message = f"Validation error: {error}"
    elif isinstance(error, ConfigurationError):
        category = "CONFIG"
        message = f"Configuration error: {error}"
    elif isinstance(error, FlightServiceError):
        category = "SERVICE"
        message = f"Service error: {error}"
    else:
        category = "UNEXPECTED"
        message = f"Unexpected error ({type(error).__name__}): {error}"

    return category, message


# Export all exceptions
__all__ = [
    # Base
    "FlightServiceError",
    # Request
    "ValidationError",
    "AuthError",
    # Provider
    "ProviderError",
    "ProviderResponseError",
    "RateLimitError",
    "APIConnectionError",
    "APITimeoutError",
    "MalformedPayloadError",
    # Store
    "StoreError",
    "PartialWriteError",
    # Database
    "DatabaseError",
    "IngestionRecordError",
    # Configuration
    "ConfigurationError",
    "MissingConfigError",
    "categorize_error",
]
