"""
Utility modules for the flight schedule service.

Provides:
    - logger: Loguru-based logging with stdout and file output
    - exceptions: Custom exception classes for error handling
"""

from src.utils.logger import logger, setup_logger
from src.utils.exceptions import (
    # Base
    FlightServiceError,
    # Request
    ValidationError,
    AuthError,
    # Provider
    ProviderError,
    ProviderResponseError,
    RateLimitError,
    APIConnectionError,
    APITimeoutError,
    MalformedPayloadError,
    # Store
    StoreError,
    PartialWriteError,
    # Database
    DatabaseError,
    IngestionRecordError,
    # Configuration
    ConfigurationError,
    MissingConfigError,
    categorize_error,
)

__all__ = [
    # Logger
    "logger",
    "setup_logger",
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
