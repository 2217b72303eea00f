"""HTTP client wrappers for the wallet service API."""

from .client import (
    ADMIN,
    BEARER,
    SERVICE,
    BackendError,
    BackendUnreachableError,
    Credential,
    RequestTimeoutError,
    TransportError,
    WalletApiClient,
    WalletApiError,
    default_client,
    extract_error_message,
)

__all__ = [
    "ADMIN",
    "BEARER",
    "SERVICE",
    "BackendError",
    "BackendUnreachableError",
    "Credential",
    "RequestTimeoutError",
    "TransportError",
    "WalletApiClient",
    "WalletApiError",
    "default_client",
    "extract_error_message",
]
