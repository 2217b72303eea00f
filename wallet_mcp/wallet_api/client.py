"""
Thin HTTP client for the wallet service API.

Every call issues exactly one request: no retries, no caching, no reshaping of
the response. Failures are mapped to a small exception hierarchy so the tool
layer can tell "never reached the backend" apart from "backend said no".
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from wallet_mcp.config import WalletConfig, default_config

logger = logging.getLogger(__name__)

BEARER = "bearer"
SERVICE = "service"
ADMIN = "admin"

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "DELETE", "OPTIONS"})


class WalletApiError(Exception):
    """Base exception for wallet API errors."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendError(WalletApiError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message, status_code=status_code)

    def __str__(self) -> str:
        return f"API {self.status_code}: {self.message}"


class TransportError(WalletApiError):
    """Raised when no HTTP response was received."""


class BackendUnreachableError(TransportError):
    """Raised when the backend cannot be reached."""


class RequestTimeoutError(TransportError):
    """Raised when the request deadline expires."""


@dataclass(frozen=True, slots=True)
class Credential:
    """A single credential attached to an outbound request."""

    kind: str
    key: str

    def __post_init__(self) -> None:
        if self.kind not in (BEARER, SERVICE, ADMIN):
            raise ValueError(f"Unknown credential kind: {self.kind}")

    @classmethod
    def bearer(cls, key: str) -> "Credential":
        return cls(BEARER, key)

    @classmethod
    def service(cls, key: str) -> "Credential":
        return cls(SERVICE, key)

    @classmethod
    def admin(cls, key: str) -> "Credential":
        return cls(ADMIN, key)

    def as_header(self) -> Tuple[str, str]:
        if self.kind == BEARER:
            return "Authorization", f"Bearer {self.key}"
        if self.kind == SERVICE:
            return "X-Service-Key", self.key
        return "X-Admin-Key", self.key


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def extract_error_message(data: Any, status_code: int) -> str:
    """
    Pick a human-readable message for a failed response.

    Order: the body's ``message`` field, then its ``error`` field (only when the
    body is a JSON object and the field is non-empty), then the standard reason
    phrase for the status code.
    """
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if value:
                return _stringify(value)
    return httpx.codes.get_reason_phrase(status_code) or "HTTP error"


class WalletApiClient:
    """Async client for the wallet service HTTP API."""

    def __init__(
        self,
        config: WalletConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url, timeout=self.config.timeout
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, credential: Optional[Credential]) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if credential is not None and credential.key:
            name, value = credential.as_header()
            headers[name] = value
        return headers

    def _process_response(self, response: httpx.Response) -> Any:
        data: Any = None
        parsed = False
        if response.content:
            try:
                data = response.json()
                parsed = True
            except ValueError:
                data = None

        if not 200 <= response.status_code < 300:
            raise BackendError(
                extract_error_message(data, response.status_code),
                status_code=response.status_code,
            )

        if not response.content:
            return None
        if not parsed:
            raise WalletApiError(
                "Unexpected response from wallet API.", status_code=response.status_code
            )
        return data

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Optional[Mapping[str, Any]] = None,
        credential: Optional[Credential] = None,
        query: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """
        Issue one request against the configured base URL.

        Args:
            method: HTTP verb.
            path: Path relative to the base URL; path parameters must already be
                percent-encoded.
            body: JSON body, ignored for verbs that do not carry one.
            credential: At most one credential to attach.
            query: Query parameters; later keys overwrite earlier ones.

        Returns:
            The parsed JSON body, untouched.
        """
        method = method.upper()
        client = await self._get_client()
        kwargs: Dict[str, Any] = {"headers": self._build_headers(credential)}
        if query:
            kwargs["params"] = dict(query)
        if body is not None and method not in _BODYLESS_METHODS:
            kwargs["json"] = dict(body)

        try:
            response = await asyncio.wait_for(
                client.request(method, path, **kwargs), timeout=self.config.timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("Wallet API request timed out for %s %s", method, path)
            raise RequestTimeoutError(
                f"Request to wallet API timed out after {self.config.timeout:g}s"
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Wallet API unreachable for %s %s", method, path)
            raise BackendUnreachableError("Wallet API unreachable") from exc
        return self._process_response(response)


default_client = WalletApiClient()
