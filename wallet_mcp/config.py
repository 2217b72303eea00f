"""
Configuration helpers for the wallet MCP server.

This module centralizes base URL selection, the request deadline, logging
settings and the HTTP bind address. Values are read from the environment once,
at import time; credentials are never part of configuration and are supplied
per tool call instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# Default connection settings
WALLET_API_URL_ENV_VAR = "WALLET_API_URL"
FALLBACK_BASE_URL = "https://wallet.purpleflea.com"
REQUEST_TIMEOUT_SECONDS = 30.0


def _load_base_url() -> str:
    raw_url = os.getenv(WALLET_API_URL_ENV_VAR)
    if raw_url and raw_url.strip():
        return raw_url.strip()
    return FALLBACK_BASE_URL


def _load_port() -> int:
    raw_port = os.getenv("WALLET_MCP_PORT")
    if raw_port:
        try:
            return int(raw_port)
        except ValueError:
            return 8000
    return 8000


DEFAULT_BASE_URL = _load_base_url()
DEFAULT_HOST = os.getenv("WALLET_MCP_HOST", "127.0.0.1")
DEFAULT_PORT = _load_port()
LOG_LEVEL = os.getenv("WALLET_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("WALLET_MCP_LOG_FORMAT", "json")  # json or plain

# Tool defaults
DEFAULT_TRANSACTIONS_LIMIT = 50


@dataclass(slots=True)
class WalletConfig:
    """Runtime configuration for wallet API access."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = REQUEST_TIMEOUT_SECONDS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    default_transactions_limit: int = DEFAULT_TRANSACTIONS_LIMIT


default_config = WalletConfig()
