"""Wallet lifecycle and ledger tools (service-key authenticated)."""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from wallet_mcp.config import DEFAULT_TRANSACTIONS_LIMIT
from wallet_mcp.tools.validators import format_number
from wallet_mcp.wallet_api import Credential, default_client

CREATE_WALLET_PATH = "/v1/wallet/internal/create"


async def _create(agent_id: str, service_key: str, referred_by: Optional[str], client) -> Any:
    body: Dict[str, Any] = {"agent_id": agent_id}
    if referred_by:
        body["referred_by"] = referred_by
    return await client.request(
        "POST", CREATE_WALLET_PATH, body=body, credential=Credential.service(service_key)
    )


async def register_agent(
    agent_id: str,
    service_key: str,
    referred_by: Optional[str] = None,
    client=default_client,
) -> Any:
    """
    Register a new agent, creating its multi-chain wallet.

    Args:
        agent_id: Unique identifier for the agent.
        service_key: Service API key.
        referred_by: Optional referral code of the referring agent.
        client: Wallet API client (override for testing).
    """
    return await _create(agent_id, service_key, referred_by, client)


async def create_wallet(
    agent_id: str,
    service_key: str,
    referred_by: Optional[str] = None,
    client=default_client,
) -> Any:
    """Create a wallet for an existing agent; the backend returns an existing one as-is."""
    return await _create(agent_id, service_key, referred_by, client)


async def get_balance(agent_id: str, service_key: str, client=default_client) -> Any:
    """Return the agent's USD balance summary."""
    encoded = quote(agent_id, safe="")
    return await client.request(
        "GET",
        f"/v1/wallet/internal/balance/{encoded}",
        credential=Credential.service(service_key),
    )


async def get_deposit_addresses(agent_id: str, service_key: str, client=default_client) -> Any:
    """Return the agent's deposit address on every supported chain."""
    encoded = quote(agent_id, safe="")
    return await client.request(
        "GET",
        f"/v1/wallet/internal/addresses/{encoded}",
        credential=Credential.service(service_key),
    )


async def list_transactions(
    agent_id: str,
    service_key: str,
    limit: int | float = DEFAULT_TRANSACTIONS_LIMIT,
    client=default_client,
) -> Any:
    """Return the agent's transaction history, newest first, capped by ``limit``."""
    encoded = quote(agent_id, safe="")
    return await client.request(
        "GET",
        f"/v1/wallet/internal/transactions/{encoded}",
        credential=Credential.service(service_key),
        query={"limit": format_number(limit)},
    )
