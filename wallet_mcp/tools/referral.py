"""Referral program and public network tools."""

from __future__ import annotations

from typing import Any

from wallet_mcp.wallet_api import Credential, default_client


async def get_referral_stats(api_key: str, client=default_client) -> Any:
    """Return the authenticated agent's referral code, earnings and referees."""
    return await client.request("GET", "/v1/referral/stats", credential=Credential.bearer(api_key))


async def get_gossip(client=default_client) -> Any:
    return await client.request("GET", "/v1/gossip")
