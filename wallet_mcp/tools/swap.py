"""Swap, withdrawal and privacy-routing tools (bearer authenticated)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from wallet_mcp.wallet_api import Credential, default_client

logger = logging.getLogger(__name__)

QUOTE_PATH = "/v1/swap/quote"
EXECUTE_PATH = "/v1/swap/execute"
CHAINS_PATH = "/v1/swap/chains"

PRIVACY_CHAIN = "monero"
PRIVACY_TOKEN = "XMR"
DEFAULT_ADDRESS_LABEL = "(agent's default address)"
LEG1_NOTE = (
    "Send funds to the deposit address. Once received, XMR will be sent to your Monero wallet."
)
HOW_IT_WORKS = (
    "Leg 1 converts your tokens to XMR. Monero's ring signatures and stealth addresses "
    "break the on-chain trail. Leg 2 converts XMR to your desired output. The two legs "
    "have no traceable link."
)


def _route(from_chain: str, to_chain: str, from_token: str, to_token: str, amount: str) -> Dict[str, Any]:
    return {
        "from_chain": from_chain,
        "to_chain": to_chain,
        "from_token": from_token,
        "to_token": to_token,
        "amount": amount,
    }


async def get_swap_quote(
    api_key: str,
    from_chain: str,
    to_chain: str,
    from_token: str,
    to_token: str,
    amount: str,
    client=default_client,
) -> Any:
    """Quote a swap without creating an order."""
    return await client.request(
        "POST",
        QUOTE_PATH,
        body=_route(from_chain, to_chain, from_token, to_token, amount),
        credential=Credential.bearer(api_key),
    )


async def execute_swap(
    api_key: str,
    from_chain: str,
    to_chain: str,
    from_token: str,
    to_token: str,
    amount: str,
    to_address: Optional[str] = None,
    client=default_client,
) -> Any:
    """
    Create a swap order.

    Without ``to_address`` the backend delivers to the agent's own address on
    the target chain.
    """
    body = _route(from_chain, to_chain, from_token, to_token, amount)
    if to_address:
        body["to_address"] = to_address
    return await client.request(
        "POST", EXECUTE_PATH, body=body, credential=Credential.bearer(api_key)
    )


async def privacy_swap(
    api_key: str,
    from_chain: str,
    from_token: str,
    amount: str,
    to_chain: str,
    to_token: str,
    to_address: Optional[str] = None,
    client=default_client,
) -> Dict[str, Any]:
    """
    Start a two-leg swap routed through Monero.

    Only leg 1 (source -> XMR) is executed. The returned summary tells the
    caller how to run leg 2 (XMR -> destination) with the ``swap`` tool once
    leg 1 has settled; nothing here waits for or tracks that.

    Returns:
        A summary holding leg 1's order details and the leg 2 instruction.
    """
    leg1 = await client.request(
        "POST",
        EXECUTE_PATH,
        body=_route(from_chain, PRIVACY_CHAIN, from_token, PRIVACY_TOKEN, amount),
        credential=Credential.bearer(api_key),
    )
    if not isinstance(leg1, dict):
        logger.warning("privacy_swap leg 1 returned a non-object response")
        leg1 = {}

    return {
        "privacy_swap": True,
        "leg1_to_xmr": {
            "order_id": leg1.get("order_id"),
            "status": leg1.get("status"),
            "deposit": leg1.get("deposit"),
            "note": LEG1_NOTE,
        },
        "leg2_from_xmr": {
            "instruction": (
                f"Once leg 1 completes, execute a swap from {PRIVACY_CHAIN}/{PRIVACY_TOKEN} "
                f"to {to_chain}/{to_token} using the 'swap' tool."
            ),
            "from_chain": PRIVACY_CHAIN,
            "from_token": PRIVACY_TOKEN,
            "to_chain": to_chain,
            "to_token": to_token,
            "to_address": to_address or DEFAULT_ADDRESS_LABEL,
        },
        "how_it_works": HOW_IT_WORKS,
    }


async def get_swap_status(api_key: str, order_id: str, client=default_client) -> Any:
    """Return the current state of a swap order."""
    encoded = quote(order_id, safe="")
    return await client.request(
        "GET", f"/v1/swap/status/{encoded}", credential=Credential.bearer(api_key)
    )


async def withdraw(
    api_key: str,
    from_chain: str,
    from_token: str,
    amount: str,
    to_chain: str,
    to_token: str,
    to_address: str,
    client=default_client,
) -> Any:
    """Swap funds out of the agent's wallet to an external address."""
    body = _route(from_chain, to_chain, from_token, to_token, amount)
    body["to_address"] = to_address
    return await client.request(
        "POST", EXECUTE_PATH, body=body, credential=Credential.bearer(api_key)
    )


async def list_supported_chains(client=default_client) -> Any:
    """Return supported chains, tokens, routes and minimums. No auth."""
    return await client.request("GET", CHAINS_PATH)
