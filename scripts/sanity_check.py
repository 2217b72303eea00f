"""Minimal sanity checks against a live wallet API (unauthenticated tools only)."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from wallet_mcp import mcp  # noqa: E402
from wallet_mcp.config import default_config  # noqa: E402
from wallet_mcp.wallet_api import WalletApiError, default_client  # noqa: E402

# Opt-in to authenticated checks; both values must be supplied via env.
SAMPLE_AGENT_ID = os.getenv("WALLET_SAMPLE_AGENT_ID")
SAMPLE_SERVICE_KEY = os.getenv("WALLET_SAMPLE_SERVICE_KEY")


async def _show(tool: str, arguments: dict | None = None) -> None:
    try:
        print(f"{tool}:", mcp.render_result(await mcp.call_tool(tool, arguments)))
    except WalletApiError as exc:
        print(f"{tool} failed:", exc)


async def main() -> None:
    print("Base URL:", default_config.base_url)
    await _show("supported_chains")
    await _show("gossip")

    if SAMPLE_AGENT_ID and SAMPLE_SERVICE_KEY:
        credentials = {"agent_id": SAMPLE_AGENT_ID, "service_key": SAMPLE_SERVICE_KEY}
        await _show("balance", credentials)
        await _show("transactions", {**credentials, "limit": 5})

    await default_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
