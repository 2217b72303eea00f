"""LLM-facing tool implementations."""

from .wallet import (
    create_wallet,
    get_balance,
    get_deposit_addresses,
    list_transactions,
    register_agent,
)
from .swap import (
    execute_swap,
    get_swap_quote,
    get_swap_status,
    list_supported_chains,
    privacy_swap,
    withdraw,
)
from .referral import get_gossip, get_referral_stats

__all__ = [
    "register_agent",
    "create_wallet",
    "get_balance",
    "get_deposit_addresses",
    "list_transactions",
    "get_swap_quote",
    "execute_swap",
    "privacy_swap",
    "get_swap_status",
    "withdraw",
    "list_supported_chains",
    "get_referral_stats",
    "get_gossip",
]
