"""
Lightweight JSON-RPC surface for MCP-style tooling.

This keeps a fixed mapping of tool names to their implementations and the
JSON-RPC message handling shared by the HTTP and stdio transports. It is
stateless; every call validates its arguments and issues its own request.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from wallet_mcp.config import default_config
from wallet_mcp.tools import (
    create_wallet,
    execute_swap,
    get_balance,
    get_deposit_addresses,
    get_gossip,
    get_referral_stats,
    get_swap_quote,
    get_swap_status,
    list_supported_chains,
    list_transactions,
    privacy_swap,
    register_agent,
    withdraw,
)
from wallet_mcp.tools.validators import ToolValidationError, validate_arguments
from wallet_mcp.wallet_api import WalletApiError

logger = logging.getLogger(__name__)

MCP_SERVER_NAME = "purple-flea-wallet"
MCP_SERVER_VERSION = "1.0.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

CHAINS_HINT = "ethereum, bsc, arbitrum, base, hyperevm, solana, bitcoin, monero"
PRIVACY_CHAINS_HINT = "ethereum, bsc, arbitrum, base, hyperevm, solana, bitcoin"


class UnknownToolError(LookupError):
    """Raised when a tool name is not in the registry."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


def _string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def _number(description: str, *, default: int | float) -> Dict[str, Any]:
    return {"type": "number", "description": description, "default": default}


def _object_schema(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


SERVICE_KEY = _string("Service API key for authentication")
API_KEY = _string("Agent API key (Bearer token)")
AGENT_ID = _string("Agent identifier")
AMOUNT = _string("Amount in smallest unit (e.g. wei for ETH, satoshis for BTC, lamports for SOL)")


ToolCallable = Callable[..., Awaitable[Any]]


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    params: Dict[str, Any]
    input_schema: Dict[str, Any]
    callable: ToolCallable


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "register": ToolDefinition(
        name="register",
        description=(
            "Register a new agent with Purple Flea Wallet. Creates a multi-chain wallet spanning "
            "10+ chains (Ethereum, Bitcoin, Solana, Monero, Base, Arbitrum, BSC, Tron, Zcash, "
            "Dogecoin, HyperEVM). Returns deposit addresses for every supported chain. Optionally "
            "include a referral code to link to a referring agent (both agents benefit: 10% "
            "commission on swap fees for the referrer)."
        ),
        params={
            "agent_id": "string (required)",
            "service_key": "string (required)",
            "referred_by": "string (optional)",
        },
        input_schema=_object_schema(
            {
                "agent_id": _string("Unique identifier for the agent"),
                "service_key": SERVICE_KEY,
                "referred_by": _string(
                    "Referral code of the agent who referred you (e.g. ref_xxxxxxxx)"
                ),
            },
            ["agent_id", "service_key"],
        ),
        callable=register_agent,
    ),
    "create_wallet": ToolDefinition(
        name="create_wallet",
        description=(
            "Create a multi-chain wallet for an existing agent. Generates addresses across all "
            "supported chains automatically: Ethereum, Bitcoin, Solana, Monero, Base, Arbitrum, "
            "BSC, Tron, Zcash, Dogecoin, and HyperEVM. If the wallet already exists, returns the "
            "existing addresses."
        ),
        params={
            "agent_id": "string (required)",
            "service_key": "string (required)",
            "referred_by": "string (optional)",
        },
        input_schema=_object_schema(
            {
                "agent_id": _string("Agent identifier to create the wallet for"),
                "service_key": SERVICE_KEY,
                "referred_by": _string(
                    "Referral code (ref_xxxxxxxx) to link this agent to a referrer"
                ),
            },
            ["agent_id", "service_key"],
        ),
        callable=create_wallet,
    ),
    "balance": ToolDefinition(
        name="balance",
        description=(
            "Get the current USD balance for an agent. Returns total balance, available balance "
            "(excluding reserved funds), reserved amount, and lifetime deposit/withdrawal totals."
        ),
        params={"agent_id": "string (required)", "service_key": "string (required)"},
        input_schema=_object_schema(
            {"agent_id": AGENT_ID, "service_key": SERVICE_KEY},
            ["agent_id", "service_key"],
        ),
        callable=get_balance,
    ),
    "deposit_address": ToolDefinition(
        name="deposit_address",
        description=(
            "Get deposit addresses for an agent across all supported chains. EVM chains "
            "(Ethereum, BSC, Arbitrum, Base, HyperEVM) share the same address."
        ),
        params={"agent_id": "string (required)", "service_key": "string (required)"},
        input_schema=_object_schema(
            {"agent_id": AGENT_ID, "service_key": SERVICE_KEY},
            ["agent_id", "service_key"],
        ),
        callable=get_deposit_addresses,
    ),
    "swap_quote": ToolDefinition(
        name="swap_quote",
        description=(
            "Get a swap quote via Wagyu, an aggregator of DEX and bridge aggregators. Supports "
            "cross-chain swaps between Ethereum, Bitcoin, Solana, Monero, Base, Arbitrum, BSC, "
            "and HyperEVM. Returns estimated output amount, USD values, and execution time. "
            "Does not create an order."
        ),
        params={
            "api_key": "string (required)",
            "from_chain": "string (required)",
            "to_chain": "string (required)",
            "from_token": "string (required)",
            "to_token": "string (required)",
            "amount": "string (required)",
        },
        input_schema=_object_schema(
            {
                "api_key": API_KEY,
                "from_chain": _string(f"Source chain ({CHAINS_HINT})"),
                "to_chain": _string(f"Destination chain ({CHAINS_HINT})"),
                "from_token": _string(
                    "Source token symbol or contract address (e.g. USDC, ETH, 0x...)"
                ),
                "to_token": _string(
                    "Destination token symbol or contract address (e.g. BTC, XMR, SOL)"
                ),
                "amount": AMOUNT,
            },
            ["api_key", "from_chain", "to_chain", "from_token", "to_token", "amount"],
        ),
        callable=get_swap_quote,
    ),
    "swap": ToolDefinition(
        name="swap",
        description=(
            "Execute a cross-chain swap via Wagyu. Creates a swap order and returns a deposit "
            "address to send funds to. If no destination address is provided, funds arrive at "
            "the agent's wallet address on the target chain."
        ),
        params={
            "api_key": "string (required)",
            "from_chain": "string (required)",
            "to_chain": "string (required)",
            "from_token": "string (required)",
            "to_token": "string (required)",
            "amount": "string (required)",
            "to_address": "string (optional)",
        },
        input_schema=_object_schema(
            {
                "api_key": API_KEY,
                "from_chain": _string(f"Source chain ({CHAINS_HINT})"),
                "to_chain": _string(f"Destination chain ({CHAINS_HINT})"),
                "from_token": _string("Source token symbol or contract address"),
                "to_token": _string("Destination token symbol or contract address"),
                "amount": AMOUNT,
                "to_address": _string(
                    "Destination address (defaults to agent's address on the target chain)"
                ),
            },
            ["api_key", "from_chain", "to_chain", "from_token", "to_token", "amount"],
        ),
        callable=execute_swap,
    ),
    "privacy_swap": ToolDefinition(
        name="privacy_swap",
        description=(
            "Privacy-routed swap via Monero (XMR). Executes leg 1 (your tokens to XMR) and "
            "returns instructions for leg 2 (XMR to your desired output token), which you run "
            "later with the 'swap' tool once leg 1 completes. Breaks the on-chain link between "
            "source and destination. Minimum swap: $25 USD for XMR legs."
        ),
        params={
            "api_key": "string (required)",
            "from_chain": "string (required)",
            "from_token": "string (required)",
            "amount": "string (required)",
            "to_chain": "string (required)",
            "to_token": "string (required)",
            "to_address": "string (optional)",
        },
        input_schema=_object_schema(
            {
                "api_key": API_KEY,
                "from_chain": _string(f"Source chain ({PRIVACY_CHAINS_HINT})"),
                "from_token": _string("Source token symbol or contract address"),
                "amount": AMOUNT,
                "to_chain": _string(f"Final destination chain ({PRIVACY_CHAINS_HINT})"),
                "to_token": _string("Final destination token symbol or contract address"),
                "to_address": _string(
                    "Final destination address (defaults to agent's address on the target chain)"
                ),
            },
            ["api_key", "from_chain", "from_token", "amount", "to_chain", "to_token"],
        ),
        callable=privacy_swap,
    ),
    "swap_status": ToolDefinition(
        name="swap_status",
        description=(
            "Check the status of a swap order. Returns current status (pending, completed, "
            "failed), deposit details, and output transaction hash when complete."
        ),
        params={"api_key": "string (required)", "order_id": "string (required)"},
        input_schema=_object_schema(
            {
                "api_key": API_KEY,
                "order_id": _string("Swap order ID returned from a swap or privacy_swap call"),
            },
            ["api_key", "order_id"],
        ),
        callable=get_swap_status,
    ),
    "withdraw": ToolDefinition(
        name="withdraw",
        description=(
            "Withdraw funds by swapping from the agent's wallet to an external address. Specify "
            "the source chain/token from the agent's wallet and the destination "
            "chain/token/address where funds should be sent."
        ),
        params={
            "api_key": "string (required)",
            "from_chain": "string (required)",
            "from_token": "string (required)",
            "amount": "string (required)",
            "to_chain": "string (required)",
            "to_token": "string (required)",
            "to_address": "string (required)",
        },
        input_schema=_object_schema(
            {
                "api_key": API_KEY,
                "from_chain": _string(f"Source chain to withdraw from ({CHAINS_HINT})"),
                "from_token": _string("Token to withdraw (e.g. USDC, ETH, BTC)"),
                "amount": AMOUNT,
                "to_chain": _string("Destination chain"),
                "to_token": _string("Destination token"),
                "to_address": _string("External wallet address to receive funds"),
            },
            ["api_key", "from_chain", "from_token", "amount", "to_chain", "to_token", "to_address"],
        ),
        callable=withdraw,
    ),
    "referral_stats": ToolDefinition(
        name="referral_stats",
        description=(
            "Get referral statistics for the authenticated agent: referral code, share link, "
            "total earnings, number of referred agents, and per-agent breakdown. Referrers earn "
            "10% commission on swap fees generated by referred agents."
        ),
        params={"api_key": "string (required)"},
        input_schema=_object_schema({"api_key": API_KEY}, ["api_key"]),
        callable=get_referral_stats,
    ),
    "supported_chains": ToolDefinition(
        name="supported_chains",
        description=(
            "List supported chains, tokens, swap pairs, and minimum swap amounts, including "
            "cross-chain routes. No authentication required."
        ),
        params={},
        input_schema=_object_schema({}, []),
        callable=list_supported_chains,
    ),
    "transactions": ToolDefinition(
        name="transactions",
        description=(
            "Get transaction history for an agent. Returns deposits, charges, credits, swaps, "
            "referral commissions, and reservations with timestamps and balances."
        ),
        params={
            "agent_id": "string (required)",
            "service_key": "string (required)",
            "limit": f"number (optional, default {default_config.default_transactions_limit})",
        },
        input_schema=_object_schema(
            {
                "agent_id": AGENT_ID,
                "service_key": SERVICE_KEY,
                "limit": _number(
                    "Number of transactions to return "
                    f"(default {default_config.default_transactions_limit})",
                    default=default_config.default_transactions_limit,
                ),
            },
            ["agent_id", "service_key"],
        ),
        callable=list_transactions,
    ),
    "gossip": ToolDefinition(
        name="gossip",
        description=(
            "Get Purple Flea Wallet gossip: live agent count, referral program details, and "
            "passive income opportunities. No authentication required."
        ),
        params={},
        input_schema=_object_schema({}, []),
        callable=get_gossip,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return a simple list of available tools."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "params": tool.params,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


async def call_tool(tool_name: str, params: Optional[Dict[str, Any]] = None, *, client=None) -> Any:
    """
    Validate arguments and dispatch to a tool by name.

    Returns the tool's raw JSON result. Raises ``UnknownToolError``,
    ``ToolValidationError`` (before any network call) or the dispatcher's
    ``WalletApiError`` subclasses.
    """
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        raise UnknownToolError(tool_name)
    arguments = validate_arguments(tool.input_schema, params)
    if client is not None:
        arguments["client"] = client
    return await tool.callable(**arguments)


def render_result(result: Any) -> str:
    """Pretty-print a tool result exactly as received."""
    return json.dumps(result, indent=2, ensure_ascii=False)


def log_tool_result(tool_name: str, error: Optional[str], request_id: Optional[str] = None) -> None:
    if error:
        logger.warning(
            "tool=%s outcome=error error=%s request_id=%s",
            tool_name,
            error,
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": error},
        )
    else:
        logger.info(
            "tool=%s outcome=success request_id=%s",
            tool_name,
            request_id,
            extra={"tool": tool_name, "request_id": request_id},
        )


def _error_content(message: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": message}], "isError": True}


def _wrap_tool_result(result: Any) -> Dict[str, Any]:
    """Shape a successful tool output into an MCP content array."""
    wrapped: Dict[str, Any] = {"content": [{"type": "text", "text": render_result(result)}]}
    if isinstance(result, dict):
        wrapped["structuredContent"] = result
    return wrapped


async def run_tool(
    tool_name: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    request_id: Optional[str] = None,
    client=None,
) -> Dict[str, Any]:
    """
    Call a tool and shape the outcome for ``tools/call``.

    Validation, transport and backend failures are reported in-band with
    ``isError``. ``UnknownToolError`` propagates so the caller can answer with a
    JSON-RPC error instead.
    """
    try:
        result = await call_tool(tool_name, params, client=client)
    except UnknownToolError:
        raise
    except (ToolValidationError, WalletApiError) as exc:
        log_tool_result(tool_name, str(exc), request_id)
        return _error_content(str(exc))
    except Exception:
        logger.exception(
            "Unexpected error while calling tool %s",
            tool_name,
            extra={"tool": tool_name, "request_id": request_id},
        )
        log_tool_result(tool_name, "unexpected", request_id)
        return _error_content("Unexpected error while calling tool.")
    log_tool_result(tool_name, None, request_id)
    return _wrap_tool_result(result)


def jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


async def handle_jsonrpc(
    body: Any, *, request_id: Optional[str] = None, client=None
) -> Optional[Tuple[Dict[str, Any], int]]:
    """
    Handle one decoded JSON-RPC message.

    Supported methods:
      - initialize
      - ping
      - list_tools / tools/list
      - call_tool / tools/call
      - notifications/initialized / initialized

    Returns:
        ``(payload, http_status)``, or None for notifications that take no reply.
    """
    start_time = time.time()

    def _respond(
        payload: Dict[str, Any],
        status_code: int = 200,
        *,
        outcome: str,
        method_label: Optional[str] = None,
        tool_label: Optional[str] = None,
        error_code: Optional[int] = None,
    ) -> Tuple[Dict[str, Any], int]:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
            outcome,
            method_label,
            tool_label,
            payload.get("id"),
            status_code,
            duration_ms,
            error_code,
            extra={"request_id": request_id, "tool": tool_label, "error": error_code},
        )
        return payload, status_code

    if not isinstance(body, dict):
        payload = jsonrpc_error_payload(None, INVALID_REQUEST, "Invalid request")
        return _respond(payload, 400, outcome="error", error_code=INVALID_REQUEST)

    method = body.get("method")
    rpc_id = body.get("id")
    raw_params = body.get("params")
    if raw_params is None:
        params: Dict[str, Any] = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        payload = jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
        return _respond(payload, outcome="error", method_label=method, error_code=INVALID_PARAMS)

    if not method or not isinstance(method, str):
        payload = jsonrpc_error_payload(rpc_id, INVALID_REQUEST, "Invalid request")
        return _respond(payload, outcome="error", error_code=INVALID_REQUEST)

    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            payload = jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, error_code=INVALID_PARAMS)
        result = {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
            "capabilities": {"tools": {"listChanged": False}},
        }
        return _respond(jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method == "ping":
        return _respond(jsonrpc_success_payload(rpc_id, {}), outcome="success", method_label=method)

    if method in ("list_tools", "tools/list"):
        result = {"tools": list_tools()}
        return _respond(jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method in ("call_tool", "tools/call"):
        tool_name = params.get("tool") or params.get("name")
        tool_params = params.get("params")
        if tool_params is None:
            tool_params = params.get("arguments") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            payload = jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, error_code=INVALID_PARAMS)
        if not isinstance(tool_params, dict):
            payload = jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")
            return _respond(
                payload,
                outcome="error",
                method_label=method,
                tool_label=tool_name,
                error_code=INVALID_PARAMS,
            )
        try:
            wrapped = await run_tool(tool_name, tool_params, request_id=request_id, client=client)
        except UnknownToolError as exc:
            payload = jsonrpc_error_payload(rpc_id, INVALID_PARAMS, str(exc))
            return _respond(
                payload,
                outcome="error",
                method_label=method,
                tool_label=tool_name,
                error_code=INVALID_PARAMS,
            )
        return _respond(
            jsonrpc_success_payload(rpc_id, wrapped),
            outcome="success",
            method_label=method,
            tool_label=tool_name,
        )

    if method == "initialized" or method.startswith("notifications/"):
        logger.debug(
            "mcp notification %s received request_id=%s",
            method,
            request_id,
            extra={"request_id": request_id},
        )
        return None

    payload = jsonrpc_error_payload(rpc_id, METHOD_NOT_FOUND, "Method not found")
    return _respond(payload, outcome="error", method_label=method, error_code=METHOD_NOT_FOUND)


__all__ = [
    "ToolDefinition",
    "TOOL_REGISTRY",
    "UnknownToolError",
    "call_tool",
    "handle_jsonrpc",
    "jsonrpc_error_payload",
    "jsonrpc_success_payload",
    "log_tool_result",
    "list_tools",
    "render_result",
    "run_tool",
]
