import json

import httpx
from fastapi.testclient import TestClient

from wallet_mcp.mcp import MCP_SERVER_NAME, MCP_SERVER_VERSION
from wallet_mcp.server import app


def _call(client, rpc_id, name, arguments):
    return client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": rpc_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        },
    )


def test_mcp_initialize():
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 10,
            "method": "initialize",
            "params": {
                "protocolVersion": "2025-03-26",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "0.0.0"},
            },
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 10
    result = data["result"]
    assert result["protocolVersion"] == "2025-03-26"
    assert result["serverInfo"] == {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION}
    assert result["capabilities"]["tools"]["listChanged"] is False


def test_mcp_initialize_requires_protocol_version():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "initialize"})
    assert resp.json()["error"]["code"] == -32602


def test_mcp_tools_list():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 3, "method": "tools/list"})
    assert resp.status_code == 200
    tools = resp.json()["result"]["tools"]
    names = {tool["name"] for tool in tools}
    assert {"register", "swap", "privacy_swap", "transactions", "gossip"} <= names
    swap = next(t for t in tools if t["name"] == "swap")
    assert swap["inputSchema"]["required"] == [
        "api_key",
        "from_chain",
        "to_chain",
        "from_token",
        "to_token",
        "amount",
    ]


def test_mcp_list_tools_alias():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 4, "method": "list_tools"})
    assert len(resp.json()["result"]["tools"]) == 13


def test_mcp_ping():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 5, "method": "ping"})
    assert resp.json() == {"jsonrpc": "2.0", "id": 5, "result": {}}


def test_mcp_tools_call_returns_pretty_json_text(backend):
    backend.responder = lambda request: httpx.Response(200, json={"agents": 42, "referral": "10%"})
    client = TestClient(app)
    resp = _call(client, 6, "gossip", {})
    assert resp.status_code == 200
    result = resp.json()["result"]
    assert result["content"] == [
        {"type": "text", "text": json.dumps({"agents": 42, "referral": "10%"}, indent=2)}
    ]
    assert result["structuredContent"] == {"agents": 42, "referral": "10%"}
    assert len(backend.requests) == 1
    assert backend.last.url.path == "/v1/gossip"


def test_mcp_call_tool_legacy_shape(backend):
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 7,
            "method": "call_tool",
            "params": {"tool": "supported_chains", "params": {}},
        },
    )
    assert resp.json()["result"]["structuredContent"] == {"ok": True}


def test_mcp_backend_error_is_reported_in_band(backend):
    backend.responder = lambda request: httpx.Response(400, json={"error": "bad route"})
    client = TestClient(app)
    resp = _call(
        client,
        8,
        "swap_quote",
        {
            "api_key": "k",
            "from_chain": "base",
            "to_chain": "mars",
            "from_token": "USDC",
            "to_token": "ROCK",
            "amount": "1",
        },
    )
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "API 400: bad route"


def test_mcp_validation_error_never_reaches_backend(backend):
    client = TestClient(app)
    resp = _call(client, 9, "balance", {"agent_id": 7, "service_key": "svc"})
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "Invalid parameters: parameter 'agent_id' must be a string"
    assert backend.requests == []


def test_mcp_transactions_default_limit(backend):
    client = TestClient(app)
    _call(client, 10, "transactions", {"agent_id": "a1", "service_key": "svc"})
    assert backend.last.url.params["limit"] == "50"
    _call(client, 11, "transactions", {"agent_id": "a1", "service_key": "svc", "limit": 10})
    assert backend.last.url.params["limit"] == "10"


def test_mcp_privacy_swap_single_request(backend):
    backend.responder = lambda request: httpx.Response(
        200, json={"order_id": "ord_1", "status": "pending", "deposit": {"address": "0xd"}}
    )
    client = TestClient(app)
    resp = _call(
        client,
        12,
        "privacy_swap",
        {
            "api_key": "k",
            "from_chain": "base",
            "from_token": "USDC",
            "amount": "30000000",
            "to_chain": "solana",
            "to_token": "SOL",
        },
    )
    summary = json.loads(resp.json()["result"]["content"][0]["text"])
    assert summary["leg1_to_xmr"]["order_id"] == "ord_1"
    assert "'swap' tool" in summary["leg2_from_xmr"]["instruction"]
    assert len(backend.requests) == 1


def test_mcp_unknown_tool_is_invalid_params():
    client = TestClient(app)
    resp = _call(client, 13, "drain_wallet", {})
    data = resp.json()
    assert data["error"] == {"code": -32602, "message": "Unknown tool: drain_wallet"}


def test_mcp_unknown_method_returns_error():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 14, "method": "not_a_real_method"})
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32601


def test_mcp_invalid_params_type():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 15, "method": "tools/call", "params": []})
    assert resp.json()["error"]["code"] == -32602


def test_mcp_call_tool_missing_name_is_invalid_params():
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 16, "method": "tools/call", "params": {"arguments": {}}},
    )
    assert resp.json()["error"]["code"] == -32602


def test_mcp_parse_error_invalid_json():
    client = TestClient(app)
    resp = client.post("/mcp", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700


def test_mcp_non_object_body_is_invalid_request():
    client = TestClient(app)
    resp = client.post("/mcp", json=[1, 2])
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600


def test_mcp_missing_method_invalid_request():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 17})
    assert resp.json()["error"]["code"] == -32600


def test_mcp_initialized_notification_ignored():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert resp.status_code == 204
    assert resp.text == ""
