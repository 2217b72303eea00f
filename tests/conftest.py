import os
import sys
from typing import Any, Callable, List, Optional

import httpx
import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from wallet_mcp.config import WalletConfig  # noqa: E402
from wallet_mcp.wallet_api import WalletApiClient, default_client  # noqa: E402

TEST_BASE_URL = "https://wallet.test"


class RecordingBackend:
    """MockTransport handler that records every request it sees."""

    def __init__(self, responder: Optional[Callable[[httpx.Request], Any]] = None) -> None:
        self.requests: List[httpx.Request] = []
        self.responder = responder or (lambda request: httpx.Response(200, json={"ok": True}))

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def build_client(backend: RecordingBackend, *, base_url: str = TEST_BASE_URL, timeout: float = 30.0):
    config = WalletConfig(base_url=base_url, timeout=timeout)
    async_client = httpx.AsyncClient(
        base_url=base_url, timeout=timeout, transport=httpx.MockTransport(backend)
    )
    return WalletApiClient(config, async_client=async_client)


@pytest.fixture
def make_client():
    """Factory returning ``(client, backend)`` wired through httpx.MockTransport."""

    def _make(responder=None, **kwargs):
        backend = RecordingBackend(responder)
        return build_client(backend, **kwargs), backend

    return _make


@pytest.fixture
def backend(monkeypatch):
    """Route the module-level default client through a recording mock backend."""
    recorder = RecordingBackend()
    async_client = httpx.AsyncClient(
        base_url=TEST_BASE_URL, transport=httpx.MockTransport(recorder)
    )
    monkeypatch.setattr(default_client, "_client", async_client)
    monkeypatch.setattr(default_client, "_owns_client", False)
    return recorder
