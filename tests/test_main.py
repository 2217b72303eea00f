from wallet_mcp import __main__ as entry


def test_main_defaults_to_stdio(monkeypatch):
    calls = []
    monkeypatch.setattr("wallet_mcp.stdio.run", lambda: calls.append("stdio"))
    entry.main([])
    assert calls == ["stdio"]


def test_main_http_runs_uvicorn(monkeypatch):
    import uvicorn

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    entry.main(["--http", "--port", "9001"])
    assert calls[0]["port"] == 9001
