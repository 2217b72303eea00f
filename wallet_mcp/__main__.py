"""Entry point: ``python -m wallet_mcp [--http]``."""

from __future__ import annotations

import argparse

from wallet_mcp.config import default_config


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="wallet-mcp", description="Purple Flea Wallet MCP server")
    parser.add_argument("--http", action="store_true", help="serve the FastAPI app instead of stdio")
    parser.add_argument("--host", default=default_config.host)
    parser.add_argument("--port", type=int, default=default_config.port)
    args = parser.parse_args(argv)

    # Importing the server module configures logging for both transports.
    from wallet_mcp.server import app

    if args.http:
        import uvicorn

        uvicorn.run(app, host=args.host, port=args.port, log_level=default_config.log_level.lower())
        return

    from wallet_mcp import stdio

    stdio.run()


if __name__ == "__main__":
    main()
