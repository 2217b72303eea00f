"""
Purple Flea Wallet MCP server package.

This package exposes the Purple Flea multi-chain wallet HTTP API as MCP tools
for LLM agents. See DESIGN.md for full details.
"""

__all__ = ["config"]
