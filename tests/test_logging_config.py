import json
import logging

from wallet_mcp.config import WalletConfig, default_config
from wallet_mcp.mcp import log_tool_result
from wallet_mcp.server import JsonFormatter, configure_logging


def test_logging_level_config():
    level = getattr(logging, default_config.log_level.upper(), logging.INFO)
    assert level in (
        logging.DEBUG,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.CRITICAL,
    )


def test_json_formatter_includes_context_fields():
    record = logging.LogRecord("wallet_mcp.mcp", logging.WARNING, __file__, 1, "tool=%s", ("swap",), None)
    record.tool = "swap"
    record.request_id = "rid-1"
    payload = json.loads(JsonFormatter().format(record))
    assert payload == {
        "level": "WARNING",
        "message": "tool=swap",
        "name": "wallet_mcp.mcp",
        "tool": "swap",
        "request_id": "rid-1",
    }


def test_configure_logging_plain_does_not_raise():
    configure_logging(WalletConfig(log_format="plain", log_level="debug"))


def test_log_tool_result_records_outcome(caplog):
    with caplog.at_level(logging.INFO, logger="wallet_mcp.mcp"):
        log_tool_result("gossip", None, "rid-2")
        log_tool_result("swap", "API 402: insufficient funds", "rid-3")
    messages = [record.getMessage() for record in caplog.records]
    assert "tool=gossip outcome=success request_id=rid-2" in messages
    assert "tool=swap outcome=error error=API 402: insufficient funds request_id=rid-3" in messages
