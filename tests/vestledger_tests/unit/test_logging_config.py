"""
Tests for structured JSON logging setup.
"""

import json
import logging

from vestledger.core.config_manager import LoggingConfig
from vestledger.core.logging_config import setup_logging, setup_logging_from_config, truncate_address


def test_truncate_address():
    assert truncate_address("0x" + "ab" * 20) == "0xabab...abab"
    assert truncate_address("short") == "short"
    assert truncate_address("") == "UNKNOWN"


def test_setup_logging_writes_json(tmp_path):
    log_file = tmp_path / "logs" / "ledger.json"
    logger = setup_logging(
        name="vestledger.test_json",
        log_file=str(log_file),
        level="INFO",
        environment="testnet",
        enable_console=False,
    )

    logger.info("Released %s", 5, extra={"event": "vesting.release", "amount": 5})
    for handler in logger.handlers:
        handler.flush()

    record = json.loads(log_file.read_text().strip().splitlines()[-1])
    assert record["message"] == "Released 5"
    assert record["event"] == "vesting.release"
    assert record["amount"] == 5
    assert record["environment"] == "testnet"
    assert record["service"] == "vestledger"
    assert record["level"] == "info"
    assert record["timestamp"]
    assert record["source"]["function"] == "test_setup_logging_writes_json"


def test_setup_logging_replaces_handlers(tmp_path):
    first = setup_logging(name="vestledger.test_handlers", enable_console=True, enable_file=False)
    second = setup_logging(name="vestledger.test_handlers", enable_console=True, enable_file=False)
    assert first is second
    assert len(second.handlers) == 1


def test_setup_logging_from_config(tmp_path):
    config = LoggingConfig(level="DEBUG", log_file=str(tmp_path / "x.json"), enable_console=False)
    logger = setup_logging_from_config(config, name="vestledger.test_from_config")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
