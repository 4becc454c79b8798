import json
import logging

import structlog
from prometheus_client import REGISTRY

from core.observability import (
    bind_connector_context,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    record_connect_attempt,
    record_connect_failure,
    record_listener_resync,
    unbind_context,
)


def sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetrics:
    def test_connect_counters(self):
        before = sample("wallet_connect_attempts_total", {"connector": "test"})
        record_connect_attempt("test")
        assert sample("wallet_connect_attempts_total", {"connector": "test"}) == before + 1

    def test_failure_labels(self):
        labels = {"connector": "test", "category": "user_rejected"}
        before = sample("wallet_connect_failures_total", labels)
        record_connect_failure("test", "user_rejected")
        assert sample("wallet_connect_failures_total", labels) == before + 1

    def test_listener_resync(self):
        labels = {"connector": "test", "provider_changed": "True"}
        before = sample("wallet_listener_resyncs_total", labels)
        record_listener_resync("test", True)
        assert sample("wallet_listener_resyncs_total", labels) == before + 1


def reset_logging(handlers):
    root = logging.getLogger()
    for handler in handlers:
        root.removeHandler(handler)
        handler.close()
    clear_context()
    structlog.reset_defaults()


class TestLogging:
    def test_configure_json(self, tmp_path):
        log_file = tmp_path / "connector.log"
        handlers = configure_logging(log_level="DEBUG", log_format="json", log_file=str(log_file))
        try:
            assert structlog.is_configured()
            assert get_logger("test") is not None
            assert len(handlers) == 2
        finally:
            reset_logging(handlers)

    def test_reconfigure_replaces_handlers(self):
        first = configure_logging(log_level="INFO", log_format="console")
        second = configure_logging(log_level="INFO", log_format="console")
        try:
            root = logging.getLogger()
            assert first[0] not in root.handlers
            assert second[0] in root.handlers
        finally:
            reset_logging(second)

    def test_stdlib_records_carry_connector_context(self, tmp_path):
        log_file = tmp_path / "connector.log"
        handlers = configure_logging(log_level="INFO", log_format="json", log_file=str(log_file))
        try:
            bind_connector_context("metaMaskSDK", chain_id=137)
            logging.getLogger("MetaMaskSDKConnector").info("✅ MetaMask connected")
            record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        finally:
            reset_logging(handlers)

        assert record["event"] == "✅ MetaMask connected"
        assert record["logger"] == "MetaMaskSDKConnector"
        assert record["level"] == "info"
        assert record["connector_id"] == "metaMaskSDK"
        assert record["chain_id"] == 137
        # Bound as None before authorization, not rendered
        assert "account" not in record

    def test_context(self):
        bind_context(connector_id="metaMaskSDK", session="abc")
        assert structlog.contextvars.get_contextvars() == {"connector_id": "metaMaskSDK", "session": "abc"}

        unbind_context("session")
        assert structlog.contextvars.get_contextvars() == {"connector_id": "metaMaskSDK"}

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_connector_context(self):
        bind_connector_context("metaMaskSDK", chain_id=1, account="0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
        try:
            assert structlog.contextvars.get_contextvars() == {
                "connector_id": "metaMaskSDK",
                "chain_id": 1,
                "account": "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
            }
        finally:
            clear_context()
