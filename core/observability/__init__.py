"""Observability Package."""

from .logging_config import (
    bind_connector_context,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from .metrics import (
    observe_authorization_wait,
    record_chain_switch,
    record_connect_attempt,
    record_connect_failure,
    record_connect_success,
    record_disconnect,
    record_listener_resync,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "bind_connector_context",
    "bind_context",
    "unbind_context",
    "clear_context",
    # Metrics
    "record_connect_attempt",
    "record_connect_success",
    "record_connect_failure",
    "record_disconnect",
    "record_chain_switch",
    "record_listener_resync",
    "observe_authorization_wait",
]
