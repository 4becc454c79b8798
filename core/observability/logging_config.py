"""
Structured Logging Configuration for wallet connectors.

Connectors log through plain ``logging.getLogger("<Component>")`` loggers.
``configure_logging`` installs a ``structlog.stdlib.ProcessorFormatter`` on
the root handlers so those records are rendered by structlog (console in
development, JSON in production) and carry the connector context bound with
``bind_connector_context`` (connector id, chain, account).
"""

import logging
import sys
from typing import Any, Dict, List, Optional

import structlog

from config import connector as connector_config

# Context keys rendered on every record of a connect() flow
CONNECTOR_CONTEXT_KEYS = ("connector_id", "chain_id", "account")

_installed_handlers: List[logging.Handler] = []


def _drop_empty_connector_fields(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Connector fields bound as None (e.g. account before authorization) are not rendered."""
    for key in CONNECTOR_CONTEXT_KEYS:
        if key in event_dict and event_dict[key] is None:
            del event_dict[key]
    return event_dict


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
):
    """
    Configure structured logging.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR (default: CONNECTOR_LOG_LEVEL)
        log_format: 'json' or 'console' (default: CONNECTOR_LOG_FORMAT)
        log_file: Optional file receiving JSON records (default: CONNECTOR_LOG_FILE)
    """
    log_level = (log_level or connector_config.LOG_LEVEL).upper()
    log_format = log_format or connector_config.LOG_FORMAT
    log_file = log_file or connector_config.LOG_FILE

    # Applied to structlog events and to records from stdlib loggers alike
    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _drop_empty_connector_fields,
    ]

    stream_processors = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_format == "json":
        stream_processors.append(structlog.processors.format_exc_info)
    stream_processors.append(_renderer(log_format))

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(foreign_pre_chain=pre_chain, processors=stream_processors)
    )
    handlers = [stream_handler]

    if log_file:
        # Files are always machine readable
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=pre_chain,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        handlers.append(file_handler)

    root = logging.getLogger()
    # Re-configuring replaces the handlers installed by a previous call
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers[:] = handlers
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(getattr(logging, log_level))

    structlog.configure(
        processors=pre_chain
        + [
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return handlers


def get_logger(name: str = None):
    """Structured logger (records go through the same handlers as stdlib loggers)."""
    return structlog.get_logger(name)


def bind_connector_context(connector_id: str, chain_id: Optional[int] = None, account: Optional[str] = None):
    """
    Bind the connector fields to every record logged from the current task.

    Example:
        bind_connector_context("metaMaskSDK")
        logger.info("✅ MetaMask connected")  # includes connector_id=metaMaskSDK
    """
    structlog.contextvars.bind_contextvars(connector_id=connector_id, chain_id=chain_id, account=account)


def bind_context(**kwargs):
    """Bind arbitrary context variables (e.g. ``session="abc"``)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys):
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context():
    structlog.contextvars.clear_contextvars()
