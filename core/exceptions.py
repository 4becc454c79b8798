"""
Custom exceptions for the wallet connector library.

This module defines all custom exceptions used throughout the application
for consistent error handling and better debugging.

RPC errors carry the numeric ``code`` of the EIP-1193 / JSON-RPC provider
error convention so callers can branch on it instead of probing arbitrary
exception attributes.
"""

from typing import Any, Dict, Optional

# =========================================================
# 🔢 PROVIDER ERROR CODES
# =========================================================

USER_REJECTED_REQUEST_CODE = 4001
UNRECOGNIZED_CHAIN_CODE = 4902
DISCONNECTED_RETRYABLE_CODE = 1013
RESOURCE_UNAVAILABLE_CODE = -32002


class ConnectorError(Exception):
    """Base exception for all wallet connector errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ConnectorError):
    """Raised when configuration is invalid or missing."""

    pass


class ConnectorNotFoundError(ConnectorError):
    """Raised when no provider is available for the connector."""

    def __init__(self, message: str = "Connector not found"):
        super().__init__(message)


class ChainNotConfiguredError(ConnectorError):
    """Raised when switching to a chain the connector was not configured with."""

    def __init__(self, chain_id: int, connector_id: str):
        super().__init__(
            f'Chain "{chain_id}" not configured for connector "{connector_id}".',
            {"chain_id": chain_id, "connector_id": connector_id},
        )
        self.chain_id = chain_id
        self.connector_id = connector_id


class ProviderRpcError(ConnectorError):
    """
    Error returned by a wallet provider for a JSON-RPC request.

    Args:
        message: Human readable message
        code: Numeric provider error code (e.g. 4001, -32002)
        data: Optional payload attached by the wallet
        cause: Original exception, when this error wraps another one
    """

    code: int = -1

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, {"code": code if code is not None else self.code})
        if code is not None:
            self.code = code
        self.data = data
        self.cause = cause


class UserRejectedRequestError(ProviderRpcError):
    """The wallet holder declined the request."""

    code = USER_REJECTED_REQUEST_CODE

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("User rejected the request.", cause=cause)
        self.__cause__ = cause


class ResourceUnavailableRpcError(ProviderRpcError):
    """The wallet is already processing a conflicting request."""

    code = RESOURCE_UNAVAILABLE_CODE

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("Requested resource not available.", cause=cause)
        self.__cause__ = cause


class SwitchChainError(ProviderRpcError):
    """Raised when the wallet failed to switch networks."""

    code = 4902

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("An error occurred when attempting to switch chain.", cause=cause)
        self.__cause__ = cause


def rpc_error_code(error: BaseException) -> Optional[int]:
    """
    Extract the numeric provider error code from an exception.

    Tagged ``ProviderRpcError`` instances answer directly; foreign exceptions
    raised by an SDK are accepted when they carry an integer ``code``.
    """
    if isinstance(error, ProviderRpcError):
        return error.code
    code = getattr(error, "code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return None


def nested_rpc_error_code(error: BaseException) -> Optional[int]:
    """Code of ``error.data.originalError`` (mobile wallets wrap 4902 there)."""
    data = getattr(error, "data", None)
    if not isinstance(data, dict):
        return None
    original = data.get("originalError")
    if isinstance(original, dict):
        code = original.get("code")
        if isinstance(code, int):
            return code
    return None
