"""
Authorization waiters for the MetaMask SDK handshake.

Depending on the SDK/wallet version, "the wallet authorized this dapp" is
signalled differently:

    - Current SDKs emit a one-shot PROVIDER_UPDATE once authorization and
      provider selection (extension vs mobile) are both settled.
    - Older wallets report accounts before authorization is recorded; they
      expose a synchronous "already authorized" check (on the SDK or on its
      connection object), an "extension active" flag, or a one-shot
      AUTHORIZED signal on the connection's connector.
    - The oldest SDKs have none of the signals; the account list resolved by
      ``sdk.connect()`` is the only completion signal.

Every path resolves the same completion cell; the first one wins and the
others become no-ops (one-shot listeners, ``done()`` guard). There is no
timeout: callers wrap ``connect()`` themselves if they need one.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from wallets.sdk import SDKEventType

Resolve = Callable[[str], None]


@dataclass(frozen=True)
class SDKCapabilities:
    """What the SDK instance exposes, detected once at construction."""

    provider_update: bool
    sync_authorized: bool
    connection_object: bool
    extension_flag: bool

    @classmethod
    def detect(cls, sdk: Any) -> "SDKCapabilities":
        supported = getattr(sdk, "supported_events", None)
        has_once = callable(getattr(sdk, "once", None))
        if supported is None:
            provider_update = has_once
        else:
            provider_update = has_once and SDKEventType.PROVIDER_UPDATE in supported
        return cls(
            provider_update=provider_update,
            sync_authorized=callable(getattr(sdk, "is_authorized", None)),
            connection_object=callable(getattr(sdk, "get_connection", None)),
            extension_flag=callable(getattr(sdk, "is_extension_active", None)),
        )


class AuthorizationWaiter(ABC):
    """
    Waits until the wallet authorized the current session.

    Subclasses arm their primary signal; the legacy checks are shared.
    """

    name = "base"

    def __init__(self, sdk: Any, capabilities: SDKCapabilities, logger: Optional[logging.Logger] = None):
        self.sdk = sdk
        self.capabilities = capabilities
        self.logger = logger or logging.getLogger("AuthorizationWaiter")

    async def wait(self, connect_trigger: Optional[asyncio.Future] = None) -> bool:
        """
        Resolve once authorized.

        Args:
            connect_trigger: Task running ``sdk.connect()`` (may be ignored)

        Returns:
            True
        """
        authorized = asyncio.get_running_loop().create_future()

        def resolve(source: str) -> None:
            if not authorized.done():
                self.logger.debug(f"🔓 Authorization settled via {source}")
                authorized.set_result(True)

        self._arm_primary(resolve, connect_trigger)
        self._arm_legacy(resolve)
        return await authorized

    @abstractmethod
    def _arm_primary(self, resolve: Resolve, connect_trigger: Optional[asyncio.Future]) -> None:
        pass

    def _arm_legacy(self, resolve: Resolve) -> None:
        """Synchronous "already authorized" check, else the AUTHORIZED signal."""
        if self._already_authorized():
            resolve("sync_check")
            return

        connector = self._connection_connector()
        if connector is not None:
            connector.once(SDKEventType.AUTHORIZED, lambda *_: resolve("authorized_signal"))

    def _already_authorized(self) -> bool:
        if self.capabilities.extension_flag and self.sdk.is_extension_active():
            return True
        if self.capabilities.sync_authorized and self.sdk.is_authorized():
            return True
        connection = self._connection()
        return bool(connection is not None and connection.is_authorized())

    def _connection(self) -> Any:
        if not self.capabilities.connection_object:
            return None
        return self.sdk.get_connection()

    def _connection_connector(self) -> Any:
        connection = self._connection()
        if connection is None:
            return None
        get_connector = getattr(connection, "get_connector", None)
        return get_connector() if callable(get_connector) else None


class ProviderUpdateWaiter(AuthorizationWaiter):
    """Primary signal: one-shot PROVIDER_UPDATE from the SDK."""

    name = "provider_update"

    def _arm_primary(self, resolve: Resolve, connect_trigger: Optional[asyncio.Future]) -> None:
        self.sdk.once(SDKEventType.PROVIDER_UPDATE, lambda *_: resolve("provider_update"))


class EagerConnectWaiter(AuthorizationWaiter):
    """
    Primary signal: ``sdk.connect()`` resolving with the account list.

    A rejected trigger does not resolve anything; the legacy checks keep
    waiting.
    """

    name = "eager_connect"

    def _arm_primary(self, resolve: Resolve, connect_trigger: Optional[asyncio.Future]) -> None:
        if connect_trigger is None:
            return

        def _on_done(task: asyncio.Future) -> None:
            if not task.cancelled() and task.exception() is None:
                resolve("connect_result")

        connect_trigger.add_done_callback(_on_done)


def select_authorization_waiter(sdk: Any, logger: Optional[logging.Logger] = None) -> AuthorizationWaiter:
    """Pick the waiter matching what the SDK exposes."""
    capabilities = SDKCapabilities.detect(sdk)
    if capabilities.provider_update:
        return ProviderUpdateWaiter(sdk, capabilities, logger)
    return EagerConnectWaiter(sdk, capabilities, logger)
