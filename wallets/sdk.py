"""
Wallet SDK boundary.

The wallet SDK (MetaMask SDK) owns transport, deep-linking, QR pairing and
account storage. This module only describes the surface the connectors rely
on, plus a small factory registry used when a connector is built from SDK
options instead of a ready SDK instance.

Provider surface (EIP-1193 style):
    await provider.request(method, params)
    provider.on(event, handler) / provider.remove_listener(event, handler)
    provider.chain_id  -> "0x1" or None before the first chainChanged

SDK surface:
    sdk.is_initialized() / await sdk.init()
    sdk.get_provider()
    await sdk.connect()           (account list, may reject)
    sdk.terminate()
    sdk.once(SDKEventType.PROVIDER_UPDATE, handler)
    optional: sdk.is_authorized()
    optional: sdk.get_connection().is_authorized()
              sdk.get_connection().get_connector().once(SDKEventType.AUTHORIZED, handler)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from core.exceptions import ConfigurationError

logger = logging.getLogger("WalletSDK")


class SDKEventType(str, Enum):
    """One-shot signals emitted by the SDK during the handshake."""

    PROVIDER_UPDATE = "provider_update"
    AUTHORIZED = "authorized"


class SDKProvider(ABC):
    """Provider handed out by the SDK (browser extension or mobile bridge)."""

    chain_id: Optional[str] = None

    @abstractmethod
    async def request(self, method: str, params: Any = None) -> Any:
        """Send JSON-RPC request."""
        pass

    @abstractmethod
    def on(self, event: str, handler: Callable) -> Any:
        """Subscribe to events."""
        pass

    @abstractmethod
    def remove_listener(self, event: str, handler: Callable) -> Any:
        """Unsubscribe from events."""
        pass


class WalletSDK(ABC):
    """Wallet SDK instance."""

    @abstractmethod
    def is_initialized(self) -> bool:
        pass

    @abstractmethod
    async def init(self) -> None:
        """Initialize the SDK. Must be idempotent."""
        pass

    @abstractmethod
    def get_provider(self) -> Optional[SDKProvider]:
        """Provider currently selected by the SDK (may change identity)."""
        pass

    @abstractmethod
    async def connect(self) -> List[str]:
        """Start the wallet handshake; resolves with the account list."""
        pass

    @abstractmethod
    def terminate(self) -> None:
        """Terminate the wallet session."""
        pass

    @abstractmethod
    def once(self, event: SDKEventType, handler: Callable) -> Any:
        """Register a one-shot handler for an SDK signal."""
        pass


@dataclass
class SDKOptions:
    """
    Options used to build an SDK instance through the factory registry.

    Args:
        sdk_name: Registered factory name
        dapp_metadata: Name/url shown by the wallet during pairing
        check_installation_immediately: Probe for the browser extension at init
        extra: Factory specific options
    """

    sdk_name: str = "metamask"
    dapp_metadata: Dict[str, str] = field(default_factory=dict)
    check_installation_immediately: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)


SDKFactory = Callable[[SDKOptions], WalletSDK]

_SDK_FACTORIES: Dict[str, SDKFactory] = {}


def register_sdk_factory(name: str, factory: SDKFactory) -> None:
    """Register a factory building SDK instances for ``name``."""
    key = name.strip().lower()
    if key in _SDK_FACTORIES:
        logger.warning(f"⚠️ Replacing SDK factory '{key}'")
    _SDK_FACTORIES[key] = factory


def unregister_sdk_factory(name: str) -> None:
    _SDK_FACTORIES.pop(name.strip().lower(), None)


def registered_sdks() -> List[str]:
    return sorted(_SDK_FACTORIES)


def create_sdk(options: SDKOptions) -> WalletSDK:
    """
    Build an SDK instance from options.

    Raises:
        ConfigurationError: If no factory is registered for ``options.sdk_name``
    """
    key = options.sdk_name.strip().lower()
    factory = _SDK_FACTORIES.get(key)
    if factory is None:
        raise ConfigurationError(
            f"No wallet SDK registered as '{options.sdk_name}'",
            {"registered": registered_sdks()},
        )
    return factory(options)
