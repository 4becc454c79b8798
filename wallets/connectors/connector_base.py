"""
Base Connector Interface for Wallet Integration.

This module defines the abstract base class that all wallet connectors must implement.

Arquitectura:
    Application (wallet-abstraction layer) → BaseConnector (Interface) → InjectedConnector
                                                                      → MetaMaskSDKConnector

================================================================================

📋 RESPONSABILIDADES DEL CONECTOR:

    ✅ DEBE IMPLEMENTAR (Wallet-Specific):
        - Conexión a la wallet (handshake, autorización)
        - Lectura de cuenta y chain id
        - Listeners de accountsChanged / chainChanged / disconnect
        - Cambio de red
        - Clasificación de errores del proveedor

    ❌ NO DEBE HACER:
        - Transporte con la wallet (lo hace el SDK / proveedor)
        - Semántica de métodos RPC más allá de la conexión

================================================================================

🔔 EVENTOS EMITIDOS HACIA LA APLICACIÓN:

    change      {"account": "0x..."} | {"chain": {"id": 1, "unsupported": False}}
    connect     {"account": ..., "chain": ...}
    disconnect  (sin payload)
    error       Exception
    message     {"type": "connecting"}

================================================================================
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.chains import DEFAULT_CHAINS, Chain
from core.events import EventEmitter
from core.storage import ConnectorStorage


@dataclass
class ChainDescriptor:
    """Chain a connection ended up on."""

    id: int
    unsupported: bool = False


@dataclass
class ConnectionResult:
    """Outcome of a successful ``connect()``."""

    account: str
    chain: ChainDescriptor
    provider: Any = None
    is_connected: bool = True


class BaseConnector(EventEmitter, ABC):
    """
    Abstract base class for wallet connectors.

    Responsibilities:
        - Connect to / disconnect from a wallet
        - Report account and chain
        - Translate provider events into connector events
        - Decide whether a chain is supported

    Example:
        ```python
        connector = MetaMaskSDKConnector(chains=[mainnet, polygon], options=...)
        connector.set_storage(create_storage())
        connector.on("change", handle_change)

        result = await connector.connect(chain_id=137)
        print(result.account, result.chain.id)
        ```
    """

    def __init__(self, chains: Optional[List[Chain]] = None, options: Any = None):
        super().__init__()
        self.chains: List[Chain] = list(chains) if chains else list(DEFAULT_CHAINS)
        self.options = options
        self.storage: Optional[ConnectorStorage] = None

    # =========================================================
    # 🏷️ IDENTITY
    # =========================================================

    @property
    @abstractmethod
    def id(self) -> str:
        """Connector identifier (e.g. "metaMaskSDK")."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable name."""
        pass

    @property
    @abstractmethod
    def ready(self) -> bool:
        """Whether the connector can be used in this environment."""
        pass

    # =========================================================
    # 🔌 CONNECTION MANAGEMENT
    # =========================================================

    @abstractmethod
    async def connect(self, chain_id: Optional[int] = None) -> ConnectionResult:
        """
        Connect to the wallet.

        Args:
            chain_id: Chain the application wants to be on (optional)

        Raises:
            UserRejectedRequestError: The user declined the connection
            ResourceUnavailableRpcError: The wallet is busy with another request
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def get_account(self) -> str:
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        pass

    @abstractmethod
    async def get_provider(self) -> Any:
        pass

    @abstractmethod
    async def is_authorized(self) -> bool:
        pass

    async def switch_chain(self, chain_id: int) -> Chain:
        raise NotImplementedError(f"{self.name} does not support switching chains")

    async def watch_asset(self, address: str, symbol: str, decimals: int = 18, image: Optional[str] = None) -> bool:
        raise NotImplementedError(f"{self.name} does not support watching assets")

    # =========================================================
    # 📡 PROVIDER EVENT HANDLERS
    # =========================================================

    @abstractmethod
    def on_accounts_changed(self, accounts: List[str]) -> None:
        pass

    @abstractmethod
    def on_chain_changed(self, chain_id: Any) -> None:
        pass

    @abstractmethod
    def on_disconnect(self, error: Optional[BaseException] = None) -> Optional[asyncio.Future]:
        """Called synchronously by the provider; async follow-up work is returned as a task."""

    # =========================================================
    # 🧰 HELPERS
    # =========================================================

    def is_chain_unsupported(self, chain_id: int) -> bool:
        """True if ``chain_id`` is not among the configured chains."""
        return not any(chain.id == chain_id for chain in self.chains)

    def get_block_explorer_urls(self, chain: Chain) -> Optional[List[str]]:
        """Default explorer first, then the others."""
        explorers: Dict[str, Any] = dict(chain.block_explorers)
        default = explorers.pop("default", None)
        if default is None:
            return None
        return [default.url] + [explorer.url for explorer in explorers.values()]

    def set_storage(self, storage: ConnectorStorage) -> None:
        self.storage = storage

    @property
    def status_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "ready": self.ready,
            "chains": [chain.id for chain in self.chains],
            "storage": self.storage is not None,
        }
