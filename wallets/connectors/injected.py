"""
Injected Connector.

Connector for EIP-1193 providers injected by a wallet (browser extension
``window.ethereum`` or a provider handed out by a wallet SDK).

Shim disconnect:
    Wallet providers do not reliably report that the user disconnected the
    dapp before a reload. When ``shim_disconnect`` is enabled the connector
    stores ``"<id>.shimDisconnect" = True`` after a successful connect and
    removes it on disconnect; ``is_authorized()`` reports False while the
    flag is absent.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from eth_utils import to_checksum_address

from core.chains import Chain, find_chain, normalize_chain_id, placeholder_chain
from core.events import ConnectorEvent, ProviderEvent
from core.exceptions import (
    DISCONNECTED_RETRYABLE_CODE,
    UNRECOGNIZED_CHAIN_CODE,
    USER_REJECTED_REQUEST_CODE,
    ChainNotConfiguredError,
    ConnectorError,
    ConnectorNotFoundError,
    SwitchChainError,
    UserRejectedRequestError,
    nested_rpc_error_code,
    rpc_error_code,
)

from ..resilience.error_classifier import ConnectErrorClassifier
from .connector_base import BaseConnector, ChainDescriptor, ConnectionResult

# =========================================================
# 📡 JSON-RPC METHODS
# =========================================================

ETH_REQUEST_ACCOUNTS = "eth_requestAccounts"
ETH_ACCOUNTS = "eth_accounts"
ETH_CHAIN_ID = "eth_chainId"
WALLET_SWITCH_CHAIN = "wallet_switchEthereumChain"
WALLET_ADD_CHAIN = "wallet_addEthereumChain"
WALLET_WATCH_ASSET = "wallet_watchAsset"


@dataclass
class InjectedConnectorOptions:
    """
    Args:
        name: Display name (detected from the provider when omitted)
        shim_disconnect: Persist a "was connected" flag across restarts
        get_provider: Callable returning the injected provider (or None)
    """

    name: Optional[str] = None
    shim_disconnect: bool = True
    get_provider: Optional[Callable[[], Any]] = None


def _detect_name(provider: Any) -> str:
    if getattr(provider, "is_brave_wallet", False):
        return "Brave Wallet"
    if getattr(provider, "is_coinbase_wallet", False):
        return "Coinbase Wallet"
    if getattr(provider, "is_meta_mask", False):
        return "MetaMask"
    return "Injected"


class InjectedConnector(BaseConnector):
    """
    Connector for injected EIP-1193 providers.
    """

    def __init__(self, chains: Optional[List[Chain]] = None, options: Optional[InjectedConnectorOptions] = None):
        options = options or InjectedConnectorOptions()
        super().__init__(chains=chains, options=options)
        self.logger = logging.getLogger("InjectedConnector")

        self._injected_provider: Any = None
        provider = options.get_provider() if options.get_provider else None

        if isinstance(options.name, str):
            self._name = options.name
        elif provider is not None:
            self._name = _detect_name(provider)
        else:
            self._name = "Injected"

        self._ready = provider is not None

        # Same bound-method objects for every on/remove_listener call
        self._provider_handlers = {
            ProviderEvent.ACCOUNTS_CHANGED.value: self.on_accounts_changed,
            ProviderEvent.CHAIN_CHANGED.value: self.on_chain_changed,
            ProviderEvent.DISCONNECT.value: self.on_disconnect,
        }

        self._classifier = ConnectErrorClassifier(self.is_user_rejected_request_error, name="InjectedConnector")

    @property
    def id(self) -> str:
        return "injected"

    @property
    def name(self) -> str:
        return self._name

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def shim_disconnect_key(self) -> str:
        return f"{self.id}.shimDisconnect"

    # =========================================================
    # 🔌 CONNECTION MANAGEMENT
    # =========================================================

    async def connect(self, chain_id: Optional[int] = None) -> ConnectionResult:
        try:
            provider = await self.get_provider()
            if provider is None:
                raise ConnectorNotFoundError()

            self._attach_listeners(provider)
            self.emit(ConnectorEvent.MESSAGE, {"type": "connecting"})

            accounts = await provider.request(ETH_REQUEST_ACCOUNTS)
            account = to_checksum_address(accounts[0])

            current_id = await self.get_chain_id()
            unsupported = self.is_chain_unsupported(current_id)
            if chain_id is not None and current_id != chain_id:
                chain = await self.switch_chain(chain_id)
                current_id = chain.id
                unsupported = self.is_chain_unsupported(current_id)

            self._set_shim_flag()
            self.logger.info(f"✅ Connected {account} on chain {current_id}")

            return ConnectionResult(
                account=account,
                chain=ChainDescriptor(id=current_id, unsupported=unsupported),
                provider=provider,
            )
        except Exception as error:
            classified = self._classifier.classify(error).to_exception()
            if classified is error:
                raise
            raise classified from error

    async def disconnect(self) -> None:
        provider = await self.get_provider()
        if provider is None or not hasattr(provider, "remove_listener"):
            return

        self._detach_listeners(provider)
        self._clear_shim_flag()
        self.logger.info("🔌 Disconnected")

    async def get_account(self) -> str:
        provider = await self.get_provider()
        if provider is None:
            raise ConnectorNotFoundError()
        accounts = await provider.request(ETH_ACCOUNTS)
        if not accounts:
            raise ConnectorError("No accounts available")
        return to_checksum_address(accounts[0])

    async def get_chain_id(self) -> int:
        provider = await self.get_provider()
        if provider is None:
            raise ConnectorNotFoundError()
        return normalize_chain_id(await provider.request(ETH_CHAIN_ID))

    async def get_provider(self) -> Any:
        if self.options.get_provider is not None:
            provider = self.options.get_provider()
            if provider is not None:
                self._injected_provider = provider
        return self._injected_provider

    async def is_authorized(self) -> bool:
        try:
            if self.options.shim_disconnect and not self._has_shim_flag():
                return False
            provider = await self.get_provider()
            if provider is None:
                raise ConnectorNotFoundError()
            account = await self.get_account()
            return bool(account)
        except Exception as e:
            self.logger.debug(f"is_authorized -> False ({e})")
            return False

    # =========================================================
    # 🌐 CHAIN MANAGEMENT
    # =========================================================

    async def switch_chain(self, chain_id: int) -> Chain:
        """
        Ask the wallet to switch to ``chain_id``.

        Completes once the wallet accepted the request AND the resulting
        ``chainChanged`` notification reached this connector. Chains unknown
        to the wallet (4902) are added first, when configured here.
        """
        provider = await self.get_provider()
        if provider is None:
            raise ConnectorNotFoundError()
        hex_id = hex(chain_id)

        try:
            changed = asyncio.get_running_loop().create_future()

            def _on_change(data: Any) -> None:
                chain = data.get("chain") if isinstance(data, dict) else None
                if chain and chain.get("id") == chain_id and not changed.done():
                    changed.set_result(True)

            self.on(ConnectorEvent.CHANGE, _on_change)
            try:
                await asyncio.gather(
                    provider.request(WALLET_SWITCH_CHAIN, [{"chainId": hex_id}]),
                    changed,
                )
            finally:
                self.off(ConnectorEvent.CHANGE, _on_change)

            return find_chain(self.chains, chain_id) or placeholder_chain(chain_id)
        except Exception as error:
            chain = find_chain(self.chains, chain_id)
            if chain is None:
                raise ChainNotConfiguredError(chain_id=chain_id, connector_id=self.id) from error

            if UNRECOGNIZED_CHAIN_CODE in (rpc_error_code(error), nested_rpc_error_code(error)):
                return await self._add_chain(provider, chain)

            if self.is_user_rejected_request_error(error):
                raise UserRejectedRequestError(error) from error
            raise SwitchChainError(error) from error

    async def _add_chain(self, provider: Any, chain: Chain) -> Chain:
        self.logger.info(f"➕ Adding chain {chain.id} ({chain.name}) to wallet")
        try:
            await provider.request(
                WALLET_ADD_CHAIN,
                [
                    {
                        "chainId": hex(chain.id),
                        "chainName": chain.name,
                        "nativeCurrency": {
                            "name": chain.native_currency.name,
                            "symbol": chain.native_currency.symbol,
                            "decimals": chain.native_currency.decimals,
                        },
                        "rpcUrls": [chain.public_rpc_url],
                        "blockExplorerUrls": self.get_block_explorer_urls(chain),
                    }
                ],
            )
            current_id = await self.get_chain_id()
        except Exception as error:
            raise UserRejectedRequestError(error) from error

        if current_id != chain.id:
            raise UserRejectedRequestError(Exception("User rejected switch after adding network."))
        return chain

    async def watch_asset(self, address: str, symbol: str, decimals: int = 18, image: Optional[str] = None) -> bool:
        provider = await self.get_provider()
        if provider is None:
            raise ConnectorNotFoundError()
        return await provider.request(
            WALLET_WATCH_ASSET,
            {
                "type": "ERC20",
                "options": {
                    "address": address,
                    "decimals": decimals,
                    "image": image,
                    "symbol": symbol,
                },
            },
        )

    # =========================================================
    # 📡 PROVIDER EVENT HANDLERS
    # =========================================================

    def on_accounts_changed(self, accounts: List[str]) -> None:
        if not accounts:
            self.emit(ConnectorEvent.DISCONNECT)
        else:
            self.emit(ConnectorEvent.CHANGE, {"account": to_checksum_address(accounts[0])})

    def on_chain_changed(self, chain_id: Any) -> None:
        new_id = normalize_chain_id(chain_id)
        unsupported = self.is_chain_unsupported(new_id)
        self.emit(ConnectorEvent.CHANGE, {"chain": {"id": new_id, "unsupported": unsupported}})

    def on_disconnect(self, error: Optional[BaseException] = None) -> Optional[asyncio.Future]:
        """
        Provider ``disconnect`` event.

        Providers call it synchronously. A 1013 only disconnects when no
        account is left, so that check runs as a background task which is
        returned to the caller; any other error disconnects right away.
        """
        # MetaMask emits 1013 while it reconnects to its backend; the session survives
        if error is not None and rpc_error_code(error) == DISCONNECTED_RETRYABLE_CODE:
            return self._schedule(self._disconnect_unless_account())

        self._emit_disconnect()
        return None

    async def _disconnect_unless_account(self) -> None:
        provider = await self.get_provider()
        if provider is not None:
            try:
                if await self.get_account():
                    self.logger.debug("🔁 1013 with an account still available, session kept")
                    return
            except Exception as e:
                self.logger.warning(f"⚠️ Account check after 1013 failed: {e}")

        self._emit_disconnect()

    def _emit_disconnect(self) -> None:
        self.emit(ConnectorEvent.DISCONNECT)
        self._clear_shim_flag()

    # =========================================================
    # 🧰 HELPERS
    # =========================================================

    def is_user_rejected_request_error(self, error: BaseException) -> bool:
        return rpc_error_code(error) == USER_REJECTED_REQUEST_CODE

    def _attach_listeners(self, provider: Any) -> None:
        if not hasattr(provider, "on"):
            return
        for event, handler in self._provider_handlers.items():
            provider.on(event, handler)

    def _detach_listeners(self, provider: Any) -> None:
        for event, handler in self._provider_handlers.items():
            provider.remove_listener(event, handler)

    def _has_shim_flag(self) -> bool:
        return bool(self.storage and self.storage.get_item(self.shim_disconnect_key))

    def _set_shim_flag(self) -> None:
        if self.options.shim_disconnect and self.storage is not None:
            self.storage.set_item(self.shim_disconnect_key, True)

    def _clear_shim_flag(self) -> None:
        if self.options.shim_disconnect and self.storage is not None:
            self.storage.remove_item(self.shim_disconnect_key)
