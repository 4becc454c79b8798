"""
MetaMask SDK Connector.

Connects through the MetaMask SDK instead of a pre-injected provider. The SDK
decides (during the handshake) whether the session runs on the browser
extension or on the mobile wallet, so the provider object may change identity
while ``connect()`` is waiting.

Flujo de ``connect()``:
    1. SDK init (idempotente)
    2. ``sdk.connect()`` en segundo plano (best-effort, rechazo ignorado)
    3. Esperar autorización (estrategia elegida según capacidades del SDK)
    4. Re-registrar listeners sobre el proveedor actual
    5. ``eth_requestAccounts``
    6. Reconciliar chain (switch opcional)
    7. Flag "shim disconnect"
    8. ConnectionResult

Errores (clasificados una sola vez, en el nivel exterior):
    rechazo del usuario → UserRejectedRequestError
    código -32002      → ResourceUnavailableRpcError
    resto              → se propaga sin modificar

No timeout: a connect() that never sees an authorization signal waits
forever. Wrap it with ``asyncio.wait_for`` if needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from config import connector as connector_config
from core.chains import Chain
from core.exceptions import ConfigurationError, ConnectorNotFoundError
from core.observability.logging_config import bind_connector_context
from core.observability.metrics import (
    observe_authorization_wait,
    record_chain_switch,
    record_connect_attempt,
    record_connect_failure,
    record_connect_success,
    record_disconnect,
    record_listener_resync,
)
from wallets.sdk import SDKOptions, WalletSDK, create_sdk

from ...resilience.error_classifier import ConnectErrorClassifier
from ..connector_base import ChainDescriptor, ConnectionResult
from ..injected import ETH_CHAIN_ID, ETH_REQUEST_ACCOUNTS, InjectedConnector, InjectedConnectorOptions
from .authorization import AuthorizationWaiter, select_authorization_waiter
from .metamask_sdk_constants import CONNECTOR_ID, CONNECTOR_NAME, ZERO_ADDRESS


@dataclass
class MetaMaskSDKConnectorOptions:
    """
    Args:
        sdk: Pre-built SDK instance
        sdk_options: Options to build the SDK through the factory registry
        debug: Debug-level lifecycle logs (default: CONNECTOR_DEBUG)
        shim_disconnect: Persist the "was connected" flag (default: SHIM_DISCONNECT)
    """

    sdk: Optional[WalletSDK] = None
    sdk_options: Optional[SDKOptions] = None
    debug: Optional[bool] = None
    shim_disconnect: Optional[bool] = None


@dataclass
class ListenerBinding:
    """The handler set currently registered, and the provider it is registered on."""

    provider: Any
    handlers: Dict[str, Callable[..., Any]]

    def attach(self) -> None:
        for event, handler in self.handlers.items():
            self.provider.on(event, handler)

    def detach(self) -> None:
        for event, handler in self.handlers.items():
            self.provider.remove_listener(event, handler)

    def is_bound_to(self, provider: Any) -> bool:
        return self.provider is provider


@dataclass
class InFlightConnect:
    """The shared connect() task and how many callers are still waiting on it."""

    task: asyncio.Future
    chain_id: Optional[int] = None
    waiters: int = 0

    def is_running(self) -> bool:
        return not self.task.done()


class MetaMaskSDKConnector(InjectedConnector):
    """
    Connector driving the MetaMask SDK handshake.

    Example:
        ```python
        connector = MetaMaskSDKConnector(
            chains=[mainnet, polygon],
            options=MetaMaskSDKConnectorOptions(sdk=sdk),
        )
        connector.set_storage(create_storage())

        result = await asyncio.wait_for(connector.connect(chain_id=137), timeout=120)
        ```
    """

    def __init__(self, chains: Optional[List[Chain]] = None, options: Optional[MetaMaskSDKConnectorOptions] = None):
        if options is None or (options.sdk is None and options.sdk_options is None):
            raise ConfigurationError("MetaMaskSDKConnector invalid sdk parameters: pass sdk or sdk_options")

        sdk = options.sdk if options.sdk is not None else create_sdk(options.sdk_options)
        shim_disconnect = (
            options.shim_disconnect if options.shim_disconnect is not None else connector_config.SHIM_DISCONNECT
        )

        # Set before the injected constructor probes get_provider()
        self._sdk: WalletSDK = sdk
        self._provider: Any = sdk.get_provider()
        self._binding: Optional[ListenerBinding] = None
        self._in_flight: Optional[InFlightConnect] = None
        self._trigger_task: Optional[asyncio.Future] = None

        super().__init__(
            chains=chains,
            options=InjectedConnectorOptions(
                name=CONNECTOR_NAME,
                shim_disconnect=shim_disconnect,
                get_provider=lambda: self._provider,
            ),
        )

        self.connector_options = options
        self.debug = options.debug if options.debug is not None else connector_config.CONNECTOR_DEBUG
        self.logger = logging.getLogger("MetaMaskSDKConnector")
        if self.debug:
            self.logger.setLevel(logging.DEBUG)

        self._classifier = ConnectErrorClassifier(self.is_user_rejected_request_error, name="MetaMaskSDKConnector")
        self._waiter: AuthorizationWaiter = select_authorization_waiter(sdk, self.logger)
        self.logger.debug(f"🦊 Authorization strategy: {self._waiter.name}")

    @property
    def id(self) -> str:
        return CONNECTOR_ID

    @property
    def sdk(self) -> WalletSDK:
        return self._sdk

    @property
    def listener_binding(self) -> Optional[ListenerBinding]:
        return self._binding

    @property
    def connect_trigger(self) -> Optional[asyncio.Future]:
        """Background ``sdk.connect()`` task fired by the last connect() (None before the first)."""
        return self._trigger_task

    # =========================================================
    # 🔌 PROVIDER REFERENCE
    # =========================================================

    async def get_provider(self) -> Any:
        """Current SDK provider; initializes the SDK on first use."""
        await self._ensure_initialized()
        if self._provider is None:
            self._provider = self._sdk.get_provider()
        return self._provider

    async def _ensure_initialized(self) -> None:
        if not self._sdk.is_initialized():
            self.logger.debug("⚙️ Initializing MetaMask SDK...")
            await self._sdk.init()

    # =========================================================
    # 📡 LISTENERS
    # =========================================================

    def resync_listeners(self) -> None:
        """
        Move the accountsChanged/chainChanged/disconnect handlers to the
        provider the SDK currently exposes.

        Calling it repeatedly leaves exactly one registration per handler.
        """
        previous = self._provider
        if previous is not None:
            self._detach_listeners(previous)
        if self._binding is not None and not self._binding.is_bound_to(previous):
            self._binding.detach()
        self._binding = None

        self._provider = self._sdk.get_provider()
        if self._provider is None:
            raise ConnectorNotFoundError("MetaMask SDK returned no provider")

        binding = ListenerBinding(provider=self._provider, handlers=dict(self._provider_handlers))
        binding.attach()
        self._binding = binding

        provider_changed = previous is not self._provider
        if provider_changed:
            self.logger.info("🔄 SDK provider changed, listeners re-bound")
        record_listener_resync(self.id, provider_changed)

    # =========================================================
    # 🔓 AUTHORIZATION
    # =========================================================

    async def wait_for_authorization(self, connect_trigger: Optional[asyncio.Future] = None) -> bool:
        self.logger.debug("⏳ Waiting for MetaMask SDK authorization...")
        started = time.monotonic()
        result = await self._waiter.wait(connect_trigger)
        observe_authorization_wait(self.id, time.monotonic() - started)
        return result

    def _trigger_sdk_connect(self) -> asyncio.Future:
        """Fire ``sdk.connect()`` without awaiting it; a rejection is only logged."""
        task = asyncio.ensure_future(self._sdk.connect())

        def _on_done(done: asyncio.Future) -> None:
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                self.logger.warning(f"⚠️ SDK connect trigger rejected (ignored): {error}")

        task.add_done_callback(_on_done)
        self._trigger_task = task
        return task

    # =========================================================
    # 🌐 CHAIN
    # =========================================================

    async def reconcile_chain(self, requested_chain_id: Optional[int] = None) -> ChainDescriptor:
        """
        Chain the provider is on, switched to ``requested_chain_id`` if it differs.

        ``unsupported`` is only computed for a switched chain.
        """
        provider = await self.get_provider()
        if provider is None:
            raise ConnectorNotFoundError()

        provider_chain_id = getattr(provider, "chain_id", None)
        if not provider_chain_id:
            provider_chain_id = await provider.request(ETH_CHAIN_ID, [])

        chain = ChainDescriptor(id=_parse_hex_chain_id(provider_chain_id), unsupported=False)

        if requested_chain_id is not None and chain.id != requested_chain_id:
            self.logger.info(f"🔀 Switching chain {chain.id} → {requested_chain_id}")
            new_chain = await self.switch_chain(requested_chain_id)
            chain.id = new_chain.id
            chain.unsupported = self.is_chain_unsupported(new_chain.id)
            record_chain_switch(self.id, chain.unsupported)

        return chain

    # =========================================================
    # 🔌 CONNECTION MANAGEMENT
    # =========================================================

    async def connect(self, chain_id: Optional[int] = None) -> ConnectionResult:
        """
        Connect through the SDK.

        A call made while another connect() is in flight joins it instead of
        starting a second handshake. Each caller waits through ``shield``, so
        cancelling one caller (e.g. ``asyncio.wait_for``) leaves the others
        waiting; the handshake itself is cancelled once no caller is left.
        A joiner asking for a different chain gets that chain reconciled on
        top of the shared result.
        """
        in_flight = self._in_flight
        joined = in_flight is not None and in_flight.is_running()
        if joined:
            self.logger.info(f"⏳ connect() already in progress (chain {in_flight.chain_id}), joining it")
        else:
            in_flight = InFlightConnect(task=asyncio.ensure_future(self._connect(chain_id)), chain_id=chain_id)
            self._in_flight = in_flight

        in_flight.waiters += 1
        try:
            result = await asyncio.shield(in_flight.task)
        finally:
            in_flight.waiters -= 1
            if in_flight.waiters == 0 and in_flight.is_running():
                self.logger.warning("🛑 connect() abandoned by every caller, cancelling handshake")
                in_flight.task.cancel()

        if not joined or chain_id is None or chain_id == result.chain.id:
            return result
        return await self._join_on_chain(result, chain_id)

    async def _join_on_chain(self, result: ConnectionResult, chain_id: int) -> ConnectionResult:
        self.logger.info(f"🔀 Joined connect() on chain {result.chain.id}, reconciling to {chain_id}")
        try:
            chain = await self.reconcile_chain(chain_id)
        except Exception as error:
            classified = self._classify_connect_error(error)
            if classified is error:
                raise
            raise classified from error
        return ConnectionResult(account=result.account, chain=chain, provider=result.provider, is_connected=True)

    async def _connect(self, chain_id: Optional[int]) -> ConnectionResult:
        # Runs in its own task: the context stays local to this handshake
        bind_connector_context(self.id, chain_id=chain_id)
        record_connect_attempt(self.id)
        try:
            await self._ensure_initialized()

            trigger = self._trigger_sdk_connect()
            await self.wait_for_authorization(trigger)

            # The SDK may have swapped providers during the handshake
            self.resync_listeners()

            accounts = await self._provider.request(ETH_REQUEST_ACCOUNTS, [])
            account = accounts[0] if accounts else ZERO_ADDRESS

            chain = await self.reconcile_chain(chain_id)

            if self.options.shim_disconnect and self.storage is not None:
                self.storage.set_item(self.shim_disconnect_key, True)

            bind_connector_context(self.id, chain_id=chain.id, account=account)
            record_connect_success(self.id)
            self.logger.info(f"✅ MetaMask connected: {account} on chain {chain.id}")
            return ConnectionResult(account=account, chain=chain, provider=self._provider, is_connected=True)

        except Exception as error:
            classified = self._classify_connect_error(error)
            if classified is error:
                raise
            raise classified from error

    def _classify_connect_error(self, error: BaseException) -> BaseException:
        """Public error for a failed connect; ``error`` itself when it is not reclassified."""
        classification = self._classifier.classify(error)
        record_connect_failure(self.id, classification.category.value)
        return classification.to_exception()

    async def disconnect(self) -> None:
        self._sdk.terminate()
        await super().disconnect()
        self._binding = None
        record_disconnect(self.id)

    @property
    def status_dict(self) -> Dict[str, Any]:
        status = super().status_dict
        status.update(
            {
                "sdk_initialized": self._sdk.is_initialized(),
                "authorization_strategy": self._waiter.name,
                "listeners_bound": self._binding is not None,
                "connect_in_flight": self._in_flight is not None and self._in_flight.is_running(),
                "connect_waiters": self._in_flight.waiters if self._in_flight is not None else 0,
                "sdk_connect_pending": self._trigger_task is not None and not self._trigger_task.done(),
            }
        )
        return status


def _parse_hex_chain_id(value: Any) -> int:
    """Base-16 parse of a provider chain id ("0x89" → 137)."""
    if isinstance(value, int):
        return value
    return int(str(value), 16)
