"""
In-memory wallet SDK and provider doubles.

FakeProvider answers the handful of RPC methods the connectors use and keeps
its listeners in plain lists so tests can count registrations.
"""

import asyncio
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from core.exceptions import ProviderRpcError
from wallets.sdk import SDKEventType


class FakeProvider:
    def __init__(self, accounts: Optional[List[str]] = None, chain_id: Optional[str] = "0x1"):
        self.accounts = list(accounts or [])
        # Attribute as read by the SDK connector; None until the wallet reports one
        self.chain_id = chain_id
        self.rpc_chain_id = chain_id or "0x1"
        self.listeners: Dict[str, List[Callable]] = defaultdict(list)
        self.requests: List[tuple] = []
        # method -> exception, raised once
        self.errors: Dict[str, BaseException] = {}

    def on(self, event: str, handler: Callable) -> None:
        self.listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Callable) -> None:
        if handler in self.listeners[event]:
            self.listeners[event].remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self.listeners[event])

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self.listeners[event]):
            handler(*args)

    def request_count(self, method: str) -> int:
        return sum(1 for name, _ in self.requests if name == method)

    async def request(self, method: str, params: Any = None) -> Any:
        self.requests.append((method, params))
        error = self.errors.pop(method, None)
        if error is not None:
            raise error

        if method in ("eth_requestAccounts", "eth_accounts"):
            return list(self.accounts)
        if method == "eth_chainId":
            return self.rpc_chain_id
        if method in ("wallet_switchEthereumChain", "wallet_addEthereumChain"):
            self._change_chain(params[0]["chainId"])
            return None
        if method == "wallet_watchAsset":
            return True
        raise ProviderRpcError(f"Method {method} not supported", code=4200)

    def _change_chain(self, hex_id: str) -> None:
        self.rpc_chain_id = hex_id
        self.chain_id = hex_id
        self.emit("chainChanged", hex_id)


class FakeSDK:
    """
    SDK that signals authorization with PROVIDER_UPDATE.

    ``connect()`` optionally swaps the provider first (user picked another
    wallet surface), then fires PROVIDER_UPDATE when ``auto_authorize``.
    """

    def __init__(
        self,
        provider: Optional[FakeProvider] = None,
        next_provider: Optional[FakeProvider] = None,
        connect_error: Optional[BaseException] = None,
        auto_authorize: bool = True,
        init_error: Optional[BaseException] = None,
    ):
        self.provider = provider if provider is not None else FakeProvider()
        self.next_provider = next_provider
        self.connect_error = connect_error
        self.auto_authorize = auto_authorize
        self.init_error = init_error
        self.initialized = False
        self.init_calls = 0
        self.connect_calls = 0
        self.terminate_calls = 0
        self._once: Dict[SDKEventType, List[Callable]] = defaultdict(list)

    def is_initialized(self) -> bool:
        return self.initialized

    async def init(self) -> None:
        self.init_calls += 1
        if self.init_error is not None:
            raise self.init_error
        self.initialized = True

    def get_provider(self) -> Optional[FakeProvider]:
        return self.provider

    async def connect(self) -> List[str]:
        self.connect_calls += 1
        await asyncio.sleep(0)
        if self.next_provider is not None:
            self.provider = self.next_provider
        if self.connect_error is not None:
            raise self.connect_error
        accounts = list(self.provider.accounts)
        if self.auto_authorize:
            self.fire(SDKEventType.PROVIDER_UPDATE, accounts)
        return accounts

    def terminate(self) -> None:
        self.terminate_calls += 1

    def once(self, event: SDKEventType, handler: Callable) -> None:
        self._once[event].append(handler)

    def once_count(self, event: SDKEventType) -> int:
        return len(self._once[event])

    def fire(self, event: SDKEventType, *args: Any) -> None:
        for handler in self._once.pop(event, []):
            handler(*args)


class SyncAuthorizedSDK(FakeSDK):
    """Older wallet: already authorized, answered synchronously."""

    def __init__(self, *args: Any, authorized: bool = True, **kwargs: Any):
        kwargs.setdefault("auto_authorize", False)
        super().__init__(*args, **kwargs)
        self.authorized = authorized

    def is_authorized(self) -> bool:
        return self.authorized


class FakeConnectionConnector:
    def __init__(self):
        self._once: Dict[SDKEventType, List[Callable]] = defaultdict(list)

    def once(self, event: SDKEventType, handler: Callable) -> None:
        self._once[event].append(handler)

    def fire(self, event: SDKEventType) -> None:
        for handler in self._once.pop(event, []):
            handler()


class FakeConnection:
    def __init__(self, authorized: bool = False):
        self.authorized = authorized
        self.connector = FakeConnectionConnector()

    def is_authorized(self) -> bool:
        return self.authorized

    def get_connector(self) -> FakeConnectionConnector:
        return self.connector


class LegacyConnectionSDK(FakeSDK):
    """Authorization reported by the lower-level connection object."""

    def __init__(self, *args: Any, connection: Optional[FakeConnection] = None, **kwargs: Any):
        kwargs.setdefault("auto_authorize", False)
        super().__init__(*args, **kwargs)
        self.connection = connection or FakeConnection()

    def get_connection(self) -> FakeConnection:
        return self.connection


class ExtensionActiveSDK(FakeSDK):
    def __init__(self, *args: Any, **kwargs: Any):
        kwargs.setdefault("auto_authorize", False)
        super().__init__(*args, **kwargs)

    def is_extension_active(self) -> bool:
        return True


class EagerSDK:
    """
    Oldest SDK: no one-shot signals at all; the account list resolved by
    ``connect()`` is the only completion signal.
    """

    def __init__(self, provider: Optional[FakeProvider] = None, connect_error: Optional[BaseException] = None):
        self.provider = provider if provider is not None else FakeProvider()
        self.connect_error = connect_error
        self.initialized = True
        self.terminate_calls = 0

    def is_initialized(self) -> bool:
        return self.initialized

    async def init(self) -> None:
        self.initialized = True

    def get_provider(self) -> FakeProvider:
        return self.provider

    async def connect(self) -> List[str]:
        await asyncio.sleep(0)
        if self.connect_error is not None:
            raise self.connect_error
        return list(self.provider.accounts)

    def terminate(self) -> None:
        self.terminate_calls += 1
