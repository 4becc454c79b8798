"""
Tests for provider reference handling and listener re-binding.
"""

import asyncio

import pytest

from core.chains import mainnet, polygon
from core.events import ConnectorEvent
from core.exceptions import ConnectorNotFoundError, ProviderRpcError
from tests.conftest import ACCOUNT
from tests.fakes import FakeProvider, FakeSDK, SyncAuthorizedSDK
from wallets.connectors.metamask_sdk import MetaMaskSDKConnector, MetaMaskSDKConnectorOptions

TRACKED = ("accountsChanged", "chainChanged", "disconnect")


@pytest.fixture
def sdk(provider):
    return SyncAuthorizedSDK(provider=provider)


@pytest.fixture
def connector(sdk):
    return MetaMaskSDKConnector(chains=[mainnet, polygon], options=MetaMaskSDKConnectorOptions(sdk=sdk))


class TestGetProvider:
    @pytest.mark.asyncio
    async def test_initializes_sdk_once(self, connector, sdk, provider):
        assert await connector.get_provider() is provider
        assert await connector.get_provider() is provider
        assert sdk.init_calls == 1

    @pytest.mark.asyncio
    async def test_pulls_provider_when_none_cached(self):
        sdk = FakeSDK(provider=None)
        sdk.provider = None
        connector = MetaMaskSDKConnector(options=MetaMaskSDKConnectorOptions(sdk=sdk))
        assert connector.ready is False

        late = FakeProvider(accounts=[ACCOUNT])
        sdk.provider = late
        assert await connector.get_provider() is late


class TestResyncListeners:
    def test_resync_is_idempotent(self, connector, provider):
        connector.resync_listeners()
        connector.resync_listeners()

        for event in TRACKED:
            assert provider.listener_count(event) == 1

    def test_rebinds_to_new_provider(self, connector, sdk, provider):
        connector.resync_listeners()

        replacement = FakeProvider(accounts=[ACCOUNT], chain_id="0x89")
        sdk.provider = replacement
        connector.resync_listeners()

        for event in TRACKED:
            assert provider.listener_count(event) == 0
            assert replacement.listener_count(event) == 1
        assert connector.listener_binding.is_bound_to(replacement)

    def test_missing_provider_raises(self, connector, sdk):
        sdk.provider = None
        with pytest.raises(ConnectorNotFoundError):
            connector.resync_listeners()

    @pytest.mark.asyncio
    async def test_connect_follows_provider_swap(self, provider):
        extension = FakeProvider(accounts=["0xfb6916095ca1df60bb79ce92ce3ea74c37c5d359"], chain_id="0x89")
        sdk = FakeSDK(provider=provider, next_provider=extension)
        connector = MetaMaskSDKConnector(chains=[mainnet, polygon], options=MetaMaskSDKConnectorOptions(sdk=sdk))

        result = await connector.connect()

        assert result.provider is extension
        assert result.account == "0xfb6916095ca1df60bb79ce92ce3ea74c37c5d359"
        assert result.chain.id == 137
        assert provider.request_count("eth_requestAccounts") == 0
        for event in TRACKED:
            assert provider.listener_count(event) == 0
            assert extension.listener_count(event) == 1

    @pytest.mark.asyncio
    async def test_bound_handlers_emit_connector_events(self, connector, provider):
        changes = []
        connector.on(ConnectorEvent.CHANGE, changes.append)
        connector.resync_listeners()

        provider.emit("chainChanged", "0x89")
        provider.emit("accountsChanged", [ACCOUNT])

        assert changes[0] == {"chain": {"id": 137, "unsupported": False}}
        assert changes[1] == {"account": "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"}


class TestReconcileChain:
    @pytest.mark.asyncio
    async def test_reads_chain_id_attribute(self, connector, provider):
        chain = await connector.reconcile_chain()
        assert chain.id == 1
        assert provider.request_count("eth_chainId") == 0

    @pytest.mark.asyncio
    async def test_falls_back_to_rpc(self, connector, provider):
        provider.chain_id = None
        provider.rpc_chain_id = "0x89"

        chain = await connector.reconcile_chain()

        assert chain.id == 137
        assert chain.unsupported is False
        assert provider.request_count("eth_chainId") == 1


class TestProviderDisconnect:
    """Disconnect events as a provider delivers them: synchronous calls, return value ignored."""

    @pytest.fixture
    def connected(self, connector, storage):
        connector.set_storage(storage)
        disconnects = []
        connector.on(ConnectorEvent.DISCONNECT, lambda: disconnects.append(True))
        return connector, disconnects

    @pytest.mark.asyncio
    async def test_disconnect_clears_flag_when_emitted_by_provider(self, connected, provider, storage):
        connector, disconnects = connected
        await connector.connect()
        assert storage.get_item("metaMaskSDK.shimDisconnect") is True

        provider.emit("disconnect", ProviderRpcError("Disconnected", code=4900))

        assert disconnects == [True]
        assert storage.get_item("metaMaskSDK.shimDisconnect") is None

    @pytest.mark.asyncio
    async def test_retryable_disconnect_keeps_session_with_account(self, connected, provider, storage):
        connector, disconnects = connected
        await connector.connect()

        provider.emit("disconnect", ProviderRpcError("Reconnecting", code=1013))
        await asyncio.gather(*connector._pending)

        assert disconnects == []
        assert storage.get_item("metaMaskSDK.shimDisconnect") is True

    @pytest.mark.asyncio
    async def test_retryable_disconnect_without_account(self, connected, provider, storage):
        connector, disconnects = connected
        await connector.connect()
        provider.accounts = []

        provider.emit("disconnect", ProviderRpcError("Reconnecting", code=1013))
        await asyncio.gather(*connector._pending)

        assert disconnects == [True]
        assert storage.get_item("metaMaskSDK.shimDisconnect") is None
