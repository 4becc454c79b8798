"""
MetaMask SDK Connector Package.

Main features:
- SDK init + handshake driven from a single connect()
- Authorization strategy chosen from the SDK capabilities
- Listeners re-bound when the SDK swaps providers
- Optional chain switch, unsupported-chain flag

Usage:
    >>> from wallets.connectors.metamask_sdk import MetaMaskSDKConnector, MetaMaskSDKConnectorOptions
    >>> connector = MetaMaskSDKConnector(options=MetaMaskSDKConnectorOptions(sdk=sdk))
    >>> result = await connector.connect(chain_id=137)
"""

from .authorization import (
    AuthorizationWaiter,
    EagerConnectWaiter,
    ProviderUpdateWaiter,
    SDKCapabilities,
    select_authorization_waiter,
)
from .metamask_sdk_connector import ListenerBinding, MetaMaskSDKConnector, MetaMaskSDKConnectorOptions

__all__ = [
    "AuthorizationWaiter",
    "EagerConnectWaiter",
    "ProviderUpdateWaiter",
    "SDKCapabilities",
    "select_authorization_waiter",
    "ListenerBinding",
    "MetaMaskSDKConnector",
    "MetaMaskSDKConnectorOptions",
]
