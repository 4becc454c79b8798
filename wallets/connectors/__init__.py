"""
Wallet Connectors Module.

This module provides standardized connectors for wallets. Each connector
implements the BaseConnector interface and handles wallet-specific
handshakes, listeners and error classification.

Available Connectors:
    - InjectedConnector: Provider injected by a wallet (EIP-1193)
    - MetaMaskSDKConnector: MetaMask through the MetaMask SDK

Usage:
    ```python
    from core.storage import create_storage
    from wallets.connectors import MetaMaskSDKConnector, MetaMaskSDKConnectorOptions

    connector = MetaMaskSDKConnector(options=MetaMaskSDKConnectorOptions(sdk=sdk))
    connector.set_storage(create_storage())

    result = await connector.connect(chain_id=1)
    ```
"""

from .connector_base import BaseConnector, ChainDescriptor, ConnectionResult
from .injected import InjectedConnector, InjectedConnectorOptions
from .metamask_sdk import ListenerBinding, MetaMaskSDKConnector, MetaMaskSDKConnectorOptions

__all__ = [
    "BaseConnector",
    "ChainDescriptor",
    "ConnectionResult",
    "InjectedConnector",
    "InjectedConnectorOptions",
    "ListenerBinding",
    "MetaMaskSDKConnector",
    "MetaMaskSDKConnectorOptions",
]
