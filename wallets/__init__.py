"""
Wallet integrations.

This package contains all wallet-related functionality:
- sdk.py: Wallet SDK / provider surface and SDK factory registry
- connectors/: Wallet connectors (Injected, MetaMask SDK)
- resilience/: Connection error classification
"""

from .connectors import BaseConnector, InjectedConnector, MetaMaskSDKConnector

__all__ = [
    "BaseConnector",
    "InjectedConnector",
    "MetaMaskSDKConnector",
]
