"""
====================================================
⚙️ CONFIGURACIÓN - WALLET CONNECTORS
====================================================

Uso:
    from config import connector

    backend = connector.STORAGE_BACKEND
    shim = connector.SHIM_DISCONNECT
"""

from . import connector

__all__ = [
    "connector",
]
