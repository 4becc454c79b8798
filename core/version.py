"""
====================================================
📌 VERSION - wallet connectors
====================================================

Única fuente de verdad para la versión del proyecto (pyproject.toml la
repite; mantener ambas sincronizadas).
====================================================
"""

from typing import Dict, Literal

# =====================================================
# 🎯 VERSIÓN ACTUAL
# =====================================================
__version__ = "0.3.0"
__version_name__ = "MetaMask SDK Connector"
__release_date__ = "2026-10-17"
__status__: Literal["stable", "beta", "alpha", "dev"] = "beta"

# =====================================================
# 📝 CHANGELOG RESUMIDO
# =====================================================
CHANGELOG = {
    "0.1.0": {
        "name": "Injected Connector",
        "date": "2026-08-03",
        "highlights": [
            "BaseConnector + InjectedConnector (EIP-1193)",
            "Storage con namespace y flag shim disconnect",
        ],
    },
    "0.2.0": {
        "name": "Chain Switching",
        "date": "2026-09-10",
        "highlights": [
            "switch_chain con fallback a wallet_addEthereumChain (4902)",
            "Cadenas incluidas: mainnet, goerli, sepolia, polygon, optimism, arbitrum",
        ],
    },
    "0.3.0": {
        "name": "MetaMask SDK Connector",
        "date": "2026-10-17",
        "highlights": [
            "MetaMaskSDKConnector con estrategias de autorización por capacidades",
            "Re-registro de listeners cuando el SDK cambia de proveedor",
            "Guard de connect() concurrente",
            "Métricas Prometheus del ciclo de conexión",
        ],
    },
}


# =====================================================
# 📊 FUNCIONES DE UTILIDAD
# =====================================================
def get_version() -> str:
    """Retorna la versión actual."""
    return __version__


def get_version_info() -> Dict[str, str]:
    """Retorna información completa de la versión actual."""
    return {
        "version": __version__,
        "name": __version_name__,
        "date": __release_date__,
        "status": __status__,
    }


def get_full_version_string() -> str:
    """Retorna string completo de versión para logs."""
    return f"wallet-connectors v{__version__} ({__version_name__}) - {__status__}"


def get_changelog(version: str = None) -> Dict:
    """
    Retorna el changelog de una versión específica o todas.

    Args:
        version: Versión específica (ej: "0.2.0") o None para todas
    """
    if version:
        return CHANGELOG.get(version, {})
    return CHANGELOG
