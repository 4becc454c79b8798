"""
====================================================
🦊 CONFIGURACIÓN DE CONECTORES - WALLET CONNECTORS
====================================================

Parámetros de almacenamiento, logging y comportamiento de los conectores.
Todos los valores pueden sobreescribirse vía variables de entorno (.env).
"""

import os
from typing import Literal

from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_bool(env_var: str, default: bool) -> bool:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: '{value}'")


def _get_choice(env_var: str, allowed: set, default: str) -> str:
    value = os.getenv(env_var)
    if value:
        normalized = value.strip().lower()
        if normalized not in allowed:
            raise ValueError(f"Invalid {env_var} '{value}'. Must be one of {allowed}.")
        return normalized
    return default


# =====================================================
# 💾 STORAGE
# =====================================================

# Prefijo de todas las claves persistidas ("wagmi.metaMaskSDK.shimDisconnect")
STORAGE_KEY = os.getenv("CONNECTOR_STORAGE_KEY", "wagmi")

# Backend:
#  - "memory" → dict en memoria (se pierde al reiniciar)
#  - "file"   → documento JSON en disco (sobrevive reinicios)
_ALLOWED_BACKENDS = {"memory", "file"}
STORAGE_BACKEND: Literal["memory", "file"] = _get_choice(  # type: ignore[assignment]
    "CONNECTOR_STORAGE_BACKEND", _ALLOWED_BACKENDS, "memory"
)

STORAGE_PATH = os.getenv("CONNECTOR_STORAGE_PATH", "./state/connector_storage.json")


# =====================================================
# 🔌 CONNECTOR BEHAVIOUR
# =====================================================

# Persistir el flag "shim disconnect" tras un connect exitoso
SHIM_DISCONNECT = _get_bool("CONNECTOR_SHIM_DISCONNECT", True)

# Logs de debug del ciclo de vida del conector
CONNECTOR_DEBUG = _get_bool("CONNECTOR_DEBUG", False)


# =====================================================
# 📝 LOGGING
# =====================================================

LOG_LEVEL = os.getenv("CONNECTOR_LOG_LEVEL", "INFO").upper()
LOG_FORMAT: Literal["console", "json"] = _get_choice(  # type: ignore[assignment]
    "CONNECTOR_LOG_FORMAT", {"console", "json"}, "console"
)
LOG_FILE = os.getenv("CONNECTOR_LOG_FILE")
