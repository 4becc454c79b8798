"""
====================================================
🧹 CONNECTOR STATE - inspección y reseteo
====================================================

Muestra o limpia el estado persistido por los conectores (flags
"shim disconnect") en el storage configurado (.env).

Uso:
    python connector_state.py show
    python connector_state.py reset --connector metaMaskSDK
    python connector_state.py reset            # todos los conectores conocidos
====================================================
"""

import argparse
import logging
from typing import Dict, Iterable, List, Optional

from config import connector as connector_config
from core.observability import configure_logging
from core.storage import ConnectorStorage, create_storage
from core.version import get_full_version_string

logger = logging.getLogger("ConnectorState")

KNOWN_CONNECTORS = ["metaMaskSDK", "injected"]


def shim_key(connector_id: str) -> str:
    return f"{connector_id}.shimDisconnect"


def read_flags(storage: ConnectorStorage, connectors: Iterable[str] = KNOWN_CONNECTORS) -> Dict[str, bool]:
    """Estado del flag shim disconnect por conector."""
    return {connector_id: bool(storage.get_item(shim_key(connector_id), False)) for connector_id in connectors}


def reset_flags(storage: ConnectorStorage, connectors: Iterable[str] = KNOWN_CONNECTORS) -> List[str]:
    """
    Borra los flags shim disconnect.

    Returns:
        Conectores cuyo flag estaba activo
    """
    cleared = []
    for connector_id, active in read_flags(storage, connectors).items():
        if active:
            storage.remove_item(shim_key(connector_id))
            cleared.append(connector_id)
            logger.info(f"✅ Flag eliminado: {connector_id}")
    if not cleared:
        logger.info("ℹ️ No había flags activos")
    return cleared


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Wallet connector persisted state")
    parser.add_argument("command", choices=["show", "reset"], help="show: list flags | reset: clear flags")
    parser.add_argument("--connector", type=str, help="Connector id (default: all known connectors)")
    parser.add_argument(
        "--backend",
        type=str,
        choices=["memory", "file"],
        help=f"Storage backend (default: {connector_config.STORAGE_BACKEND})",
    )
    parser.add_argument("--path", type=str, help=f"Storage file (default: {connector_config.STORAGE_PATH})")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging()
    logger.info(f"🦊 {get_full_version_string()}")

    storage = create_storage(backend=args.backend, path=args.path)
    connectors = [args.connector] if args.connector else KNOWN_CONNECTORS

    if args.command == "show":
        for connector_id, active in read_flags(storage, connectors).items():
            print(f"{connector_id:<16} shimDisconnect={'✅' if active else '-'}")
        return 0

    reset_flags(storage, connectors)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
