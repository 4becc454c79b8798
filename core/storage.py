"""
Connector Storage.

Small namespaced key/value store used by connectors to remember state across
process restarts (e.g. the "shim disconnect" flag: wallets do not reliably
report a previous disconnection on reload).

Provides:
- Namespaced keys ("<key>.<name>")
- JSON serialization of values
- In-memory backend
- JSON file backend with atomic writes (write to temp, then rename)
  and corruption detection
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from config import connector as connector_config


class StorageBackend(ABC):
    """Raw string storage (the shape of a browser's localStorage)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryBackend(StorageBackend):
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend(StorageBackend):
    """
    Stores every key in a single JSON document.

    Writes are atomic: the document is written to ``<path>.tmp`` and then
    renamed over the original file.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.temp_path = self.path.with_name(self.path.name + ".tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("JsonFileBackend")
        self._data = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning(f"⚠️ Corrupted storage file {self.path.name}, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            self.logger.warning(f"⚠️ Unexpected storage format in {self.path.name}, starting empty")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        with open(self.temp_path, "w") as f:
            json.dump(self._data, f, indent=2)
        self.temp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()


class ConnectorStorage:
    """
    Namespaced JSON storage handed to connectors.

    Example:
        storage = ConnectorStorage(MemoryBackend(), key="wagmi")
        storage.set_item("metaMaskSDK.shimDisconnect", True)
        storage.get_item("metaMaskSDK.shimDisconnect")  # True
    """

    def __init__(self, backend: Optional[StorageBackend] = None, key: str = "wagmi"):
        self.backend = backend or MemoryBackend()
        self.key = key
        self.logger = logging.getLogger("ConnectorStorage")

    def _full_key(self, name: str) -> str:
        return f"{self.key}.{name}"

    def get_item(self, name: str, default: Any = None) -> Any:
        value = self.backend.get(self._full_key(name))
        if value is None:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            self.logger.warning(f"⚠️ Could not decode stored value for {name}")
            return default

    def set_item(self, name: str, value: Any) -> None:
        if value is None:
            self.remove_item(name)
            return
        self.backend.set(self._full_key(name), json.dumps(value))

    def remove_item(self, name: str) -> None:
        self.backend.remove(self._full_key(name))


def create_storage(
    backend: Optional[str] = None,
    path: Optional[str] = None,
    key: Optional[str] = None,
) -> ConnectorStorage:
    """
    Build the storage described by configuration.

    Args:
        backend: "memory" or "file" (default: config.connector.STORAGE_BACKEND)
        path: File path for the "file" backend
        key: Namespace prefix
    """
    backend = backend or connector_config.STORAGE_BACKEND
    key = key or connector_config.STORAGE_KEY

    if backend == "memory":
        return ConnectorStorage(MemoryBackend(), key=key)
    if backend == "file":
        return ConnectorStorage(JsonFileBackend(path or connector_config.STORAGE_PATH), key=key)
    raise ValueError(f"Unknown storage backend: {backend}")
