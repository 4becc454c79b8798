import json

import pytest

from core.storage import ConnectorStorage, JsonFileBackend, MemoryBackend, create_storage


class TestConnectorStorage:
    def test_namespaced_json_values(self):
        backend = MemoryBackend()
        storage = ConnectorStorage(backend, key="wagmi")

        storage.set_item("metaMaskSDK.shimDisconnect", True)

        assert backend.get("wagmi.metaMaskSDK.shimDisconnect") == "true"
        assert storage.get_item("metaMaskSDK.shimDisconnect") is True

    def test_default_and_remove(self, storage):
        assert storage.get_item("missing", default=False) is False

        storage.set_item("recent", {"id": "injected"})
        storage.remove_item("recent")
        assert storage.get_item("recent") is None

    def test_set_none_removes(self, storage):
        storage.set_item("flag", 1)
        storage.set_item("flag", None)
        assert storage.get_item("flag") is None

    def test_undecodable_value_returns_default(self):
        backend = MemoryBackend()
        backend.set("wagmi.flag", "{not json")
        assert ConnectorStorage(backend).get_item("flag", default="x") == "x"


class TestJsonFileBackend:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state" / "storage.json"
        ConnectorStorage(JsonFileBackend(str(path))).set_item("metaMaskSDK.shimDisconnect", True)

        reopened = ConnectorStorage(JsonFileBackend(str(path)))
        assert reopened.get_item("metaMaskSDK.shimDisconnect") is True
        assert not (tmp_path / "state" / "storage.json.tmp").exists()

    def test_remove_is_persisted(self, tmp_path):
        path = tmp_path / "storage.json"
        storage = ConnectorStorage(JsonFileBackend(str(path)))
        storage.set_item("a", 1)
        storage.remove_item("a")

        assert json.loads(path.read_text()) == {}

    def test_corrupted_file_starts_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{broken")

        backend = JsonFileBackend(str(path))
        assert backend.get("wagmi.a") is None

        backend.set("wagmi.a", "1")
        assert json.loads(path.read_text()) == {"wagmi.a": "1"}


class TestCreateStorage:
    def test_memory(self):
        storage = create_storage(backend="memory", key="app")
        assert isinstance(storage.backend, MemoryBackend)
        assert storage.key == "app"

    def test_file(self, tmp_path):
        storage = create_storage(backend="file", path=str(tmp_path / "s.json"))
        assert isinstance(storage.backend, JsonFileBackend)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_storage(backend="redis")
