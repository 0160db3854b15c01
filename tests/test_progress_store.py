"""
Tests for progress store backends.
"""

import json
from unittest.mock import MagicMock, Mock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from fearlessyou.config import StoreConfig
from fearlessyou.database.store import (
    DEFAULT_KEY,
    FileProgressStore,
    MemoryProgressStore,
    MongoProgressStore,
    create_progress_store,
)
from fearlessyou.database.connection import DatabaseManager
from fearlessyou.exceptions import ProgressStoreError


class TestMemoryProgressStore:

    def test_load_on_first_run_is_empty(self, memory_store):
        assert memory_store.load() == set()

    def test_round_trip_ignores_insertion_order(self, memory_store):
        assert memory_store.save([12, 3, 7]) is True

        assert memory_store.load() == {3, 7, 12}

    def test_save_replaces_previous_contents(self, memory_store):
        memory_store.save({1, 2, 3})
        memory_store.save({4})

        assert memory_store.load() == {4}

    def test_invalid_entries_are_dropped(self):
        store = MemoryProgressStore(data={DEFAULT_KEY: [0, 3, "7", 31, True, 12]})

        assert store.load() == {3, 12}

    def test_non_list_value_loads_empty(self):
        store = MemoryProgressStore(data={DEFAULT_KEY: "3,7"})

        assert store.load() == set()


class TestFileProgressStore:

    def test_missing_file_loads_empty(self, tmp_path):
        store = FileProgressStore(tmp_path / "progress.json")

        assert store.load() == set()

    def test_round_trip(self, tmp_path):
        store = FileProgressStore(tmp_path / "progress.json")

        store.save({7, 3, 12})

        assert FileProgressStore(tmp_path / "progress.json").load() == {3, 7, 12}

    def test_file_layout_is_key_value(self, tmp_path):
        path = tmp_path / "progress.json"
        FileProgressStore(path).save({3, 1})

        assert json.loads(path.read_text()) == {"EarnedCoinsChallenges": [1, 3]}

    def test_other_keys_are_preserved(self, tmp_path):
        path = tmp_path / "progress.json"
        path.write_text(json.dumps({"Theme": "dark"}))

        FileProgressStore(path).save({2})

        assert json.loads(path.read_text()) == {"Theme": "dark", "EarnedCoinsChallenges": [2]}

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "progress.json"
        path.write_text("{not json")

        assert FileProgressStore(path).load() == set()

    def test_save_over_corrupt_file(self, tmp_path):
        path = tmp_path / "progress.json"
        path.write_text("[1, 2]")
        store = FileProgressStore(path)

        assert store.save({5}) is True
        assert store.load() == {5}

    def test_save_creates_parent_directory(self, tmp_path):
        store = FileProgressStore(tmp_path / "nested" / "dir" / "progress.json")

        assert store.save({1}) is True
        assert store.load() == {1}

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = FileProgressStore(blocker / "progress.json")

        assert store.save({1}) is False

    def test_no_temp_files_left_behind(self, tmp_path):
        store = FileProgressStore(tmp_path / "progress.json")
        store.save({1})
        store.save({1, 2})

        assert [p.name for p in tmp_path.iterdir()] == ["progress.json"]


class TestMongoProgressStore:

    def test_load_reads_value_document(self):
        collection = Mock()
        collection.find_one.return_value = {"_id": DEFAULT_KEY, "value": [12, 3, 7]}

        store = MongoProgressStore(collection)

        assert store.load() == {3, 7, 12}
        collection.find_one.assert_called_once_with({"_id": DEFAULT_KEY})

    def test_load_missing_document(self):
        collection = Mock()
        collection.find_one.return_value = None

        assert MongoProgressStore(collection).load() == set()

    def test_load_error_degrades_to_empty(self):
        collection = Mock()
        collection.find_one.side_effect = ServerSelectionTimeoutError("down")

        assert MongoProgressStore(collection).load() == set()

    def test_save_upserts_sorted_list(self):
        collection = Mock()

        assert MongoProgressStore(collection, key="progress").save({7, 3}) is True

        collection.replace_one.assert_called_once_with(
            {"_id": "progress"}, {"_id": "progress", "value": [3, 7]}, upsert=True
        )

    def test_save_error_returns_false(self):
        collection = Mock()
        collection.replace_one.side_effect = ServerSelectionTimeoutError("down")

        assert MongoProgressStore(collection).save({1}) is False


class TestCreateProgressStore:

    def test_file_backend(self, tmp_path):
        config = StoreConfig(backend="file", path=tmp_path / "p.json", key="k")

        store = create_progress_store(config)

        assert isinstance(store, FileProgressStore)
        assert store.path == tmp_path / "p.json"
        assert store.key == "k"

    def test_memory_backend(self):
        store = create_progress_store(StoreConfig(backend="memory"))

        assert isinstance(store, MemoryProgressStore)
        assert store.key == DEFAULT_KEY

    def test_mongodb_backend(self, monkeypatch):
        collection = Mock()
        manager = Mock()
        manager.get_collection.return_value = collection
        monkeypatch.setattr("fearlessyou.database.connection.get_database_manager",
                            lambda store_config=None: manager)

        store = create_progress_store(StoreConfig(backend="mongodb", collection="progress"))

        assert isinstance(store, MongoProgressStore)
        manager.get_collection.assert_not_called()

        collection.find_one.return_value = {"_id": DEFAULT_KEY, "value": [4]}
        assert store.load() == {4}
        assert store.collection is collection
        manager.get_collection.assert_called_once_with("progress")

    def test_mongodb_backend_unreachable_degrades(self, monkeypatch):
        monkeypatch.setattr("fearlessyou.database.connection._db_manager", None)
        monkeypatch.setattr(DatabaseManager, "connect", lambda self: False)

        store = create_progress_store(StoreConfig(backend="mongodb"))

        assert store.load() == set()
        assert store.save({1}) is False
        assert store.collection is None

    def test_unknown_backend(self):
        with pytest.raises(ProgressStoreError):
            create_progress_store(StoreConfig(backend="redis"))


class TestDatabaseManager:

    def test_connect_and_get_collection(self, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr("fearlessyou.database.connection.MongoClient", Mock(return_value=client))
        manager = DatabaseManager(StoreConfig(database_name="fy", collection="progress"))

        assert manager.connect() is True

        client.admin.command.assert_called_once_with("ping")
        assert manager.get_collection() is client["fy"]["progress"]

    def test_connect_failure(self, monkeypatch):
        client = MagicMock()
        client.admin.command.side_effect = ServerSelectionTimeoutError("down")
        monkeypatch.setattr("fearlessyou.database.connection.MongoClient", Mock(return_value=client))
        manager = DatabaseManager(StoreConfig())

        assert manager.connect() is False
        assert manager.client is None
        client.close.assert_called_once()

    def test_get_collection_requires_connection(self):
        with pytest.raises(RuntimeError):
            DatabaseManager(StoreConfig()).get_collection()
