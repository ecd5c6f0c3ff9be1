import os
import tempfile
import unittest

from saunaflow.adapters.storage_adapters.memory_storage_adapter import InMemoryStorageAdapter
from saunaflow.adapters.storage_adapters.sqlite_storage_adapter import SqliteStorageAdapter
from saunaflow.core.repositories import SessionHistoryRepository
from saunaflow.core.session_log import SessionLog
from saunaflow.core.status import Goal
from saunaflow.utils import custom_exception as ce


class StorageContract:
    def make_storage(self):
        raise NotImplementedError

    def test_get_set_remove_clear(self) -> None:
        storage = self.make_storage()
        self.assertIsNone(storage.get("missing"))
        storage.set("a", "1")
        storage.set("b", "two")
        storage.set("a", "3")
        self.assertEqual(storage.get("a"), "3")
        storage.remove("a")
        storage.remove("a")
        self.assertIsNone(storage.get("a"))
        storage.clear()
        self.assertIsNone(storage.get("b"))


class TestInMemoryStorage(StorageContract, unittest.TestCase):
    def make_storage(self):
        return InMemoryStorageAdapter()


class TestSqliteStorage(StorageContract, unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmp.name, "nested", "saunaflow.db")
        self.opened = []

    def tearDown(self) -> None:
        for storage in self.opened:
            storage.close()
        self.tmp.cleanup()

    def make_storage(self):
        storage = SqliteStorageAdapter(self.db_path)
        self.opened.append(storage)
        return storage

    def test_history_survives_reopening(self) -> None:
        log = SessionLog("Relax", 1260, 2, "2026-10-18T09:30:00+02:00", Goal.RELAX)
        SessionHistoryRepository(self.make_storage()).append(log)
        self.assertEqual(SessionHistoryRepository(self.make_storage()).load(), [log])

    def test_errors_become_storage_errors(self) -> None:
        storage = self.make_storage()
        storage.close()
        with self.assertRaises(ce.StorageError):
            storage.get("a")
        with self.assertRaises(ce.StorageError):
            storage.set("a", "1")


if __name__ == "__main__":
    unittest.main()
