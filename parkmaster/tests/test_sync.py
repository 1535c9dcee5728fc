import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

from parkmaster.mirror import (
    DisabledBackupMirror,
    MirrorResult,
    StorageBackupMirror,
    UPLOAD_FAILED,
)
from parkmaster.schemas import default_settings
from parkmaster.storage import InMemoryStorageClient
from parkmaster.store import FileDocumentStore
from parkmaster.sync import SnapshotSynchronizer

FULL_SNAPSHOT = {
    "vehicles": [
        {"id": "v1", "plate": "KHI-101", "type": "car", "entryTime": "2025-03-01T08:00:00.000+00:00"}
    ],
    "permanentClients": [
        {"id": "c1", "name": "Ayesha", "isPermanent": True, "paymentStatus": "paid"}
    ],
    "settings": {
        "siteName": "Lot B",
        "pricing": {"car": {"baseHours": 1, "baseFee": 40, "extraHourFee": 20}},
        "credentials": {"username": "ops", "password": "s3cret"},
        "viewMode": "list",
    },
    "dailyStats": [{"date": "2025-03-01", "vehicles": 12, "revenue": 640}],
}


class SnapshotSynchronizerTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.store = FileDocumentStore(self.tmp)
        self.storage = InMemoryStorageClient()
        self.remote = StorageBackupMirror(self.storage)

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_save_then_load_without_remote_round_trips(self):
        sync = SnapshotSynchronizer(self.store, DisabledBackupMirror())
        result = sync.save(FULL_SNAPSHOT)
        self.assertFalse(result.remote_ok)
        self.assertEqual(sync.load(), FULL_SNAPSHOT)

    def test_save_overwrites_live_documents(self):
        self.store.write("vehicles", [{"id": "old"}])
        sync = SnapshotSynchronizer(self.store, DisabledBackupMirror())
        sync.save(FULL_SNAPSHOT)
        self.assertEqual(self.store.read("vehicles", []), FULL_SNAPSHOT["vehicles"])
        self.assertEqual(
            self.store.read("permanent-clients", []), FULL_SNAPSHOT["permanentClients"]
        )
        self.assertEqual(self.store.read("settings", {}), FULL_SNAPSHOT["settings"])
        self.assertEqual(self.store.read("daily-stats", []), FULL_SNAPSHOT["dailyStats"])

    def test_save_leaves_absent_fields_untouched(self):
        self.store.write("daily-stats", [{"date": "2025-02-28"}])
        sync = SnapshotSynchronizer(self.store, DisabledBackupMirror())
        sync.save({"vehicles": []})
        self.assertEqual(self.store.read("vehicles", [{"id": "x"}]), [])
        self.assertEqual(self.store.read("daily-stats", []), [{"date": "2025-02-28"}])
        self.assertEqual(self.store.read("backup", {}), {"vehicles": []})

    def test_save_pushes_to_remote(self):
        sync = SnapshotSynchronizer(self.store, self.remote)
        self.assertTrue(sync.save(FULL_SNAPSHOT).remote_ok)
        self.assertEqual(self.remote.pull().snapshot, FULL_SNAPSHOT)

    def test_remote_failure_does_not_fail_save(self):
        mirror = MagicMock()
        mirror.push.return_value = MirrorResult(ok=False, reason=UPLOAD_FAILED)
        sync = SnapshotSynchronizer(self.store, mirror)
        result = sync.save(FULL_SNAPSHOT)
        self.assertFalse(result.remote_ok)
        self.assertEqual(result.remote_reason, UPLOAD_FAILED)
        self.assertEqual(self.store.read("backup", {}), FULL_SNAPSHOT)

    def test_load_prefers_remote_snapshot(self):
        self.store.write("backup", {"vehicles": [{"id": "local"}]})
        self.remote.push(FULL_SNAPSHOT)
        sync = SnapshotSynchronizer(self.store, self.remote)
        self.assertEqual(sync.load(), FULL_SNAPSHOT)

    def test_load_falls_back_to_local_when_remote_missing(self):
        local = {"vehicles": [{"id": "local"}]}
        self.store.write("backup", local)
        sync = SnapshotSynchronizer(self.store, self.remote)
        self.assertEqual(sync.load(), local)

    def test_load_falls_back_when_remote_errors(self):
        self.storage.stored_objects["backup.json"] = b"garbage"
        self.store.write("backup", {"dailyStats": []})
        sync = SnapshotSynchronizer(self.store, self.remote)
        self.assertEqual(sync.load(), {"dailyStats": []})

    def test_load_with_nothing_anywhere_is_empty(self):
        sync = SnapshotSynchronizer(self.store, self.remote)
        self.assertEqual(sync.load(), {})

    def test_collect_reads_live_documents(self):
        self.store.write("vehicles", FULL_SNAPSHOT["vehicles"])
        sync = SnapshotSynchronizer(self.store, DisabledBackupMirror())
        collected = sync.collect()
        self.assertEqual(collected["vehicles"], FULL_SNAPSHOT["vehicles"])
        self.assertEqual(collected["permanentClients"], [])
        self.assertEqual(collected["settings"], default_settings())
        self.assertEqual(collected["dailyStats"], [])


class StartupRestoreTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.store = FileDocumentStore(self.tmp)

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_restores_remote_snapshot_into_empty_disk(self):
        remote = StorageBackupMirror(InMemoryStorageClient())
        remote.push(FULL_SNAPSHOT)
        sync = SnapshotSynchronizer(self.store, remote)

        self.assertTrue(sync.restore_on_startup())
        self.assertEqual(self.store.read("vehicles", []), FULL_SNAPSHOT["vehicles"])
        self.assertEqual(self.store.read("settings", {}), FULL_SNAPSHOT["settings"])
        self.assertEqual(self.store.read("backup", {}), FULL_SNAPSHOT)

    def test_keeps_local_files_without_remote(self):
        self.store.write("vehicles", [{"id": "local"}])
        sync = SnapshotSynchronizer(self.store, DisabledBackupMirror())
        self.assertFalse(sync.restore_on_startup())
        self.assertEqual(self.store.read("vehicles", []), [{"id": "local"}])

    def test_errors_never_escape(self):
        mirror = MagicMock()
        mirror.pull.side_effect = RuntimeError("boom")
        sync = SnapshotSynchronizer(self.store, mirror)
        self.assertFalse(sync.restore_on_startup())

    def test_local_write_errors_never_escape(self):
        store = MagicMock()
        store.write.side_effect = OSError("read-only file system")
        remote = StorageBackupMirror(InMemoryStorageClient())
        remote.push(FULL_SNAPSHOT)
        sync = SnapshotSynchronizer(store, remote)
        self.assertFalse(sync.restore_on_startup())


if __name__ == "__main__":
    unittest.main()
