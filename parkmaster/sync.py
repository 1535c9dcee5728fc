"""
Reconciles the live local documents with the aggregate backup snapshot.

Local writes are authoritative for a save; the remote mirror is advisory and
only reported through a flag. For a load the remote copy wins when it can be
fetched, since it survives the loss of the local disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from parkmaster.mirror import NOT_CONFIGURED, BackupMirror
from parkmaster.schemas import default_settings
from parkmaster.store import (
    BACKUP,
    DAILY_STATS,
    PERMANENT_CLIENTS,
    SETTINGS,
    VEHICLES,
    DocumentStore,
)

logger = logging.getLogger(__name__)

# Snapshot field -> live document it mirrors.
SNAPSHOT_DOCUMENTS = {
    "vehicles": VEHICLES,
    "permanentClients": PERMANENT_CLIENTS,
    "settings": SETTINGS,
    "dailyStats": DAILY_STATS,
}


@dataclass
class SaveResult:
    remote_ok: bool
    remote_reason: str | None = None


class SnapshotSynchronizer:
    def __init__(self, store: DocumentStore, mirror: BackupMirror):
        self.store = store
        self.mirror = mirror

    def _apply(self, snapshot: dict) -> None:
        with self.store.lock(BACKUP):
            self.store.write(BACKUP, snapshot)
        for field, name in SNAPSHOT_DOCUMENTS.items():
            if snapshot.get(field) is not None:
                with self.store.lock(name):
                    self.store.write(name, snapshot[field])

    def save(self, snapshot: dict) -> SaveResult:
        """Persist the snapshot locally, fan it out, then push it remotely."""
        self._apply(snapshot)
        pushed = self.mirror.push(snapshot)
        if not pushed.ok and pushed.reason != NOT_CONFIGURED:
            logger.warning(
                "Backup saved locally but remote upload failed (%s)", pushed.reason
            )
        return SaveResult(remote_ok=pushed.ok, remote_reason=pushed.reason)

    def load(self) -> dict:
        pulled = self.mirror.pull()
        if pulled.ok:
            return pulled.snapshot or {}
        logger.info("Serving local backup (remote: %s)", pulled.reason)
        return self.store.read(BACKUP, {}) or {}

    def collect(self) -> dict:
        """Build a snapshot from the current live documents."""
        return {
            "vehicles": self.store.read(VEHICLES, []),
            "permanentClients": self.store.read(PERMANENT_CLIENTS, []),
            "settings": self.store.read(SETTINGS, default_settings()),
            "dailyStats": self.store.read(DAILY_STATS, []),
        }

    def restore_on_startup(self) -> bool:
        """
        Pull the remote snapshot into the live documents, if one exists.

        Returns True when a remote snapshot was applied. Errors are logged and
        swallowed so the service can always start on local data.
        """
        try:
            pulled = self.mirror.pull()
            if not pulled.ok or not pulled.snapshot:
                logger.info(
                    "No remote backup restored (%s); using local files",
                    pulled.reason or "empty",
                )
                return False
            self._apply(pulled.snapshot)
        except Exception as exc:
            logger.exception("Startup restore skipped due to error: %s", exc)
            return False
        logger.info("Restored data from remote backup at startup")
        return True
