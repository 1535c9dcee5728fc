"""
Best-effort mirroring of the aggregate backup snapshot to object storage.

Mirror calls never raise: every outcome, including a missing configuration,
comes back as a `MirrorResult` the caller folds into its own response.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from parkmaster.storage import StorageClient

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not_configured"
NOT_FOUND = "not_found"
UPLOAD_FAILED = "upload_failed"
DOWNLOAD_FAILED = "download_failed"


@dataclass
class MirrorResult:
    ok: bool
    reason: Optional[str] = None
    snapshot: Optional[dict] = None
    error: Optional[str] = None


class BackupMirror(Protocol):
    enabled: bool

    def push(self, snapshot: dict) -> MirrorResult:
        ...

    def pull(self) -> MirrorResult:
        ...


class DisabledBackupMirror:
    """Stands in for the mirror when no remote storage is configured."""

    enabled = False

    def push(self, snapshot: dict) -> MirrorResult:
        return MirrorResult(ok=False, reason=NOT_CONFIGURED)

    def pull(self) -> MirrorResult:
        return MirrorResult(ok=False, reason=NOT_CONFIGURED)


class StorageBackupMirror:
    """Keeps one snapshot object under a fixed key, replaced on every push."""

    enabled = True

    def __init__(self, storage: StorageClient, key: str = "backup.json"):
        self.storage = storage
        self.key = key

    def push(self, snapshot: dict) -> MirrorResult:
        try:
            self.storage.upload_json(self.key, snapshot)
        except Exception as exc:
            logger.exception("Backup upload to %s failed: %s", self.key, exc)
            return MirrorResult(ok=False, reason=UPLOAD_FAILED, error=str(exc))
        return MirrorResult(ok=True)

    def pull(self) -> MirrorResult:
        try:
            body = self.storage.get_bytes(self.key)
            snapshot = json.loads(body)
        except FileNotFoundError:
            logger.info("No remote backup at %s yet", self.key)
            return MirrorResult(ok=False, reason=NOT_FOUND)
        except Exception as exc:
            logger.exception("Backup download from %s failed: %s", self.key, exc)
            return MirrorResult(ok=False, reason=DOWNLOAD_FAILED, error=str(exc))
        return MirrorResult(ok=True, snapshot=snapshot)
