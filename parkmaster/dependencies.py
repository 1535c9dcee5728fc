"""
Collaborator construction and dependency wiring for the FastAPI app.

`create_app` builds one store and one mirror per application and keeps them
on `app.state`; routes reach them through the accessors below so tests can
hand in their own implementations.
"""

from __future__ import annotations

from fastapi import Request

from parkmaster.config import Settings
from parkmaster.mirror import BackupMirror, DisabledBackupMirror, StorageBackupMirror
from parkmaster.records import ParkingRecords
from parkmaster.storage import InMemoryStorageClient, S3StorageClient, StorageClient
from parkmaster.store import DocumentStore, FileDocumentStore, InMemoryDocumentStore
from parkmaster.sync import SnapshotSynchronizer


def build_document_store(settings: Settings) -> DocumentStore:
    if settings.use_in_memory_backends:
        return InMemoryDocumentStore()
    return FileDocumentStore(settings.data_dir)


def build_storage_client(settings: Settings) -> StorageClient | None:
    """Return the object storage client, or None when remote storage is off."""
    if settings.use_in_memory_backends:
        return InMemoryStorageClient()
    if not settings.remote_storage_configured:
        return None
    return S3StorageClient(
        bucket=settings.storage_bucket,
        endpoint=settings.storage_endpoint,
        region=settings.storage_region,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


def build_backup_mirror(settings: Settings) -> BackupMirror:
    storage = build_storage_client(settings)
    if storage is None:
        return DisabledBackupMirror()
    return StorageBackupMirror(storage, key=settings.backup_object_key)


def get_synchronizer(request: Request) -> SnapshotSynchronizer:
    return SnapshotSynchronizer(
        request.app.state.document_store, request.app.state.backup_mirror
    )


def get_records(request: Request) -> ParkingRecords:
    return ParkingRecords(request.app.state.document_store)
