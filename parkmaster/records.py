"""
CRUD operations over the four parking collections.

Every mutation is a read-modify-write of one whole document, done under that
document's lock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from parkmaster.schemas import default_settings
from parkmaster.store import (
    DAILY_STATS,
    PERMANENT_CLIENTS,
    SETTINGS,
    VEHICLES,
    DocumentStore,
)


class RecordNotFoundError(Exception):
    """Raised when a record identifier is absent from its collection."""

    def __init__(self, message: str = "Record not found") -> None:
        self.message = message
        super().__init__(self.message)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _new_id() -> str:
    return uuid4().hex


def _index_of(records: list[dict], record_id: str) -> Optional[int]:
    for i, record in enumerate(records):
        if record.get("id") == record_id:
            return i
    return None


class ParkingRecords:
    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------- Vehicles ----------
    def list_vehicles(self) -> list[dict]:
        return self.store.read(VEHICLES, [])

    def add_vehicle(self, payload: dict) -> dict:
        """Record a vehicle entry; the server assigns `id` and `entryTime`."""
        vehicle = {**payload, "id": _new_id(), "entryTime": _now_iso()}
        with self.store.lock(VEHICLES):
            vehicles = self.store.read(VEHICLES, [])
            vehicles.append(vehicle)
            self.store.write(VEHICLES, vehicles)
        return vehicle

    def exit_vehicle(self, vehicle_id: str, fee: Any) -> dict:
        with self.store.lock(VEHICLES):
            vehicles = self.store.read(VEHICLES, [])
            index = _index_of(vehicles, vehicle_id)
            if index is None:
                raise RecordNotFoundError("Vehicle not found")
            vehicles[index] = {**vehicles[index], "exitTime": _now_iso(), "fee": fee}
            self.store.write(VEHICLES, vehicles)
            return vehicles[index]

    # ---------- Permanent clients ----------
    def list_permanent_clients(self) -> list[dict]:
        return self.store.read(PERMANENT_CLIENTS, [])

    def add_permanent_client(self, payload: dict) -> dict:
        client = {
            **payload,
            "id": _new_id(),
            "isPermanent": True,
            "paymentStatus": "unpaid",
            "entryTime": _now_iso(),
        }
        with self.store.lock(PERMANENT_CLIENTS):
            clients = self.store.read(PERMANENT_CLIENTS, [])
            clients.append(client)
            self.store.write(PERMANENT_CLIENTS, clients)
        return client

    def update_permanent_client(self, client_id: str, changes: dict) -> dict:
        """Shallow-merge `changes` onto the stored client."""
        with self.store.lock(PERMANENT_CLIENTS):
            clients = self.store.read(PERMANENT_CLIENTS, [])
            index = _index_of(clients, client_id)
            if index is None:
                raise RecordNotFoundError("Client not found")
            clients[index] = {**clients[index], **changes}
            self.store.write(PERMANENT_CLIENTS, clients)
            return clients[index]

    def delete_permanent_client(self, client_id: str) -> None:
        # Unknown ids are not an error.
        with self.store.lock(PERMANENT_CLIENTS):
            clients = self.store.read(PERMANENT_CLIENTS, [])
            remaining = [c for c in clients if c.get("id") != client_id]
            self.store.write(PERMANENT_CLIENTS, remaining)

    # ---------- Settings ----------
    def get_settings(self) -> dict:
        return self.store.read(SETTINGS, default_settings())

    def replace_settings(self, document: dict) -> dict:
        with self.store.lock(SETTINGS):
            self.store.write(SETTINGS, document)
        return document

    def check_login(self, username: Optional[str], password: Optional[str]) -> bool:
        credentials = self.get_settings().get("credentials") or {}
        expected_user = credentials.get("username")
        expected_password = credentials.get("password")
        if expected_user is None or expected_password is None:
            return False
        return username == expected_user and password == expected_password

    # ---------- Daily stats ----------
    def list_daily_stats(self) -> list[dict]:
        return self.store.read(DAILY_STATS, [])

    def upsert_daily_stat(self, record: dict) -> dict:
        """Replace the record with the same `date`, or append a new one."""
        with self.store.lock(DAILY_STATS):
            stats = self.store.read(DAILY_STATS, [])
            for i, existing in enumerate(stats):
                if existing.get("date") == record.get("date"):
                    stats[i] = record
                    break
            else:
                stats.append(record)
            self.store.write(DAILY_STATS, stats)
        return record
