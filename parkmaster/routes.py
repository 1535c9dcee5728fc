"""
HTTP routes for the parking backend API.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from parkmaster.dependencies import get_records, get_synchronizer
from parkmaster.records import ParkingRecords, RecordNotFoundError
from parkmaster.schemas import (
    BackupSaveResponse,
    HealthResponse,
    LoginRequest,
    LoginResponse,
    SuccessResponse,
    VehicleExitRequest,
)
from parkmaster.sync import SnapshotSynchronizer

logger = logging.getLogger(__name__)

router = APIRouter()


@contextmanager
def _local_fault(message: str):
    """Map store failures to a 500 carrying only `message`."""
    try:
        yield
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except Exception as exc:
        logger.exception(message)
        raise HTTPException(status_code=500, detail=message) from exc


@router.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, records: ParkingRecords = Depends(get_records)):
    try:
        ok = records.check_login(payload.username, payload.password)
    except Exception:
        logger.exception("Login check failed")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Server error"}
        )
    if not ok:
        return JSONResponse(
            status_code=401,
            content={"success": False, "message": "Invalid credentials"},
        )
    return LoginResponse(success=True, message="Login successful")


# ---------- Vehicles ----------
@router.get("/vehicles")
def list_vehicles(records: ParkingRecords = Depends(get_records)):
    with _local_fault("Failed to fetch vehicles"):
        return records.list_vehicles()


@router.post("/vehicles")
def add_vehicle(
    payload: dict = Body(...), records: ParkingRecords = Depends(get_records)
):
    with _local_fault("Failed to add vehicle"):
        return records.add_vehicle(payload)


@router.put("/vehicles/{vehicle_id}/exit")
def exit_vehicle(
    vehicle_id: str,
    payload: Optional[VehicleExitRequest] = None,
    records: ParkingRecords = Depends(get_records),
):
    fee = payload.fee if payload is not None else None
    with _local_fault("Failed to update vehicle"):
        return records.exit_vehicle(vehicle_id, fee)


# ---------- Permanent clients ----------
@router.get("/permanent-clients")
def list_permanent_clients(records: ParkingRecords = Depends(get_records)):
    with _local_fault("Failed to fetch permanent clients"):
        return records.list_permanent_clients()


@router.post("/permanent-clients")
def add_permanent_client(
    payload: dict = Body(...), records: ParkingRecords = Depends(get_records)
):
    with _local_fault("Failed to add permanent client"):
        return records.add_permanent_client(payload)


@router.put("/permanent-clients/{client_id}")
def update_permanent_client(
    client_id: str,
    changes: dict = Body(...),
    records: ParkingRecords = Depends(get_records),
):
    with _local_fault("Failed to update permanent client"):
        return records.update_permanent_client(client_id, changes)


@router.delete("/permanent-clients/{client_id}", response_model=SuccessResponse)
def delete_permanent_client(
    client_id: str, records: ParkingRecords = Depends(get_records)
):
    with _local_fault("Failed to remove permanent client"):
        records.delete_permanent_client(client_id)
    return SuccessResponse()


# ---------- Settings ----------
@router.get("/settings")
def get_settings(records: ParkingRecords = Depends(get_records)):
    with _local_fault("Failed to fetch settings"):
        return records.get_settings()


@router.put("/settings")
def replace_settings(
    document: dict = Body(...), records: ParkingRecords = Depends(get_records)
):
    with _local_fault("Failed to update settings"):
        return records.replace_settings(document)


# ---------- Daily stats ----------
@router.get("/daily-stats")
def list_daily_stats(records: ParkingRecords = Depends(get_records)):
    with _local_fault("Failed to fetch daily stats"):
        return records.list_daily_stats()


@router.post("/daily-stats")
def upsert_daily_stat(
    record: dict = Body(...), records: ParkingRecords = Depends(get_records)
):
    with _local_fault("Failed to update daily stats"):
        return records.upsert_daily_stat(record)


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())


# ---------- Backup ----------
@router.post("/backup", response_model=BackupSaveResponse)
def save_backup(
    snapshot: dict = Body(...),
    sync: SnapshotSynchronizer = Depends(get_synchronizer),
):
    with _local_fault("Failed to save backup"):
        result = sync.save(snapshot)
    return BackupSaveResponse(supabase=result.remote_ok)


@router.get("/backup")
def load_backup(sync: SnapshotSynchronizer = Depends(get_synchronizer)):
    with _local_fault("Failed to load backup"):
        return sync.load()
