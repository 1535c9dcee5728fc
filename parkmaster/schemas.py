"""
Pydantic schemas for the parking backend.

Collection records (vehicles, clients, daily stats) are free-form JSON objects
owned by the front end, so only the fixed envelopes and the settings defaults
are modelled here.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field


class PricingTier(BaseModel):
    baseHours: int
    baseFee: Union[int, float]
    extraHourFee: Union[int, float]


class Credentials(BaseModel):
    username: str = "admin"
    password: str = "admin123"


class SiteSettings(BaseModel):
    siteName: str = "Park Master Pro"
    pricing: dict[str, PricingTier] = Field(
        default_factory=lambda: {
            "car": PricingTier(baseHours=2, baseFee=50, extraHourFee=25),
            "bike": PricingTier(baseHours=2, baseFee=20, extraHourFee=10),
            "rickshaw": PricingTier(baseHours=2, baseFee=30, extraHourFee=15),
        }
    )
    credentials: Credentials = Field(default_factory=Credentials)
    viewMode: str = "grid"


def default_settings() -> dict:
    """The settings document materialized on first read."""
    return SiteSettings().model_dump()


class LoginRequest(BaseModel):
    # Left untyped: any mismatch, including a non-string, is a 401.
    username: Any = None
    password: Any = None


class LoginResponse(BaseModel):
    success: bool
    message: str


class VehicleExitRequest(BaseModel):
    fee: Any = None


class SuccessResponse(BaseModel):
    success: Literal[True] = True


class HealthResponse(BaseModel):
    status: Literal["OK"] = "OK"
    timestamp: str


class BackupSaveResponse(BaseModel):
    success: Literal[True] = True
    # Name kept for the existing front end; true when the remote push succeeded.
    supabase: bool
