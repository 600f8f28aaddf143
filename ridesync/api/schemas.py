"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ridesync.domain.entities import Ride


# ── Requests ──────────────────────────────────────────────────────────


class RideCreateRequest(BaseModel):
    pickup_location: str = Field(..., min_length=1, max_length=255)
    drop_location: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# ── Responses ─────────────────────────────────────────────────────────


class RideResponse(BaseModel):
    id: str
    pickup_location: str
    drop_location: str
    latitude: float
    longitude: float
    status: str
    requested_by: str
    user_name: str
    school_name: str
    phone_number: str
    user_email: str

    @classmethod
    def from_ride(cls, ride: Ride) -> "RideResponse":
        return cls(
            id=ride.id,
            pickup_location=ride.pickup_location,
            drop_location=ride.drop_location,
            latitude=ride.coordinate.latitude,
            longitude=ride.coordinate.longitude,
            status=ride.status.value,
            requested_by=ride.requested_by,
            user_name=ride.user_name,
            school_name=ride.school_name,
            phone_number=ride.phone_number,
            user_email=ride.user_email,
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    rides_cached: int = 0


class ErrorResponse(BaseModel):
    detail: str
