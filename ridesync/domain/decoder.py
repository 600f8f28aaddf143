"""
Wire <-> entity conversion for ride store records.

A record is the flat camelCase mapping kept under ``rideRequests/<id>``.
Validation is delegated to a pydantic model so that a missing or
mistyped field rejects the whole record; no partial ``Ride`` is ever
produced.  Unknown keys are ignored, so new fields must stay optional.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError

from .entities import Coordinate, Ride
from .enums import RideStatus
from .errors import DecodeError

logger = logging.getLogger(__name__)


class RideRecord(BaseModel):
    # Wire names only: snake_case keys do not stand in for a missing field
    model_config = ConfigDict(extra="ignore")

    pickup_location: StrictStr = Field(alias="pickupLocation")
    drop_location: StrictStr = Field(alias="dropLocation")
    status: RideStatus
    latitude: StrictInt | StrictFloat
    longitude: StrictInt | StrictFloat
    requested_by: StrictStr = Field(alias="requestedBy")
    user_name: StrictStr = Field(alias="userName")
    school_name: StrictStr = Field(alias="schoolName")
    phone_number: StrictStr = Field(alias="phoneNumber")
    user_email: StrictStr = Field(alias="userEmail")


def decode_ride(record: Any, ride_id: str) -> Ride:
    """Turn *record* into a ``Ride`` keyed by *ride_id*, or raise ``DecodeError``."""
    if not isinstance(record, Mapping):
        raise DecodeError(ride_id, f"expected a mapping, got {type(record).__name__}")
    try:
        parsed = RideRecord.model_validate(dict(record))
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise DecodeError(ride_id, f"invalid fields {fields}") from exc

    return Ride(
        id=ride_id,
        pickup_location=parsed.pickup_location,
        drop_location=parsed.drop_location,
        coordinate=Coordinate(parsed.latitude, parsed.longitude),
        requested_by=parsed.requested_by,
        user_name=parsed.user_name,
        school_name=parsed.school_name,
        phone_number=parsed.phone_number,
        user_email=parsed.user_email,
        status=parsed.status,
    )


def encode_ride(ride: Ride) -> dict[str, Any]:
    """Flatten *ride* into the store's record schema (id is the key, not a field)."""
    return {
        "pickupLocation": ride.pickup_location,
        "dropLocation": ride.drop_location,
        "status": ride.status.value,
        "requestedBy": ride.requested_by,
        "userName": ride.user_name,
        "schoolName": ride.school_name,
        "phoneNumber": ride.phone_number,
        "userEmail": ride.user_email,
        "latitude": ride.coordinate.latitude,
        "longitude": ride.coordinate.longitude,
    }


def decode_records(records: Mapping[str, Any]) -> list[Ride]:
    """Decode a whole snapshot, skipping (and logging) records that fail."""
    rides: list[Ride] = []
    for ride_id, record in records.items():
        try:
            rides.append(decode_ride(record, ride_id))
        except DecodeError as exc:
            logger.warning("Skipping ride record: %s", exc)
    return rides
