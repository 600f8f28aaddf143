"""Ride record decoding / encoding."""

import pytest

from ridesync.domain.decoder import decode_records, decode_ride, encode_ride
from ridesync.domain.enums import RideStatus
from ridesync.domain.errors import DecodeError
from tests.fakes import MAYA, make_record

REQUIRED = [
    "pickupLocation",
    "dropLocation",
    "status",
    "latitude",
    "longitude",
    "requestedBy",
    "userName",
    "schoolName",
    "phoneNumber",
    "userEmail",
]


def test_decode_valid_record():
    ride = decode_ride(make_record(status="inProgress"), "ride-1")
    assert ride.id == "ride-1"
    assert ride.status is RideStatus.IN_PROGRESS
    assert ride.requested_by == MAYA.email
    assert ride.coordinate.latitude == pytest.approx(37.7793)


def test_decode_then_encode_preserves_every_field():
    record = make_record(status="accepted", latitude=-33.8688, longitude=151.2093)
    assert encode_ride(decode_ride(record, "ride-1")) == record


def test_integer_coordinates_are_numbers():
    record = make_record(latitude=40, longitude=-74)
    ride = decode_ride(record, "ride-1")
    assert ride.coordinate.latitude == 40
    assert ride.coordinate.longitude == -74

    encoded = encode_ride(ride)
    assert type(encoded["latitude"]) is int
    assert type(encoded["longitude"]) is int
    assert encoded == record


def test_snake_case_keys_do_not_satisfy_required_fields():
    record = make_record()
    record["pickup_location"] = record.pop("pickupLocation")
    record["user_name"] = record.pop("userName")
    with pytest.raises(DecodeError) as exc_info:
        decode_ride(record, "ride-1")
    assert "pickupLocation" in str(exc_info.value)
    assert "userName" in str(exc_info.value)


def test_extra_fields_are_ignored():
    ride = decode_ride(make_record(driverNote="gate B"), "ride-1")
    assert "driverNote" not in encode_ride(ride)


@pytest.mark.parametrize("missing", REQUIRED)
def test_missing_required_field_fails(missing):
    record = make_record()
    del record[missing]
    with pytest.raises(DecodeError) as exc_info:
        decode_ride(record, "ride-1")
    assert missing in str(exc_info.value)


@pytest.mark.parametrize(
    "overrides",
    [
        {"latitude": "37.7"},
        {"longitude": True},
        {"userName": 42},
        {"status": "cancelled"},
        {"status": None},
    ],
)
def test_wrong_types_fail(overrides):
    with pytest.raises(DecodeError):
        decode_ride(make_record(**overrides), "ride-1")


def test_non_mapping_record_fails():
    with pytest.raises(DecodeError, match="expected a mapping"):
        decode_ride("requested", "ride-1")


def test_batch_skips_bad_records_only():
    broken = make_record()
    del broken["phoneNumber"]
    rides = decode_records(
        {
            "a": make_record(),
            "b": broken,
            "c": make_record(status="completed"),
            "d": None,
        }
    )
    assert [r.id for r in rides] == ["a", "c"]
    assert rides[1].status is RideStatus.COMPLETED
