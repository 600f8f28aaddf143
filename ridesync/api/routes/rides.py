"""
Ride endpoints
==============

POST /api/v1/rides                 -- request a ride (caller from X-User-Email)
GET  /api/v1/rides                 -- cached rides (``?mine=true`` for own)
GET  /api/v1/rides/active          -- the ride this client accepted / started
GET  /api/v1/rides/{ride_id}       -- one cached ride
POST /api/v1/rides/{ride_id}/accept
POST /api/v1/rides/{ride_id}/start
POST /api/v1/rides/{ride_id}/complete

Lifecycle errors are translated to HTTP statuses by the handler installed
in ``ridesync.api.app``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ridesync.api.dependencies import get_auth, get_components, get_coordinator
from ridesync.api.middleware import limiter
from ridesync.api.schemas import ErrorResponse, RideCreateRequest, RideResponse
from ridesync.domain.entities import Coordinate
from ridesync.infrastructure.auth import StaticAuthProvider
from ridesync.runtime import RideComponents
from ridesync.services.coordinator import RideCoordinator

router = APIRouter(prefix="/rides", tags=["rides"])

_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Request a ride",
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
@limiter.limit("100/minute")
async def request_ride(
    request: Request,
    body: RideCreateRequest,
    coordinator: RideCoordinator = Depends(get_coordinator),
):
    ride = await coordinator.request_ride(
        body.pickup_location,
        body.drop_location,
        Coordinate(body.latitude, body.longitude),
    )
    return RideResponse.from_ride(ride)


@router.get("", response_model=list[RideResponse], summary="List cached rides")
@limiter.limit("100/minute")
async def list_rides(
    request: Request,
    mine: bool = False,
    components: RideComponents = Depends(get_components),
    auth: StaticAuthProvider = Depends(get_auth),
):
    rides = components.state.snapshot.rides
    if mine:
        identity = auth.current_identity()
        if identity is None:
            raise HTTPException(status_code=401, detail="Sign in to list your rides")
        rides = tuple(r for r in rides if r.requested_by_user(identity.email))
    return [RideResponse.from_ride(r) for r in rides]


@router.get(
    "/active",
    response_model=Optional[RideResponse],
    summary="Currently accepted or in-progress ride",
)
@limiter.limit("100/minute")
async def active_ride(
    request: Request,
    components: RideComponents = Depends(get_components),
):
    ride = components.state.snapshot.active_ride
    return RideResponse.from_ride(ride) if ride else None


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get a cached ride",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit("100/minute")
async def get_ride(
    request: Request,
    ride_id: str,
    components: RideComponents = Depends(get_components),
):
    ride = components.state.get(ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")
    return RideResponse.from_ride(ride)


@router.post(
    "/{ride_id}/accept",
    response_model=RideResponse,
    summary="Accept a requested ride",
    responses=_ERRORS,
)
@limiter.limit("100/minute")
async def accept_ride(
    request: Request,
    ride_id: str,
    coordinator: RideCoordinator = Depends(get_coordinator),
):
    return RideResponse.from_ride(await coordinator.accept_ride(ride_id))


@router.post(
    "/{ride_id}/start",
    response_model=RideResponse,
    summary="Start an accepted ride",
    responses=_ERRORS,
)
@limiter.limit("100/minute")
async def start_ride(
    request: Request,
    ride_id: str,
    coordinator: RideCoordinator = Depends(get_coordinator),
):
    return RideResponse.from_ride(await coordinator.start_ride(ride_id))


@router.post(
    "/{ride_id}/complete",
    response_model=RideResponse,
    summary="Complete an in-progress ride",
    responses=_ERRORS,
)
@limiter.limit("100/minute")
async def complete_ride(
    request: Request,
    ride_id: str,
    coordinator: RideCoordinator = Depends(get_coordinator),
):
    return RideResponse.from_ride(await coordinator.complete_ride(ride_id))
