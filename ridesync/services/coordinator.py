"""
Ride Coordinator
================

Lifecycle operations on a ride: request, accept, start, complete.

``request_ride`` writes first and touches the cache only after the store
acknowledges.  The other three apply the transition optimistically through
the state store, then issue a conditional status write (compare-and-swap on
the prior status).  If that write fails the optimistic change is rolled
back and the error is re-raised to the caller.
"""

from __future__ import annotations

import logging

from ridesync.domain.decoder import encode_ride
from ridesync.domain.entities import Coordinate, Ride
from ridesync.domain.enums import RideStatus
from ridesync.domain.errors import (
    AuthenticationRequiredError,
    PersistenceError,
    ProfileResolutionError,
    RideError,
)
from ridesync.domain.ports import AuthProvider, ProfileResolver, RideStore

from .state import RideStateStore

logger = logging.getLogger(__name__)


class RideCoordinator:
    def __init__(
        self,
        store: RideStore,
        state: RideStateStore,
        profiles: ProfileResolver,
        auth: AuthProvider,
    ):
        self.store = store
        self.state = state
        self.profiles = profiles
        self.auth = auth

    async def request_ride(
        self, pickup_location: str, drop_location: str, coordinate: Coordinate
    ) -> Ride:
        identity = self.auth.current_identity()
        if identity is None:
            raise AuthenticationRequiredError("Sign in to request a ride")

        try:
            profile = await self.profiles.resolve(identity.email)
        except ProfileResolutionError:
            raise
        except Exception as exc:
            raise ProfileResolutionError(
                f"Profile lookup for {identity.email} failed"
            ) from exc
        if profile is None:
            raise ProfileResolutionError(f"No profile found for {identity.email}")

        ride = Ride.create(
            pickup_location=pickup_location,
            drop_location=drop_location,
            coordinate=coordinate,
            requester=identity,
            profile=profile,
        )
        try:
            await self.store.create(ride.id, encode_ride(ride))
        except RideError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Saving ride {ride.id} failed") from exc
        # The synchronizer may already hold this ride, possibly in a newer state
        await self.state.add(ride)
        logger.info(
            "New ride %s requested by %s from %s to %s",
            ride.id, ride.user_name, pickup_location, drop_location,
        )
        return ride

    async def accept_ride(self, ride_id: str) -> Ride:
        return await self._advance(ride_id, RideStatus.ACCEPTED, activate=True)

    async def start_ride(self, ride_id: str) -> Ride:
        return await self._advance(ride_id, RideStatus.IN_PROGRESS, activate=True)

    async def complete_ride(self, ride_id: str) -> Ride:
        return await self._advance(ride_id, RideStatus.COMPLETED, activate=False)

    async def _advance(self, ride_id: str, target: RideStatus, activate: bool) -> Ride:
        pending = await self.state.transition(ride_id, target, activate)
        try:
            await self.store.update_status(ride_id, target, expected=pending.previous)
        except Exception as exc:
            rolled_back = await self.state.rollback(pending)
            logger.warning(
                "Status update of ride %s to %s failed (%s); local change %s",
                ride_id, target.value, exc,
                "rolled back" if rolled_back else "already superseded",
            )
            if isinstance(exc, RideError):
                raise
            raise PersistenceError(
                f"Status update of ride {ride_id} to {target.value} failed"
            ) from exc
        logger.info("Ride %s status updated to %s", ride_id, target.value)
        return pending.ride
