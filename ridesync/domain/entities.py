"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (requested -> accepted -> inProgress -> completed).
- ``Ride`` is frozen; a transition yields a new value so identity fields
  can never drift after creation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace

from .enums import RideStatus, RIDE_TRANSITIONS
from .errors import InvalidTransitionError


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Identity:
    """An authenticated user, keyed by a stable email-like string."""

    email: str


@dataclass(frozen=True)
class Profile:
    user_name: str
    school_name: str
    phone_number: str


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Ride:
    id: str
    pickup_location: str
    drop_location: str
    coordinate: Coordinate
    requested_by: str
    user_name: str
    school_name: str
    phone_number: str
    user_email: str
    status: RideStatus = RideStatus.REQUESTED

    @classmethod
    def create(
        cls,
        *,
        pickup_location: str,
        drop_location: str,
        coordinate: Coordinate,
        requester: Identity,
        profile: Profile,
    ) -> Ride:
        """Build a fresh ``requested`` ride with a client-generated id."""
        return cls(
            id=str(uuid.uuid4()),
            pickup_location=pickup_location,
            drop_location=drop_location,
            coordinate=coordinate,
            requested_by=requester.email,
            user_name=profile.user_name,
            school_name=profile.school_name,
            phone_number=profile.phone_number,
            user_email=requester.email,
        )

    def transition_to(self, new_status: RideStatus) -> Ride:
        """Return a copy in *new_status* if the transition is legal, else raise."""
        allowed = RIDE_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition ride {self.id} from {self.status.value} "
                f"to {new_status.value}"
            )
        return replace(self, status=new_status)

    def requested_by_user(self, email: str) -> bool:
        return self.requested_by == email
