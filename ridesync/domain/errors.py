"""Error kinds surfaced by the ride core."""


class RideError(Exception):
    """Base class for every ride lifecycle error."""


class DecodeError(RideError):
    """Raised when a raw store record cannot be turned into a ``Ride``."""

    def __init__(self, ride_id: str, reason: str):
        super().__init__(f"Cannot decode ride {ride_id}: {reason}")
        self.ride_id = ride_id
        self.reason = reason


class AuthenticationRequiredError(RideError):
    """Raised when an operation needs an authenticated identity and has none."""


class ProfileResolutionError(RideError):
    """Raised when the requester's profile is missing or cannot be fetched."""


class PersistenceError(RideError):
    """Raised when a write to the remote ride store fails."""


class NotFoundError(RideError):
    """Raised when a lifecycle operation references an unknown ride id."""


class InvalidTransitionError(RideError):
    """Raised when a ride status change violates the state machine."""


class ConflictError(RideError):
    """Raised when a conditional write loses to a concurrent writer."""
