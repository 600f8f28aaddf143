"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, Header, Request

from ridesync.infrastructure.auth import StaticAuthProvider
from ridesync.runtime import RideComponents
from ridesync.services.coordinator import RideCoordinator


def get_components(request: Request) -> RideComponents:
    """Return the runtime started by the application lifespan."""
    return request.app.state.components


def get_auth(
    x_user_email: Optional[str] = Header(None),
) -> StaticAuthProvider:
    """Identity of the caller, taken from the ``X-User-Email`` header."""
    return StaticAuthProvider.from_email(x_user_email)


def get_coordinator(
    components: RideComponents = Depends(get_components),
    auth: StaticAuthProvider = Depends(get_auth),
) -> RideCoordinator:
    return components.coordinator_for(auth)
