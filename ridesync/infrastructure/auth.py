"""Auth collaborators exposing the current authenticated identity."""

from __future__ import annotations

from typing import Optional

from ridesync.domain.entities import Identity


class StaticAuthProvider:
    """Returns a fixed identity (or none); the API builds one per request."""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity

    @classmethod
    def from_email(cls, email: Optional[str]) -> "StaticAuthProvider":
        email = (email or "").strip()
        return cls(Identity(email=email) if email else None)

    def current_identity(self) -> Optional[Identity]:
        return self._identity
