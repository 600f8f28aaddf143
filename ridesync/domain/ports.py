"""
Narrow contracts for the collaborators the ride core depends on.

The core never imports a concrete store, resolver or sink; the runtime
wires implementations from ``ridesync.infrastructure`` behind these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from .entities import Identity, Profile
from .enums import ChangeKind, RideStatus

RawRecord = Mapping[str, Any]


@dataclass(frozen=True)
class ChangeEvent:
    """A single-record mutation observed on the ride store."""

    kind: ChangeKind
    ride_id: str
    record: Any = field(default_factory=dict)


SnapshotHandler = Callable[[dict[str, Any]], Awaitable[None]]
ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]


class Subscription(Protocol):
    async def close(self) -> None: ...


class RideStore(Protocol):
    async def snapshot(self) -> dict[str, Any]: ...

    async def create(self, ride_id: str, record: RawRecord) -> None: ...

    async def update_fields(
        self,
        ride_id: str,
        fields: RawRecord,
        expected_status: Optional[RideStatus] = None,
    ) -> None: ...

    async def update_status(
        self,
        ride_id: str,
        status: RideStatus,
        expected: Optional[RideStatus] = None,
    ) -> None: ...

    async def subscribe(
        self, on_snapshot: SnapshotHandler, on_change: ChangeHandler
    ) -> Subscription: ...


class ProfileResolver(Protocol):
    async def resolve(self, email: str) -> Optional[Profile]: ...


class AuthProvider(Protocol):
    def current_identity(self) -> Optional[Identity]: ...


@dataclass(frozen=True)
class Alert:
    recipient: str
    message: str


class AlertSink(Protocol):
    async def deliver(self, alert: Alert) -> None: ...
