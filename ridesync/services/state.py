"""
Single-writer ride state store (actor).

Every mutation is a command placed on an ``asyncio.Queue`` and applied by
one writer task, so store callbacks and caller-initiated lifecycle
operations can never interleave half-way through an update.  Readers get
an immutable ``RideSnapshot`` that is rebuilt after each command; listeners
may subscribe to be told about every new snapshot.

Optimistic transitions hand back a ``PendingTransition`` token.  Rolling it
back only has an effect while the optimistic value is still the one in the
cache; once a snapshot or change event has replaced it, the newer write wins.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional

from ridesync.domain.entities import Ride
from ridesync.domain.enums import RideStatus
from ridesync.domain.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RideSnapshot:
    rides: tuple[Ride, ...] = ()
    active_ride: Optional[Ride] = None

    def get(self, ride_id: str) -> Optional[Ride]:
        for ride in self.rides:
            if ride.id == ride_id:
                return ride
        return None

    def statuses(self) -> dict[str, RideStatus]:
        return {ride.id: ride.status for ride in self.rides}


@dataclass(frozen=True)
class PendingTransition:
    """Reconciliation token for an optimistic, not yet confirmed transition."""

    ride: Ride
    previous: RideStatus
    previous_active: Optional[str]
    active_after: Optional[str]


SnapshotListener = Callable[[RideSnapshot], None]


class RideStateStore:
    def __init__(self) -> None:
        self._rides: dict[str, Ride] = {}
        self._active_id: Optional[str] = None
        self._snapshot = RideSnapshot()
        self._listeners: list[SnapshotListener] = []
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task: asyncio.Task | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        while not self._queue.empty():
            _, _, future = self._queue.get_nowait()
            if not future.done():
                future.cancel()

    async def __aenter__(self) -> "RideStateStore":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.stop()

    # ── Reads ─────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> RideSnapshot:
        return self._snapshot

    def get(self, ride_id: str) -> Optional[Ride]:
        return self._snapshot.get(ride_id)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Commands ──────────────────────────────────────────────────────

    async def replace_all(self, rides: Iterable[Ride]) -> None:
        """Replace the whole cache; rides absent from *rides* are dropped."""
        await self._submit(self._apply_replace_all, list(rides))

    async def upsert(self, ride: Ride) -> Ride:
        return await self._submit(self._apply_upsert, ride)

    async def add(self, ride: Ride) -> Ride:
        """Insert *ride* unless already cached; returns the cached ride."""
        return await self._submit(self._apply_add, ride)

    async def transition(
        self, ride_id: str, target: RideStatus, activate: bool
    ) -> PendingTransition:
        """Optimistically move *ride_id* to *target* and set/clear the active ride."""
        return await self._submit(self._apply_transition, ride_id, target, activate)

    async def rollback(self, pending: PendingTransition) -> bool:
        """Undo *pending* unless a newer write already replaced it."""
        return await self._submit(self._apply_rollback, pending)

    # ── Writer ────────────────────────────────────────────────────────

    async def _submit(self, command: Callable[..., Any], *args: Any) -> Any:
        if self._task is None:
            raise RuntimeError("RideStateStore is not running")
        future = asyncio.get_running_loop().create_future()
        await self._queue.put((command, args, future))
        return await future

    async def _run(self) -> None:
        while True:
            command, args, future = await self._queue.get()
            try:
                result = command(*args)
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
                continue
            self._snapshot = RideSnapshot(
                rides=tuple(self._rides.values()),
                active_ride=self._rides.get(self._active_id) if self._active_id else None,
            )
            if not future.done():
                future.set_result(result)
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._snapshot)
            except Exception:
                logger.exception("Ride snapshot listener failed")

    def _apply_replace_all(self, rides: list[Ride]) -> None:
        self._rides = {ride.id: ride for ride in rides}
        if self._active_id not in self._rides:
            self._active_id = None

    def _apply_upsert(self, ride: Ride) -> Ride:
        self._rides[ride.id] = ride
        return ride

    def _apply_add(self, ride: Ride) -> Ride:
        return self._rides.setdefault(ride.id, ride)

    def _apply_transition(
        self, ride_id: str, target: RideStatus, activate: bool
    ) -> PendingTransition:
        current = self._rides.get(ride_id)
        if current is None:
            raise NotFoundError(f"Ride {ride_id} not found")
        updated = current.transition_to(target)
        previous_active = self._active_id
        self._rides[ride_id] = updated
        self._active_id = ride_id if activate else None
        return PendingTransition(
            ride=updated,
            previous=current.status,
            previous_active=previous_active,
            active_after=self._active_id,
        )

    def _apply_rollback(self, pending: PendingTransition) -> bool:
        current = self._rides.get(pending.ride.id)
        if current is not pending.ride:
            return False
        self._rides[current.id] = replace(current, status=pending.previous)
        if self._active_id == pending.active_after:
            self._active_id = pending.previous_active
        return True
