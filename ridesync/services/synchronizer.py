"""
Ride Synchronizer
=================

Keeps the local ride cache reconciled with the remote store.

* **Snapshot** -- decode every child (skipping bad records) and replace
  the whole cache.  Rides missing from the snapshot are dropped.
* **Change** -- decode the single record and upsert it.  When an existing
  record changes to ``accepted`` the requester is alerted; that is the only
  transition with a side effect.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ridesync.domain.decoder import decode_records, decode_ride
from ridesync.domain.enums import ChangeKind, RideStatus
from ridesync.domain.errors import DecodeError
from ridesync.domain.ports import ChangeEvent, RideStore, Subscription
from ridesync.workers.notifier import NotificationDispatcher

from .state import RideStateStore

logger = logging.getLogger(__name__)


class RideSynchronizer:
    def __init__(
        self,
        store: RideStore,
        state: RideStateStore,
        dispatcher: NotificationDispatcher,
    ):
        self.store = store
        self.state = state
        self.dispatcher = dispatcher
        self._subscription: Optional[Subscription] = None

    async def start(self) -> None:
        """Subscribe; returns once the initial snapshot has been applied."""
        if self._subscription is None:
            self._subscription = await self.store.subscribe(
                self.on_snapshot, self.on_change
            )

    async def stop(self) -> None:
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None

    async def on_snapshot(self, records: dict[str, Any]) -> None:
        rides = decode_records(records)
        await self.state.replace_all(rides)
        logger.debug("Snapshot applied: %d rides (%d records)", len(rides), len(records))

    async def on_change(self, event: ChangeEvent) -> None:
        try:
            ride = decode_ride(event.record, event.ride_id)
        except DecodeError as exc:
            logger.warning("Ignoring ride change: %s", exc)
            return

        await self.state.upsert(ride)
        if event.kind is ChangeKind.CHANGED and ride.status is RideStatus.ACCEPTED:
            self.dispatcher.notify(ride.requested_by)
