"""
Process-wide wiring of the ride core.

``RideComponents`` owns the long-lived pieces (state actor, notification
dispatcher, synchronizer) and starts/stops them in dependency order.
Coordinators are cheap and built per caller identity via ``coordinator_for``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ridesync.config import settings
from ridesync.domain.ports import AuthProvider, ProfileResolver, RideStore
from ridesync.services.coordinator import RideCoordinator
from ridesync.services.state import RideStateStore
from ridesync.services.synchronizer import RideSynchronizer
from ridesync.workers.notifier import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class RideComponents:
    store: RideStore
    profiles: ProfileResolver
    state: RideStateStore
    dispatcher: NotificationDispatcher
    synchronizer: RideSynchronizer

    @classmethod
    def assemble(
        cls,
        store: RideStore,
        profiles: ProfileResolver,
        dispatcher: NotificationDispatcher,
    ) -> "RideComponents":
        state = RideStateStore()
        return cls(
            store=store,
            profiles=profiles,
            state=state,
            dispatcher=dispatcher,
            synchronizer=RideSynchronizer(store, state, dispatcher),
        )

    async def start(self) -> None:
        await self.state.start()
        await self.dispatcher.start()
        await self.synchronizer.start()
        logger.info("Ride runtime started")

    async def stop(self) -> None:
        await self.synchronizer.stop()
        await self.dispatcher.stop()
        await self.state.stop()
        logger.info("Ride runtime stopped")

    def coordinator_for(self, auth: AuthProvider) -> RideCoordinator:
        return RideCoordinator(self.store, self.state, self.profiles, auth)


async def build_components() -> RideComponents:
    """Wire the production collaborators (Redis store + alerts, SQL profiles)."""
    from ridesync.infrastructure.alerts import build_alert_sink
    from ridesync.infrastructure.database import async_session_factory
    from ridesync.infrastructure.profiles import SqlProfileResolver
    from ridesync.infrastructure.redis_client import get_redis
    from ridesync.infrastructure.store import RedisRideStore

    redis = await get_redis()
    return RideComponents.assemble(
        store=RedisRideStore(redis, settings.rides_namespace),
        profiles=SqlProfileResolver(async_session_factory),
        dispatcher=NotificationDispatcher(
            build_alert_sink(settings.alert_sink, redis, settings.alerts_channel_prefix),
            settings.accepted_alert_message,
        ),
    )
