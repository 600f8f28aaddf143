"""
Concurrency safety tests.

Demonstrates:
1. Two clients racing to accept one ride: the store's compare-and-swap lets
   exactly one win; the loser gets ``ConflictError``.
2. Two accepts from the same client: the local state machine rejects the
   second before it reaches the store.
3. Every subscribed client converges on the server state and the requester
   is alerted once.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from ridesync.domain.entities import Coordinate
from ridesync.domain.enums import RideStatus
from ridesync.domain.errors import ConflictError, InvalidTransitionError
from ridesync.infrastructure.auth import StaticAuthProvider
from ridesync.runtime import RideComponents
from ridesync.workers.notifier import NotificationDispatcher
from tests.fakes import MAYA, OMAR, RecordingAlertSink

CAMPUS = Coordinate(37.7793, -122.4193)


@pytest_asyncio.fixture
async def second_client(store, profiles):
    """Another process subscribed to the same ride store."""
    sink = RecordingAlertSink()
    runtime = RideComponents.assemble(store, profiles, NotificationDispatcher(sink))
    await runtime.start()
    yield runtime
    await runtime.stop()


class TestAcceptRace:
    @pytest.mark.asyncio
    async def test_first_acceptor_wins_across_clients(
        self, components, second_client, coordinator, store, sink
    ):
        ride = await coordinator.request_ride("Main St", "Lincoln High", CAMPUS)
        assert second_client.state.get(ride.id) is not None

        driver_a = components.coordinator_for(StaticAuthProvider(OMAR))
        driver_b = second_client.coordinator_for(StaticAuthProvider(OMAR))
        results = await asyncio.gather(
            driver_a.accept_ride(ride.id),
            driver_b.accept_ride(ride.id),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], ConflictError)

        assert store.records[ride.id]["status"] == "accepted"
        assert store.writes.count(("update", ride.id)) == 1
        for runtime in (components, second_client):
            assert runtime.state.get(ride.id).status is RideStatus.ACCEPTED

        await components.dispatcher.drain()
        assert sink.recipients == [MAYA.email]

    @pytest.mark.asyncio
    async def test_same_client_double_accept(self, components, coordinator, store):
        ride = await coordinator.request_ride("Main St", "Lincoln High", CAMPUS)
        results = await asyncio.gather(
            coordinator.accept_ride(ride.id),
            coordinator.accept_ride(ride.id),
            return_exceptions=True,
        )
        assert sum(isinstance(r, InvalidTransitionError) for r in results) == 1
        assert store.writes.count(("update", ride.id)) == 1
        assert components.state.get(ride.id).status is RideStatus.ACCEPTED


class TestConvergence:
    @pytest.mark.asyncio
    async def test_all_clients_converge(self, components, second_client, coordinator, store):
        ride = await coordinator.request_ride("Main St", "Lincoln High", CAMPUS)
        driver = second_client.coordinator_for(StaticAuthProvider(OMAR))

        await driver.accept_ride(ride.id)
        await driver.start_ride(ride.id)

        expected = {rid: rec["status"] for rid, rec in store.records.items()}
        for runtime in (components, second_client):
            got = {rid: s.value for rid, s in runtime.state.snapshot.statuses().items()}
            assert got == expected
        # Only the accepting client tracks it as its active ride
        assert second_client.state.snapshot.active_ride.id == ride.id
        assert components.state.snapshot.active_ride is None

    @pytest.mark.asyncio
    async def test_requester_alerted_when_other_client_accepts(
        self, components, second_client, coordinator, sink
    ):
        ride = await coordinator.request_ride("Main St", "Lincoln High", CAMPUS)
        await second_client.coordinator_for(StaticAuthProvider(OMAR)).accept_ride(ride.id)

        await components.dispatcher.drain()
        assert sink.recipients == [MAYA.email]
        assert components.dispatcher.last_alert.message == "Your ride has been accepted!"
