"""
Shared test fixtures.

The remote ride store, profile resolver and alert sink are replaced by the
in-memory fakes in ``tests/fakes.py`` so tests run without Redis or
PostgreSQL.  ``components`` is a started runtime playing one client.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from ridesync.infrastructure.auth import StaticAuthProvider
from ridesync.runtime import RideComponents
from ridesync.workers.notifier import NotificationDispatcher
from tests.fakes import (
    MAYA,
    MAYA_PROFILE,
    OMAR,
    OMAR_PROFILE,
    FakeProfileResolver,
    FakeRideStore,
    RecordingAlertSink,
)


@pytest.fixture
def store() -> FakeRideStore:
    return FakeRideStore()


@pytest.fixture
def profiles() -> FakeProfileResolver:
    return FakeProfileResolver({MAYA.email: MAYA_PROFILE, OMAR.email: OMAR_PROFILE})


@pytest.fixture
def sink() -> RecordingAlertSink:
    return RecordingAlertSink()


@pytest_asyncio.fixture
async def components(
    store: FakeRideStore, profiles: FakeProfileResolver, sink: RecordingAlertSink
) -> AsyncGenerator[RideComponents, None]:
    runtime = RideComponents.assemble(store, profiles, NotificationDispatcher(sink))
    await runtime.start()
    yield runtime
    await runtime.stop()


@pytest.fixture
def coordinator(components: RideComponents):
    return components.coordinator_for(StaticAuthProvider(MAYA))
