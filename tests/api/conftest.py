"""API test fixtures - FastAPI app with a runtime built from fakes.

Design Decisions:
    - Runtime injected on app.state before requests: ASGITransport does not run
      the lifespan, and the lifespan leaves an injected runtime alone anyway
"""

from random import Random

import pytest
from httpx import ASGITransport, AsyncClient

from dynamic_rpc.infrastructure.activity_dispatcher import LocalActivityDispatcher
from dynamic_rpc.main import create_app
from dynamic_rpc.runtime import PresenceRuntime
from dynamic_rpc.services.rotation_scheduler import RotationScheduler


@pytest.fixture
def host_events():
    return []


@pytest.fixture
def runtime(store, resolver, timers, clock, host_events):
    dispatcher = LocalActivityDispatcher(host_events.append)
    scheduler = RotationScheduler(
        store, dispatcher, resolver, timers, clock=clock, rng=Random(5),
    )
    scheduler.watch_config()
    return PresenceRuntime(store, dispatcher, resolver, scheduler)


@pytest.fixture
async def client(runtime):
    app = create_app()
    app.state.runtime = runtime
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    await runtime.scheduler.close()
