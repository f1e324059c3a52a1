"""Root conftest - shared fixtures for presence tests.

Design Decisions:
    - Real SettingsStore as the config source: it is in-memory and cheap
    - Fakes for everything that touches time, the network or the host bus
"""

import os
from random import Random

import pytest

from dynamic_rpc.infrastructure.settings_store import SettingsStore
from dynamic_rpc.schemas.rpc_config import RPCConfig
from dynamic_rpc.services.rotation_scheduler import RotationScheduler
from tests.fakes import FakeAssetResolver, FakeClock, FakeTaskScheduler, RecordingSink

# Tests never talk to Discord or start the presence on app import
os.environ.setdefault("DYNAMIC_RPC_DISCORD_TOKEN", "test-token")
os.environ.setdefault("DYNAMIC_RPC_AUTOSTART", "false")


@pytest.fixture
def store():
    return SettingsStore(RPCConfig(appName="Test Game"))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def resolver():
    return FakeAssetResolver()


@pytest.fixture
def timers():
    return FakeTaskScheduler()


@pytest.fixture
def clock():
    return FakeClock(1_000)


@pytest.fixture
def scheduler(store, sink, resolver, timers, clock):
    return RotationScheduler(
        store, sink, resolver, timers, clock=clock, rng=Random(1234),
    )
