"""Rotation Scheduler - tests for arming, ticking, anchoring and teardown.

Invariants:
    - One timer per lane, never duplicated by re-entrant start()
    - Ticks advance only their own lane and publish once each
    - Now-Anchor survives rebuilds, is cleared on stop and when leaving NOW
    - stop() publishes a single None no matter how often it is called

Design Decisions:
    - FakeTaskScheduler drives virtual time; no test sleeps
"""

import pytest

from dynamic_rpc.core.domain_types import RotationLaneName
from dynamic_rpc.core.errors import AssetResolutionError


def _rotate_state(store, lines, mode="sequential", interval=5):
    store.update({
        "stateRandomLines": "\n".join(lines),
        "stateRotationMode": mode,
        "stateRotationInterval": interval,
    })


# -- Enable / arming -----------------------------------------------------------

async def test_on_enable_publishes_once(scheduler, sink):
    await scheduler.on_enable()
    assert len(sink.published) == 1
    assert sink.last["name"] == "Test Game"
    assert scheduler.is_enabled


async def test_start_arms_only_lanes_that_ask_for_it(scheduler, store, timers):
    store.update({
        "detailsRandomLines": "d1\nd2\nd3",
        "detailsRotationMode": "sequential",
        "detailsRotationInterval": 10,
        "stateRandomLines": "only one",
        "stateRotationMode": "random",
        "stateRotationInterval": 5,
    })
    scheduler.start()
    assert scheduler.lane(RotationLaneName.DETAILS).armed
    assert not scheduler.lane(RotationLaneName.STATE).armed
    assert [h.interval_seconds for h in timers.active] == [10]


async def test_non_positive_interval_leaves_lane_idle(scheduler, store, timers):
    _rotate_state(store, ["a", "b"], interval=0)
    scheduler.start()
    assert not scheduler.lane(RotationLaneName.STATE).armed
    assert timers.active == []


async def test_arming_records_pool_and_resets_index(scheduler, store):
    lane = scheduler.lane(RotationLaneName.STATE)
    lane.index = 7
    _rotate_state(store, ["a", "", "b"])
    scheduler.start()
    assert lane.lines == ["a", "b"]
    assert lane.index == 0


async def test_reentrant_start_never_duplicates_timers(scheduler, store, timers):
    _rotate_state(store, ["a", "b"])
    scheduler.start()
    first = scheduler.lane(RotationLaneName.STATE).handle
    scheduler.start()
    scheduler.start()
    assert first.cancelled
    assert len(timers.active) == 1


# -- Ticks ---------------------------------------------------------------------

async def test_sequential_rotation_visits_in_order(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b", "c"])
    await scheduler.on_enable()
    for _ in range(5):
        await timers.advance(5)
    assert [p["state"] for p in sink.published] == ["a", "b", "c", "a", "b", "c"]


async def test_random_rotation_stays_in_pool(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b", "c"], mode="random", interval=1)
    await scheduler.on_enable()
    await timers.advance(1000)
    assert len(sink.published) == 1001
    assert {p["state"] for p in sink.published} <= {"a", "b", "c"}


async def test_lanes_tick_independently(scheduler, store, sink, timers):
    store.update({
        "detailsRandomLines": "d1\nd2\nd3\nd4",
        "detailsRotationMode": "sequential",
        "detailsRotationInterval": 2,
        "stateRandomLines": "s1\ns2\ns3",
        "stateRotationMode": "sequential",
        "stateRotationInterval": 3,
    })
    await scheduler.on_enable()
    await timers.advance(6)
    # details ticks at 2, 4, 6; state at 3, 6
    assert len(sink.published) == 6
    assert scheduler.lane(RotationLaneName.DETAILS).index == 3
    assert scheduler.lane(RotationLaneName.STATE).index == 2
    assert sink.last["details"] == "d4"
    assert sink.last["state"] == "s3"


async def test_pool_change_mid_run_resets_to_first_line(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b", "c"])
    await scheduler.on_enable()
    await timers.advance(10)
    assert scheduler.lane(RotationLaneName.STATE).index == 2

    # Edit without notifying the scheduler: the build must still cope
    store.update({"stateRandomLines": "x\ny"})
    await scheduler.publish_cycle()
    assert sink.last["state"] == "x"
    assert scheduler.lane(RotationLaneName.STATE).index == 0


async def test_config_change_disarms_lane_no_longer_rotating(scheduler, store, timers):
    _rotate_state(store, ["a", "b"])
    await scheduler.on_enable()
    assert len(timers.active) == 1
    store.update({"stateRotationMode": "disabled"})
    await scheduler.on_config_change()
    assert not scheduler.lane(RotationLaneName.STATE).armed
    assert timers.active == []


# -- Now-Anchor ----------------------------------------------------------------

async def test_now_anchor_stable_across_rebuilds(scheduler, store, sink, clock):
    store.update({"timestampMode": 1})
    clock.now = 1_000
    await scheduler.on_enable()
    clock.now = 5_000
    await scheduler.publish_cycle()
    store.update({"details": "unrelated edit"})
    await scheduler.on_config_change()
    assert [p["timestamps"]["start"] for p in sink.published] == [1_000, 1_000, 1_000]
    assert scheduler.now_anchor == 1_000


async def test_now_anchor_cleared_when_leaving_now_mode(scheduler, store, sink, clock):
    store.update({"timestampMode": 1})
    clock.now = 1_000
    await scheduler.on_enable()

    store.update({"timestampMode": 0})
    await scheduler.on_config_change()
    assert scheduler.now_anchor is None
    assert "timestamps" not in sink.last

    clock.now = 9_000
    store.update({"timestampMode": 1})
    await scheduler.on_config_change()
    assert scheduler.now_anchor == 9_000
    assert sink.last["timestamps"] == {"start": 9_000}


async def test_stop_clears_now_anchor(scheduler, store):
    store.update({"timestampMode": 1})
    await scheduler.on_enable()
    assert scheduler.now_anchor is not None
    scheduler.stop()
    assert scheduler.now_anchor is None


# -- Stop ----------------------------------------------------------------------

async def test_stop_twice_publishes_single_null(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b"])
    await scheduler.on_enable()
    scheduler.stop()
    scheduler.stop()
    assert sink.published.count(None) == 1
    assert sink.last is None
    assert timers.active == []
    assert not scheduler.is_enabled


async def test_stop_after_plain_start_publishes_single_null(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b"])
    scheduler.start()
    scheduler.stop()
    scheduler.stop()
    assert sink.published == [None]
    assert timers.active == []
    assert not scheduler.is_enabled


async def test_no_ticks_after_stop(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b"])
    await scheduler.on_enable()
    scheduler.on_disable()
    await timers.advance(60)
    assert len(sink.published) == 2


async def test_config_change_while_disabled_is_ignored(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b"])
    assert await scheduler.on_config_change() is None
    assert sink.published == []
    assert timers.active == []


async def test_ticks_after_plain_start_publish(scheduler, store, sink, timers):
    _rotate_state(store, ["a", "b", "c"])
    scheduler.start()
    assert scheduler.is_enabled
    await timers.advance(10)
    assert [p["state"] for p in sink.published] == ["b", "c"]


# -- Config source, preview and failures ---------------------------------------

async def test_watch_config_republishes_on_change(scheduler, store, sink):
    scheduler.watch_config()
    await scheduler.on_enable()
    store.update({"details": "fresh"})
    await scheduler.wait_idle()
    assert sink.last["details"] == "fresh"
    await scheduler.close()
    assert sink.last is None


async def test_preview_does_not_publish_or_anchor(scheduler, store, sink, clock):
    store.update({"timestampMode": 1, "state": "previewing"})
    clock.now = 3_000
    activity = await scheduler.preview()
    assert activity.state == "previewing"
    assert activity.timestamps.start == 3_000
    assert sink.published == []
    assert scheduler.now_anchor is None


async def test_missing_app_name_publishes_null(scheduler, store, sink):
    store.update({"appName": None})
    assert await scheduler.on_enable() is None
    assert sink.published == [None]


async def test_resolver_failure_propagates_and_skips_publish(scheduler, store, sink, resolver):
    await scheduler.on_enable()
    resolver.error = AssetResolutionError("down", "0", "big")
    store.update({"imageBig": "big"})
    with pytest.raises(AssetResolutionError):
        await scheduler.publish_cycle()
    assert len(sink.published) == 1
