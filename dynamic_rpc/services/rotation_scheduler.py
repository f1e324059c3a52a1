"""Rotation Scheduler - owns rotation lanes, their timers and the Now-Anchor.

Invariants:
    - At most one armed timer per lane: start() tears every lane down before re-arming
    - A lane is armed only when mode != DISABLED, pool has > 1 line and interval > 0
    - Arming records the pool and resets the lane index to 0
    - The Now-Anchor is captured when NOW mode becomes active and held until the
      scheduler stops or the timestamp mode leaves NOW
    - start() (and so on_enable) marks the scheduler active; ticks publish while active
    - stop() is idempotent: only the first call after start() publishes None
    - Nothing is published while the scheduler is stopped

Design Decisions:
    - Lanes and anchor are fields of one scheduler instance, passed by reference
      into build_activity, so their lifecycle is testable without a host singleton
    - Timers come from an injected TaskScheduler; tests substitute virtual time
    - Overlapping publish cycles are not coalesced: the last sink write wins
"""

import asyncio
import logging
import time
from collections.abc import Callable
from functools import partial
from random import Random

from dynamic_rpc.core.domain_types import RotationLaneName, TimestampMode
from dynamic_rpc.core.ports import AssetResolver, ConfigSource, PublishSink, TaskScheduler
from dynamic_rpc.core.rotation import RotationLane, RotationState, advance, should_arm
from dynamic_rpc.schemas.activity import Activity
from dynamic_rpc.schemas.rpc_config import RPCConfig
from dynamic_rpc.services.activity_service import build_activity

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class RotationScheduler:
    """Drives periodic re-publication of the presence activity."""

    def __init__(
        self,
        config_source: ConfigSource,
        sink: PublishSink,
        resolver: AssetResolver,
        task_scheduler: TaskScheduler,
        *,
        clock: Clock = epoch_millis,
        rng: Random | None = None,
    ):
        self._config_source = config_source
        self._sink = sink
        self._resolver = resolver
        self._task_scheduler = task_scheduler
        self._clock = clock
        self._rng = rng or Random()
        self.rotation = RotationState()
        self._now_anchor: int | None = None
        self._enabled = False
        self._unsubscribe: Callable[[], None] | None = None
        self._pending: set[asyncio.Task] = set()

    # --- Introspection ----------------------------------------------------------

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def now_anchor(self) -> int | None:
        return self._now_anchor

    def lane(self, name: RotationLaneName) -> RotationLane:
        return self.rotation.lane(name)

    # --- Timers -----------------------------------------------------------------

    def start(self) -> None:
        """Mark the scheduler active and (re)arm every lane that asks for rotation."""
        self._disarm_all()
        self._enabled = True
        config = self._config_source.snapshot()
        for lane in self.rotation:
            settings = config.lane_settings(lane.name)
            if not should_arm(settings):
                continue
            lane.reset(settings.pool)
            lane.handle = self._task_scheduler.call_every(
                settings.interval_seconds, partial(self._on_tick, lane.name),
            )
            logger.info(
                "Rotation lane armed",
                extra={"lane": lane.name.value, "interval_seconds": settings.interval_seconds},
            )

    def stop(self) -> None:
        """Disarm every lane, drop the Now-Anchor and clear presence once."""
        self._disarm_all()
        self._now_anchor = None
        if not self._enabled:
            return
        self._enabled = False
        self._sink.publish(None)
        logger.info("Presence cleared")

    def _disarm_all(self) -> None:
        for lane in self.rotation:
            if lane.handle is None:
                continue
            lane.handle.cancel()
            lane.handle = None
            logger.info("Rotation lane disarmed", extra={"lane": lane.name.value})

    async def _on_tick(self, name: RotationLaneName) -> None:
        lane = self.rotation.lane(name)
        if not lane.armed:
            return
        mode = self._config_source.snapshot().lane_settings(name).mode
        index = advance(lane, mode, self._rng)
        logger.debug("Rotation tick", extra={"lane": name.value, "index": index})
        await self.publish_cycle()

    # --- Publishing -------------------------------------------------------------

    async def publish_cycle(self) -> Activity | None:
        """Build from the current snapshot and send the result to the sink."""
        config = self._config_source.snapshot()
        if self._enabled:
            self._reconcile_anchor(config)
        activity = await build_activity(
            config,
            self.rotation,
            now=self._clock(),
            resolver=self._resolver,
            now_anchor=self._now_anchor,
            rng=self._rng,
        )
        if not self._enabled:
            logger.debug("Scheduler stopped during build; dropping activity")
            return activity
        self._sink.publish(activity.to_payload() if activity else None)
        return activity

    async def preview(self) -> Activity | None:
        """Activity that would be published now, without touching scheduler state."""
        config = self._config_source.snapshot()
        anchor = self._now_anchor
        if anchor is None and config.timestamp_mode is TimestampMode.NOW:
            anchor = self._clock()
        return await build_activity(
            config,
            self.rotation.detached(),
            now=self._clock(),
            resolver=self._resolver,
            now_anchor=anchor,
            rng=self._rng,
        )

    def _reconcile_anchor(self, config: RPCConfig) -> None:
        if config.timestamp_mode is not TimestampMode.NOW:
            self._now_anchor = None
        elif self._now_anchor is None:
            self._now_anchor = self._clock()

    # --- Lifecycle hooks --------------------------------------------------------

    async def on_enable(self) -> Activity | None:
        """Capture the anchor, arm rotation and publish immediately."""
        self._enabled = True
        self._reconcile_anchor(self._config_source.snapshot())
        self.start()
        return await self.publish_cycle()

    def on_disable(self) -> None:
        self.stop()

    async def on_config_change(self, config: RPCConfig | None = None) -> Activity | None:
        """Re-derive timers and anchor after a settings edit."""
        if not self._enabled:
            return None
        self._reconcile_anchor(config or self._config_source.snapshot())
        self.start()
        return await self.publish_cycle()

    # --- Config source wiring ---------------------------------------------------

    def watch_config(self) -> None:
        """Subscribe to the config source; each change schedules on_config_change."""
        if self._unsubscribe is None:
            self._unsubscribe = self._config_source.subscribe(self._handle_config_change)

    def _handle_config_change(self, config: RPCConfig) -> None:
        task = asyncio.get_running_loop().create_task(self.on_config_change(config))
        self._pending.add(task)
        task.add_done_callback(self._finish_pending)

    def _finish_pending(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Config change publish failed: %s", exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def wait_idle(self) -> None:
        """Wait for publish cycles started by config changes to finish."""
        while self._pending:
            await asyncio.wait(set(self._pending))

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.stop()
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*self._pending, return_exceptions=True)
