"""Rotation State - per-lane index bookkeeping for rotating activity text.

Invariants:
    - A pool is the source text split into lines with blank lines discarded
    - lane.index is always a valid index into lane.lines (or 0 when lines is empty)
    - Any change in pool content (count or text) resets the lane index to 0
    - A lane may only be armed when mode != DISABLED, pool has > 1 line, interval > 0

Design Decisions:
    - Pure dataclasses, no timers: the scheduler stores its TimerHandle in
      lane.handle but never calls it from here
    - Randomness injected as random.Random so tests can seed it
"""

from dataclasses import dataclass, field
from random import Random
from typing import Any, Iterator

from dynamic_rpc.core.domain_types import RotationLaneName, RotationMode


@dataclass(frozen=True)
class LaneSettings:
    """The slice of configuration that drives one rotating field."""
    static_text: str | None = None
    source: str | None = None
    mode: RotationMode = RotationMode.DISABLED
    interval_seconds: int | None = None

    @property
    def pool(self) -> list[str]:
        return parse_pool(self.source)

    @property
    def rotating(self) -> bool:
        """Whether the field shows pool lines instead of its static text."""
        return self.mode is not RotationMode.DISABLED and bool(self.pool)


@dataclass
class RotationLane:
    """Mutable state of one rotation lane, owned by the scheduler."""
    name: RotationLaneName
    index: int = 0
    lines: list[str] = field(default_factory=list)
    handle: Any = None  # TimerHandle while armed

    @property
    def armed(self) -> bool:
        return self.handle is not None

    def reset(self, lines: list[str] | None = None) -> None:
        self.lines = list(lines or [])
        self.index = 0


@dataclass
class RotationState:
    """Both rotation lanes. Passed by reference into every build."""
    details: RotationLane = field(
        default_factory=lambda: RotationLane(RotationLaneName.DETAILS),
    )
    state: RotationLane = field(
        default_factory=lambda: RotationLane(RotationLaneName.STATE),
    )

    def lane(self, name: RotationLaneName) -> RotationLane:
        if name is RotationLaneName.DETAILS:
            return self.details
        return self.state

    def __iter__(self) -> Iterator[RotationLane]:
        return iter((self.details, self.state))

    def detached(self) -> "RotationState":
        """Copy indices and pools without timer handles (for previews)."""
        return RotationState(
            details=RotationLane(
                RotationLaneName.DETAILS, self.details.index, list(self.details.lines),
            ),
            state=RotationLane(
                RotationLaneName.STATE, self.state.index, list(self.state.lines),
            ),
        )


# ─── Pool handling ───────────────────────────────────────────────

def parse_pool(source: str | None) -> list[str]:
    """Split a multi-line source into its non-blank lines."""
    if not source:
        return []
    return [line for line in source.splitlines() if line.strip()]


def sync_pool(lane: RotationLane, lines: list[str]) -> bool:
    """Record lines on the lane; reset the index if the content changed.

    Returns True when a reset happened.
    """
    if lane.lines == lines:
        if lane.index >= len(lines):
            lane.index = 0
        return False
    lane.reset(lines)
    return True


def should_arm(settings: LaneSettings) -> bool:
    """Whether a lane's settings warrant a periodic timer."""
    if settings.mode is RotationMode.DISABLED:
        return False
    interval = settings.interval_seconds
    if not isinstance(interval, int) or interval <= 0:
        return False
    return len(settings.pool) > 1


# ─── Index movement ──────────────────────────────────────────────

def advance(lane: RotationLane, mode: RotationMode, rng: Random) -> int:
    """Move the lane to its next index and return it."""
    if not lane.lines:
        lane.index = 0
        return 0
    if mode is RotationMode.RANDOM:
        lane.index = rng.randrange(len(lane.lines))
    else:
        lane.index = (lane.index + 1) % len(lane.lines)
    return lane.index


def select_line(lane: RotationLane, settings: LaneSettings, rng: Random) -> str | None:
    """Text to display for a lane: a pool line when rotating, else the static text.

    Random mode draws a fresh line on every call and records it as the lane index.
    """
    pool = settings.pool
    if settings.mode is RotationMode.DISABLED or not pool:
        return settings.static_text
    sync_pool(lane, pool)
    if settings.mode is RotationMode.RANDOM:
        lane.index = rng.randrange(len(pool))
    return pool[lane.index]
