"""Domain Types - enums and constants shared by the builder and the scheduler.

Invariants:
    - ActivityType and TimestampMode values match the host wire integers
    - RotationMode values match the strings stored by the settings form
    - Exactly two rotation lanes exist: details and state

Design Decisions:
    - IntEnum for wire integers: serializes to the raw number the host expects
    - str Enum for settings values: round-trips through JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


# ─── Enums ───────────────────────────────────────────────────────

class ActivityType(IntEnum):
    """Host activity types. 4 is reserved for custom statuses and never sent."""
    PLAYING = 0
    STREAMING = 1
    LISTENING = 2
    WATCHING = 3
    COMPETING = 5


class TimestampMode(IntEnum):
    """How the elapsed/remaining counter of an activity is derived."""
    NONE = 0
    NOW = 1
    TIME = 2
    CUSTOM = 3


class RotationMode(str, Enum):
    """How a rotating text field picks its next line."""
    DISABLED = "disabled"
    RANDOM = "random"
    SEQUENTIAL = "sequential"


class RotationLaneName(str, Enum):
    """The two independently rotating activity text fields."""
    DETAILS = "details"
    STATE = "state"


class AssetSlot(str, Enum):
    """Image slots of an activity; value is the payload key prefix."""
    LARGE = "large"
    SMALL = "small"


# ─── Constants ───────────────────────────────────────────────────

ACTIVITY_FLAG_INSTANCE = 1 << 0
DEFAULT_APPLICATION_ID = "0"
MAX_BUTTONS = 2
MS_PER_SECOND = 1000


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ImageSettings:
    """One configured image slot: asset key plus optional tooltip and link."""
    key: str | None = None
    tooltip: str | None = None
    url: str | None = None
