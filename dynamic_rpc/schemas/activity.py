"""Activity Record - the presence payload handed to the host dispatch bus.

Invariants:
    - An Activity is frozen: every publish cycle builds a new one
    - to_payload() omits absent keys; `type` is always present
    - party.size is exactly [size, max]

Design Decisions:
    - Typed optional-field record instead of a free-form dict: the builder prunes a
      plain dict first, then validates it into this shape
"""

from pydantic import BaseModel, ConfigDict, Field

from dynamic_rpc.core.domain_types import ActivityType


class ActivityTimestamps(BaseModel):
    """Epoch-millisecond bounds of the elapsed/remaining counter."""
    model_config = ConfigDict(frozen=True)

    start: int | None = None
    end: int | None = None


class ActivityAssets(BaseModel):
    model_config = ConfigDict(frozen=True)

    large_image: str | None = None
    large_text: str | None = None
    large_url: str | None = None
    small_image: str | None = None
    small_text: str | None = None
    small_url: str | None = None


class ActivityMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    button_urls: list[str] = Field(default_factory=list)


class ActivityParty(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: list[int] = Field(min_length=2, max_length=2)


class Activity(BaseModel):
    """Rich presence activity as understood by the host."""

    model_config = ConfigDict(frozen=True)

    type: ActivityType = ActivityType.PLAYING
    application_id: str | None = None
    name: str | None = None
    flags: int | None = None
    details: str | None = None
    state: str | None = None
    url: str | None = None
    details_url: str | None = None
    state_url: str | None = None
    timestamps: ActivityTimestamps | None = None
    assets: ActivityAssets | None = None
    buttons: list[str] | None = None
    metadata: ActivityMetadata | None = None
    party: ActivityParty | None = None

    def to_payload(self) -> dict:
        """Host wire dict with absent keys left out."""
        return self.model_dump(mode="json", exclude_none=True)
