"""RPC Configuration - the user-editable presence settings, validated at the boundary.

Invariants:
    - Every field is optional; an absent appName means "no activity"
    - Input accepts both the settings-store camelCase keys and snake_case names
    - Rotation intervals are never rejected: non-positive values just disable the timer
    - A snapshot is frozen; edits produce a new snapshot via merged()

Design Decisions:
    - Explicit aliases over an alias generator: the store keys are irregular (appID, detailsURL)
    - Legacy default: a pool given without a rotation mode rotates randomly, so
      settings saved before rotation modes existed keep rotating
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dynamic_rpc.core.domain_types import (
    ActivityType,
    AssetSlot,
    ImageSettings,
    RotationLaneName,
    RotationMode,
    TimestampMode,
)
from dynamic_rpc.core.rotation import LaneSettings

_LANE_KEYS = {
    RotationLaneName.DETAILS: ("detailsRandomLines", "details_random_lines",
                               "detailsRotationMode", "details_rotation_mode"),
    RotationLaneName.STATE: ("stateRandomLines", "state_random_lines",
                             "stateRotationMode", "state_rotation_mode"),
}


class RPCConfig(BaseModel):
    """Snapshot of the presence settings store."""

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, extra="ignore",
    )

    app_id: str | None = Field(None, alias="appID")
    app_name: str | None = Field(None, alias="appName")

    details: str | None = None
    details_url: str | None = Field(None, alias="detailsURL")
    details_random_lines: str | None = Field(None, alias="detailsRandomLines")
    details_rotation_mode: RotationMode = Field(
        RotationMode.DISABLED, alias="detailsRotationMode",
    )
    details_rotation_interval: int | None = Field(None, alias="detailsRotationInterval")

    state: str | None = None
    state_url: str | None = Field(None, alias="stateURL")
    state_random_lines: str | None = Field(None, alias="stateRandomLines")
    state_rotation_mode: RotationMode = Field(
        RotationMode.DISABLED, alias="stateRotationMode",
    )
    state_rotation_interval: int | None = Field(None, alias="stateRotationInterval")

    type: ActivityType | None = None
    stream_link: str | None = Field(None, alias="streamLink")

    timestamp_mode: TimestampMode = Field(TimestampMode.NONE, alias="timestampMode")
    start_time: int | None = Field(None, alias="startTime")
    end_time: int | None = Field(None, alias="endTime")

    image_big: str | None = Field(None, alias="imageBig")
    image_big_url: str | None = Field(None, alias="imageBigURL")
    image_big_tooltip: str | None = Field(None, alias="imageBigTooltip")
    image_small: str | None = Field(None, alias="imageSmall")
    image_small_url: str | None = Field(None, alias="imageSmallURL")
    image_small_tooltip: str | None = Field(None, alias="imageSmallTooltip")

    button_one_text: str | None = Field(None, alias="buttonOneText")
    button_one_url: str | None = Field(None, alias="buttonOneURL")
    button_two_text: str | None = Field(None, alias="buttonTwoText")
    button_two_url: str | None = Field(None, alias="buttonTwoURL")

    party_size: int | None = Field(None, alias="partySize")
    party_max_size: int | None = Field(None, alias="partyMaxSize")

    @model_validator(mode="before")
    @classmethod
    def default_legacy_rotation_mode(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        patched = dict(data)
        for lines_alias, lines_name, mode_alias, mode_name in _LANE_KEYS.values():
            lines = patched.get(lines_alias, patched.get(lines_name))
            if lines and mode_alias not in patched and mode_name not in patched:
                patched[mode_alias] = RotationMode.RANDOM
        return patched

    # --- Derived views ----------------------------------------------------------

    def lane_settings(self, lane: RotationLaneName) -> LaneSettings:
        """Rotation-relevant settings of one lane."""
        if lane is RotationLaneName.DETAILS:
            return LaneSettings(
                static_text=self.details,
                source=self.details_random_lines,
                mode=self.details_rotation_mode,
                interval_seconds=self.details_rotation_interval,
            )
        return LaneSettings(
            static_text=self.state,
            source=self.state_random_lines,
            mode=self.state_rotation_mode,
            interval_seconds=self.state_rotation_interval,
        )

    def image_settings(self, slot: AssetSlot) -> ImageSettings:
        if slot is AssetSlot.LARGE:
            return ImageSettings(
                self.image_big, self.image_big_tooltip, self.image_big_url,
            )
        return ImageSettings(
            self.image_small, self.image_small_tooltip, self.image_small_url,
        )

    def merged(self, patch: dict[str, Any]) -> "RPCConfig":
        """New snapshot with patch keys (alias or field name) applied on top."""
        current = self.model_dump(by_alias=True, exclude_unset=True)
        for key, value in patch.items():
            current[self._alias_for(key)] = value
        return RPCConfig.model_validate(current)

    @classmethod
    def _alias_for(cls, key: str) -> str:
        info = cls.model_fields.get(key)
        if info is not None and info.alias:
            return info.alias
        return key
