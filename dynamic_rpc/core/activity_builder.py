"""Activity Builder - synchronous assembly of the presence payload.

Invariants:
    - Never performs IO: image keys arrive already resolved to asset ids
    - `type` survives pruning even when it is PLAYING (0)
    - Button labels and button URLs are filtered independently; nothing is invented
    - NOW timestamps come from the caller-supplied anchor, which is never mutated
    - TIME timestamps are recomputed from local midnight on every build

Design Decisions:
    - Build a plain dict, prune it over a static key list, then validate into Activity:
      keeps the falsy-field rule in one place
    - Each section (timestamps, buttons, assets, party) is its own function so it
      can be tested without the rest of the record
"""

from datetime import datetime
from random import Random
from typing import TYPE_CHECKING

from dynamic_rpc.core.domain_types import (
    ACTIVITY_FLAG_INSTANCE,
    DEFAULT_APPLICATION_ID,
    MAX_BUTTONS,
    MS_PER_SECOND,
    ActivityType,
    AssetSlot,
    ImageSettings,
    RotationLaneName,
    TimestampMode,
)
from dynamic_rpc.core.rotation import RotationState, select_line
from dynamic_rpc.schemas.activity import Activity

if TYPE_CHECKING:
    from dynamic_rpc.schemas.rpc_config import RPCConfig

ALWAYS_KEPT_FIELD = "type"
PRUNABLE_FIELDS = (
    "application_id",
    "name",
    "flags",
    "details",
    "state",
    "url",
    "details_url",
    "state_url",
    "timestamps",
    "assets",
    "buttons",
    "metadata",
    "party",
)


# ─── Text ────────────────────────────────────────────────────────

def resolve_texts(
    config: "RPCConfig", rotation: RotationState, rng: Random,
) -> tuple[str | None, str | None]:
    """(details, state) for this build; each lane resolves independently."""
    details = select_line(
        rotation.details, config.lane_settings(RotationLaneName.DETAILS), rng,
    )
    state = select_line(
        rotation.state, config.lane_settings(RotationLaneName.STATE), rng,
    )
    return details, state


# ─── Timestamps ──────────────────────────────────────────────────

def seconds_since_local_midnight(now: int) -> int:
    local = datetime.fromtimestamp(now / MS_PER_SECOND)
    return local.hour * 3600 + local.minute * 60 + local.second


def resolve_timestamps(
    mode: TimestampMode,
    now: int,
    now_anchor: int | None = None,
    start_time: int | None = None,
    end_time: int | None = None,
) -> dict | None:
    """Timestamps object for the given mode, or None when it should be omitted."""
    if mode is TimestampMode.NOW:
        return {"start": now_anchor if now_anchor is not None else now}
    if mode is TimestampMode.TIME:
        return {"start": now - seconds_since_local_midnight(now) * MS_PER_SECOND}
    if mode is TimestampMode.CUSTOM:
        timestamps = {}
        if start_time:
            timestamps["start"] = start_time
        if end_time:
            timestamps["end"] = end_time
        return timestamps or None
    return None


# ─── Buttons ─────────────────────────────────────────────────────

def build_buttons(
    labels: list[str | None], urls: list[str | None],
) -> tuple[list[str], list[str]]:
    """(labels, urls) with empty entries dropped; both empty unless labels[0] is set."""
    if not labels or not labels[0]:
        return [], []
    kept_labels = [label for label in labels[:MAX_BUTTONS] if label]
    kept_urls = [url for url in urls[:MAX_BUTTONS] if url]
    return kept_labels, kept_urls


# ─── Assets ──────────────────────────────────────────────────────

def build_assets(
    images: dict[AssetSlot, ImageSettings], resolved: dict[AssetSlot, str],
) -> dict | None:
    """Merge every resolved slot into a single assets object."""
    assets: dict[str, str | None] = {}
    for slot in AssetSlot:
        if slot not in resolved:
            continue
        image = images.get(slot, ImageSettings())
        assets[f"{slot.value}_image"] = resolved[slot]
        assets[f"{slot.value}_text"] = image.tooltip or None
        assets[f"{slot.value}_url"] = image.url or None
    return assets or None


# ─── Party ───────────────────────────────────────────────────────

def build_party(size: int | None, max_size: int | None) -> dict | None:
    if size and max_size:
        return {"size": [size, max_size]}
    return None


# ─── Pruning ─────────────────────────────────────────────────────

def prune_fields(fields: dict) -> dict:
    """Drop falsy values and empty sequences; the type discriminator is always kept."""
    pruned = {}
    for key, value in fields.items():
        if key == ALWAYS_KEPT_FIELD:
            pruned[key] = value
        elif key in PRUNABLE_FIELDS and not value:
            continue
        else:
            pruned[key] = value
    return pruned


# ─── Assembly ────────────────────────────────────────────────────

def assemble_activity(
    config: "RPCConfig",
    *,
    details: str | None,
    state: str | None,
    now: int,
    now_anchor: int | None = None,
    resolved_assets: dict[AssetSlot, str] | None = None,
) -> Activity:
    """Build the pruned activity record. Caller guarantees config.app_name is set."""
    activity_type = config.type if config.type is not None else ActivityType.PLAYING
    fields: dict = {
        "application_id": config.app_id or DEFAULT_APPLICATION_ID,
        "name": config.app_name,
        "state": state,
        "details": details,
        "type": activity_type,
        "flags": ACTIVITY_FLAG_INSTANCE,
    }

    if activity_type is ActivityType.STREAMING:
        fields["url"] = config.stream_link

    fields["timestamps"] = resolve_timestamps(
        config.timestamp_mode, now, now_anchor, config.start_time, config.end_time,
    )

    if config.details_url:
        fields["details_url"] = config.details_url
    if config.state_url:
        fields["state_url"] = config.state_url

    labels, urls = build_buttons(
        [config.button_one_text, config.button_two_text],
        [config.button_one_url, config.button_two_url],
    )
    fields["buttons"] = labels
    if urls:
        fields["metadata"] = {"button_urls": urls}

    fields["assets"] = build_assets(
        {slot: config.image_settings(slot) for slot in AssetSlot},
        resolved_assets or {},
    )
    fields["party"] = build_party(config.party_size, config.party_max_size)

    return Activity.model_validate(prune_fields(fields))


def image_requests(config: "RPCConfig") -> dict[AssetSlot, str]:
    """Image keys that need resolving, by slot."""
    requests = {}
    for slot in AssetSlot:
        key = config.image_settings(slot).key
        if key:
            requests[slot] = key
    return requests
