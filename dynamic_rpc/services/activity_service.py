"""Activity Service - the async half of a build: resolve images, then assemble.

Invariants:
    - No appName -> None, and the asset resolver is never called
    - Image keys are resolved before any field is assembled
    - Resolver failures propagate unchanged to the caller

Design Decisions:
    - Resolution results collected into a small slot -> asset id map so
      core.activity_builder stays synchronous and testable without mocks
    - Slots resolved one after another (large, then small): at most two calls per build
"""

import logging
from random import Random

from dynamic_rpc.core.activity_builder import (
    assemble_activity,
    image_requests,
    resolve_texts,
)
from dynamic_rpc.core.domain_types import DEFAULT_APPLICATION_ID, AssetSlot
from dynamic_rpc.core.ports import AssetResolver
from dynamic_rpc.core.rotation import RotationState
from dynamic_rpc.schemas.activity import Activity
from dynamic_rpc.schemas.rpc_config import RPCConfig

logger = logging.getLogger(__name__)

_default_rng = Random()


async def resolve_images(
    config: RPCConfig, resolver: AssetResolver,
) -> dict[AssetSlot, str]:
    """Resolve every configured image key to a host asset id."""
    app_id = config.app_id or DEFAULT_APPLICATION_ID
    resolved = {}
    for slot, key in image_requests(config).items():
        resolved[slot] = await resolver.resolve(app_id, key)
    return resolved


async def build_activity(
    config: RPCConfig,
    rotation: RotationState,
    *,
    now: int,
    resolver: AssetResolver,
    now_anchor: int | None = None,
    rng: Random | None = None,
) -> Activity | None:
    """Build the activity for one publish cycle, or None when appName is unset."""
    if not config.app_name:
        logger.debug("No appName configured; skipping activity build")
        return None

    details, state = resolve_texts(config, rotation, rng or _default_rng)
    resolved_assets = await resolve_images(config, resolver)
    return assemble_activity(
        config,
        details=details,
        state=state,
        now=now,
        now_anchor=now_anchor,
        resolved_assets=resolved_assets,
    )
