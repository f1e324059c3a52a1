"""Presence Routes - lifecycle hooks, status and preview of the published activity.

Invariants:
    - enable/disable map 1:1 onto RotationScheduler.on_enable/on_disable
    - preview never publishes and never moves the Now-Anchor
    - Asset resolution failures surface as 502 via the global error handler

Design Decisions:
    - POST for lifecycle hooks: they publish to the host bus (side effect)
"""

from fastapi import APIRouter, Depends

from dynamic_rpc.api.dependencies import get_runtime
from dynamic_rpc.runtime import PresenceRuntime
from dynamic_rpc.schemas.presence import ActivityEnvelope, LaneStatus, PresenceStatus

router = APIRouter(prefix="/api/v1/presence", tags=["presence"])


@router.get("", response_model=PresenceStatus)
async def presence_status(runtime: PresenceRuntime = Depends(get_runtime)):
    scheduler = runtime.scheduler
    return PresenceStatus(
        enabled=scheduler.is_enabled,
        now_anchor=scheduler.now_anchor,
        lanes=[
            LaneStatus(
                name=lane.name.value, armed=lane.armed,
                index=lane.index, lines=lane.lines,
            )
            for lane in scheduler.rotation
        ],
        last_event=runtime.dispatcher.last_event,
    )


@router.post("/enable", response_model=ActivityEnvelope)
async def enable_presence(runtime: PresenceRuntime = Depends(get_runtime)):
    """Start rotation and publish the current activity."""
    activity = await runtime.scheduler.on_enable()
    return ActivityEnvelope(
        enabled=True, activity=activity.to_payload() if activity else None,
    )


@router.post("/disable", response_model=ActivityEnvelope)
async def disable_presence(runtime: PresenceRuntime = Depends(get_runtime)):
    """Stop rotation and clear the published activity."""
    runtime.scheduler.on_disable()
    return ActivityEnvelope(enabled=False, activity=None)


@router.get("/preview", response_model=ActivityEnvelope)
async def preview_presence(runtime: PresenceRuntime = Depends(get_runtime)):
    """Activity the current settings would produce, without publishing it."""
    activity = await runtime.scheduler.preview()
    return ActivityEnvelope(
        enabled=runtime.scheduler.is_enabled,
        activity=activity.to_payload() if activity else None,
    )
