"""Settings Routes - read and edit the presence configuration.

Invariants:
    - PATCH merges keys into the store; the scheduler re-derives timers via its subscription
    - Keys are accepted in settings-store (camelCase) or snake_case spelling
    - Responses always use the settings-store spelling
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from dynamic_rpc.api.dependencies import get_runtime
from dynamic_rpc.runtime import PresenceRuntime
from dynamic_rpc.schemas.rpc_config import RPCConfig

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


def _dump(config: RPCConfig) -> dict[str, Any]:
    return config.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("")
async def read_settings(runtime: PresenceRuntime = Depends(get_runtime)):
    return _dump(runtime.store.snapshot())


@router.patch("")
async def update_settings(
    patch: dict[str, Any] = Body(...),
    runtime: PresenceRuntime = Depends(get_runtime),
):
    """Apply a partial settings update and wait for the resulting publish."""
    config = runtime.store.update(patch)
    await runtime.scheduler.wait_idle()
    return _dump(config)
