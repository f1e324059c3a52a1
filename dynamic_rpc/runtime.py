"""Presence Runtime - wires the scheduler to its host adapters.

Invariants:
    - Exactly one RotationScheduler per runtime, created once per process
    - The scheduler watches the settings store from the moment it is built

Design Decisions:
    - Plain dataclass container stored on app.state: routes read it through
      api.dependencies, tests replace it with one built from fakes
"""

from dataclasses import dataclass

from dynamic_rpc.config import Settings
from dynamic_rpc.core.ports import AssetResolver
from dynamic_rpc.infrastructure.activity_dispatcher import DispatchFn, LocalActivityDispatcher
from dynamic_rpc.infrastructure.discord_assets import DiscordAssetResolver
from dynamic_rpc.infrastructure.settings_store import SettingsStore
from dynamic_rpc.infrastructure.task_scheduler import AsyncioTaskScheduler
from dynamic_rpc.services.rotation_scheduler import RotationScheduler


@dataclass
class PresenceRuntime:
    store: SettingsStore
    dispatcher: LocalActivityDispatcher
    resolver: AssetResolver
    scheduler: RotationScheduler

    async def aclose(self) -> None:
        await self.scheduler.close()
        aclose = getattr(self.resolver, "aclose", None)
        if aclose is not None:
            await aclose()


def build_runtime(settings: Settings, dispatch: DispatchFn | None = None) -> PresenceRuntime:
    """Create store, adapters and scheduler from process settings."""
    if settings.settings_file:
        store = SettingsStore.from_file(settings.settings_file)
    else:
        store = SettingsStore()
    dispatcher = LocalActivityDispatcher(dispatch, socket_id=settings.socket_id)
    resolver = DiscordAssetResolver(
        base_url=settings.discord_api_base,
        token=settings.discord_token,
        timeout_seconds=settings.asset_timeout_seconds,
    )
    scheduler = RotationScheduler(store, dispatcher, resolver, AsyncioTaskScheduler())
    scheduler.watch_config()
    return PresenceRuntime(store, dispatcher, resolver, scheduler)
