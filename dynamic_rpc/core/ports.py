"""Boundary Protocols - contracts between the presence core and its host.

Invariants:
    - Core NEVER imports from infrastructure/ - dependency arrows point inward only
    - Every host collaborator (dispatch bus, asset lookup, settings, timers) is a Protocol
    - Implementations are provided by the shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - AssetResolver is async because the host performs IO; PublishSink is a
      synchronous one-way notification, matching the host dispatch bus
    - TaskScheduler returns a cancellable handle so tests can drive virtual time
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from dynamic_rpc.schemas.rpc_config import RPCConfig

TickCallback = Callable[[], Awaitable[None]]
ConfigListener = Callable[["RPCConfig"], None]


class PublishSink(Protocol):
    """One-way channel receiving an activity payload, or None to clear presence."""
    def publish(self, activity: dict | None) -> None: ...


class AssetResolver(Protocol):
    """Turns a user-supplied image key into an opaque host asset id."""
    async def resolve(self, app_id: str, key: str) -> str: ...


class ConfigSource(Protocol):
    """Live, observable settings store."""
    def snapshot(self) -> "RPCConfig": ...
    def subscribe(self, listener: ConfigListener) -> Callable[[], None]: ...


class TimerHandle(Protocol):
    """Handle for one armed periodic timer."""
    @property
    def cancelled(self) -> bool: ...
    def cancel(self) -> None: ...


class TaskScheduler(Protocol):
    """Arms periodic callbacks."""
    def call_every(self, interval_seconds: float, callback: TickCallback) -> TimerHandle: ...
