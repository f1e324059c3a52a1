"""Settings Store - in-memory, observable source of RPCConfig snapshots.

Invariants:
    - snapshot() always returns a validated, frozen RPCConfig
    - update() either applies the whole patch or raises ConfigurationError and changes nothing
    - Listeners are notified once per effective change, never for a no-op patch

Design Decisions:
    - Plain listener list over an event library: two subscribers at most (scheduler, API)
    - Optional JSON seed file read once at startup; edits are not written back
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dynamic_rpc.core.errors import ConfigurationError
from dynamic_rpc.core.ports import ConfigListener
from dynamic_rpc.schemas.rpc_config import RPCConfig

logger = logging.getLogger(__name__)


def _configuration_error(exc: ValidationError) -> ConfigurationError:
    first = exc.errors()[0]
    field = ".".join(str(loc) for loc in first["loc"]) or None
    return ConfigurationError(f"Invalid setting {field}: {first['msg']}", field=field)


class SettingsStore:
    """ConfigSource implementation holding the current presence settings."""

    def __init__(self, initial: RPCConfig | None = None):
        self._config = initial or RPCConfig()
        self._listeners: list[ConfigListener] = []

    @classmethod
    def from_file(cls, path: str | Path) -> "SettingsStore":
        """Seed the store from a JSON object of settings-store keys."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a JSON object")
        try:
            config = RPCConfig.model_validate(data)
        except ValidationError as e:
            raise _configuration_error(e) from e
        logger.info("Loaded presence settings from %s", path)
        return cls(config)

    def snapshot(self) -> RPCConfig:
        return self._config

    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, patch: dict[str, Any]) -> RPCConfig:
        """Merge patch keys into the current settings and notify on change."""
        try:
            updated = self._config.merged(patch)
        except ValidationError as e:
            raise _configuration_error(e) from e
        if updated == self._config:
            return updated
        self._config = updated
        logger.info("Presence settings updated", extra={"event": "settings_updated"})
        for listener in list(self._listeners):
            listener(updated)
        return updated
