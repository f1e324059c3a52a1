"""Local Activity Dispatcher - PublishSink that forwards payloads to the host bus.

Invariants:
    - Every publish emits exactly one LOCAL_ACTIVITY_UPDATE event
    - activity=None in the event means "clear presence"
    - The last emitted event is kept for status inspection

Design Decisions:
    - The host bus is any callable taking the event dict: keeps the adapter free of
      host imports and lets tests collect events in a list
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

LOCAL_ACTIVITY_UPDATE = "LOCAL_ACTIVITY_UPDATE"
DEFAULT_SOCKET_ID = "CustomRPC"

DispatchFn = Callable[[dict], None]


class LocalActivityDispatcher:
    """Wraps the host dispatch function as a PublishSink."""

    def __init__(
        self,
        dispatch: DispatchFn | None = None,
        socket_id: str = DEFAULT_SOCKET_ID,
    ):
        self._dispatch = dispatch
        self._socket_id = socket_id
        self.last_event: dict | None = None

    def publish(self, activity: dict | None) -> None:
        event = {
            "type": LOCAL_ACTIVITY_UPDATE,
            "activity": activity,
            "socketId": self._socket_id,
        }
        self.last_event = event
        logger.info(
            "Dispatching activity update",
            extra={"event": LOCAL_ACTIVITY_UPDATE, "cleared": activity is None},
        )
        if self._dispatch is not None:
            self._dispatch(event)
