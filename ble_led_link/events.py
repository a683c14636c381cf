"""
Link Events

Structured notifications about connection state changes, retries and
writes. Callers register callbacks instead of reading console output.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    STATE_CHANGED = "state_changed"
    DEVICE_FOUND = "device_found"
    ATTEMPT_STARTED = "attempt_started"
    ATTEMPT_FAILED = "attempt_failed"
    RECONNECTING = "reconnecting"
    WRITE_SUCCEEDED = "write_succeeded"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True)
class LinkEvent:
    """A single observable event on a device link."""
    type: EventType
    address: str
    state: Any = None              # ConnectionState for STATE_CHANGED
    attempt: Optional[int] = None
    payload: Optional[bytes] = None
    rssi: Optional[int] = None
    error: Optional[str] = None


EventCallback = Callable[[LinkEvent], None]


class EventBus:
    """Fan out LinkEvents to registered callbacks."""

    def __init__(self):
        self._callbacks: List[EventCallback] = []

    def add_callback(self, callback: EventCallback) -> None:
        """Add a callback for link events."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: EventCallback) -> None:
        """Remove a link event callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, event: LinkEvent) -> None:
        logger.debug(f"Event: {event}")
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event callback error: {e}")
