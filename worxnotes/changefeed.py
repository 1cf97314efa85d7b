"""
In-process change feed for the repair_sheets collection.

The repository publishes one event per committed insert, update or delete.
Subscribers are plain callables invoked synchronously, in publish order.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ChangeType(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A single change; ``new`` is empty for deletes, ``old`` for inserts."""
    event_type: ChangeType
    new: dict[str, Any]
    old: dict[str, Any]

    @property
    def record_id(self) -> Optional[str]:
        return (self.new or self.old).get("id")

    def to_dict(self) -> dict[str, Any]:
        return {"eventType": self.event_type.value, "new": self.new, "old": self.old}


ChangeListener = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``."""

    def __init__(self, feed: "ChangeFeed", listener: ChangeListener):
        self._feed = feed
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self._listener)
            self.active = False


class ChangeFeed:
    def __init__(self, channel: str = "repair_sheets_changes"):
        self.channel = channel
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Subscription:
        self._listeners.append(listener)
        logger.debug("Subscribed to %s (%d listeners)", self.channel, len(self._listeners))
        return Subscription(self, listener)

    def _remove(self, listener: ChangeListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed on %s %s", event.event_type.value, event.record_id)
