"""Event bus used by bridges to deliver asynchronous results.

Usage:
    bus = EventBus()

    async def on_captured(event):
        print(event.data["id"])

    subscription = bus.subscribe("attachment.captured", on_captured)
    await bus.publish("attachment.captured", {"id": "/tmp/shot.png"})
    subscription.cancel()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import inspect
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


@dataclass
class Event:
    """Event data container."""

    name: str
    data: dict[str, Any]
    source: str | None = None


class Subscription:
    """Handle returned by ``EventBus.subscribe``; ``cancel`` releases the handler."""

    def __init__(self, bus: EventBus, event_name: str, handler: Callable) -> None:
        self._bus = bus
        self.event_name = event_name
        self.handler = handler
        self.active = True

    def cancel(self) -> None:
        """Detach the handler. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._bus.unsubscribe(self.event_name, self.handler)


class EventBus:
    """Publish/subscribe by event name."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable]] = {}

    def subscribe(self, event_name: str, handler: Callable) -> Subscription:
        """Register ``handler`` (sync or async) for ``event_name``."""
        self._subscribers.setdefault(event_name, []).append(handler)
        LOGGER.debug("Subscribed to event: %s", event_name)
        return Subscription(self, event_name, handler)

    def unsubscribe(self, event_name: str, handler: Callable) -> None:
        handlers = self._subscribers.get(event_name)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        LOGGER.debug("Unsubscribed from event: %s", event_name)

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))

    async def publish(
        self, event_name: str, data: dict[str, Any], source: str | None = None
    ) -> None:
        """Publish an event to all subscribers.

        A failing handler is logged and does not prevent the remaining
        handlers from running.
        """
        event = Event(name=event_name, data=data, source=source)
        handlers = list(self._subscribers.get(event_name, []))

        if not handlers:
            LOGGER.debug("No subscribers for event: %s", event_name)
            return

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:  # noqa: BLE001 - one handler must not break others.
                LOGGER.error(
                    "events.handler.failed",
                    extra={
                        "event": "events.handler.failed",
                        "event_name": event_name,
                        "error": str(exc),
                    },
                )

    def clear(self, event_name: str | None = None) -> None:
        """Drop subscribers for one event, or for all events."""
        if event_name:
            self._subscribers.pop(event_name, None)
        else:
            self._subscribers.clear()
