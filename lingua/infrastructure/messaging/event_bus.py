"""In-memory async event bus for domain events.

Events are delivered to subscribers inside the running process only; nothing
is persisted. A handler subscribed to a base event class also receives every
subclass of it, so subscribing to ``DomainEvent`` observes all traffic.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Any]


class DomainEvent:
    """Base class for all domain events.

    Not a dataclass: subclasses are dataclasses with required fields and call
    ``super().__init__()`` from ``__post_init__``.
    """

    def __init__(self, event_id: str = "", occurred_at: datetime | None = None):
        self.event_id = event_id or str(uuid4())
        self.occurred_at = occurred_at or datetime.now(UTC)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(event_id={self.event_id})"

    @property
    def event_name(self) -> str:
        """Return the name of this event type."""
        return self.__class__.__name__


class EventBus:
    """Async publish/subscribe hub with per-handler error isolation."""

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = {}

    def _handlers_for(self, event_type: type[DomainEvent]) -> list[EventHandler]:
        handlers: list[EventHandler] = []
        for klass in event_type.__mro__:
            handlers.extend(self._handlers.get(klass, []))
        return handlers

    async def publish(self, event: DomainEvent) -> int:
        """Deliver ``event`` to every matching handler concurrently.

        Args:
            event: Domain event to publish

        Returns:
            Number of handlers the event was delivered to
        """
        handlers = self._handlers_for(type(event))

        if not handlers:
            logger.debug(f"No handlers registered for {event.event_name}")
            return 0

        logger.debug(f"Publishing {event.event_name} to {len(handlers)} handlers")
        await asyncio.gather(*[self._handle_event(h, event) for h in handlers])
        return len(handlers)

    async def _handle_event(self, handler: EventHandler, event: DomainEvent) -> None:
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            handler_name = getattr(handler, "__name__", repr(handler))
            logger.error(
                f"Event handler {handler_name} failed for {event.event_name}: {e}"
            )

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register a sync or async handler for ``event_type`` and its subclasses."""
        self._handlers.setdefault(event_type, []).append(handler)
        handler_name = getattr(handler, "__name__", repr(handler))
        logger.debug(f"Subscribed {handler_name} to {event_type.__name__}")

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandler
    ) -> None:
        """Remove a previously registered handler; unknown handlers are ignored."""
        handler_name = getattr(handler, "__name__", repr(handler))
        try:
            self._handlers.get(event_type, []).remove(handler)
        except ValueError:
            logger.warning(
                f"Handler {handler_name} not found for {event_type.__name__}"
            )
            return
        logger.debug(f"Unsubscribed {handler_name} from {event_type.__name__}")

    def get_handler_count(self, event_type: type[DomainEvent]) -> int:
        """Number of handlers registered directly for ``event_type``."""
        return len(self._handlers.get(event_type, []))

    def clear_subscriptions(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()
