"""Event bus for publishing and subscribing to engine events."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from queuecord.domain.shared.datetime_utils import utcnow
from queuecord.domain.shared.messages import LogTemplates
from queuecord.domain.shared.types import NonEmptyStr, UtcDatetimeField

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="DomainEvent")
EventHandler = Callable[[T], Awaitable[None] | None]


class DomainEvent(BaseModel):
    """Base class for all domain events."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: UtcDatetimeField = Field(default_factory=utcnow)


class EventBus:
    """In-memory pub/sub bus scoped to a single queue engine.

    Handlers run one after another in subscription order; a handler registered
    for a base class receives subclass events at its own place in that order.
    A handler may be a plain function or a coroutine function. Exceptions in handlers are logged
    and do not prevent the remaining handlers from running.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[type[DomainEvent], EventHandler[Any]]] = []

    def subscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        self._subscriptions.append((event_type, handler))
        logger.debug(LogTemplates.EVENT_SUBSCRIBED, event_type.__name__)

    def unsubscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        if (event_type, handler) in self._subscriptions:
            self._subscriptions.remove((event_type, handler))
            logger.debug(LogTemplates.EVENT_UNSUBSCRIBED, event_type.__name__)

    def handler_count(self, event_type: type[DomainEvent]) -> int:
        return sum(1 for subscribed, _ in self._subscriptions if subscribed is event_type)

    async def publish(self, event: DomainEvent) -> None:
        event_type = type(event)
        # Built up front so handlers may (un)subscribe while we iterate.
        handlers = [
            handler
            for subscribed, handler in self._subscriptions
            if isinstance(event, subscribed)
        ]

        if not handlers:
            logger.debug(LogTemplates.EVENT_NO_HANDLERS, event_type.__name__)
            return

        logger.debug(LogTemplates.EVENT_PUBLISHING, event_type.__name__, len(handlers))

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(LogTemplates.EVENT_HANDLER_FAILED, event_type.__name__)

    async def publish_all(self, events: list[DomainEvent]) -> None:
        """Publish events in order."""
        for event in events:
            await self.publish(event)

    def clear(self) -> None:
        """Remove all handlers."""
        self._subscriptions.clear()
        logger.debug(LogTemplates.EVENT_HANDLERS_CLEARED)
