"""Process-local event bus backed by Django's transaction hooks."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List, Type

import structlog
from django.db import transaction

from shared.domain.bus import EventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus:
    """Dispatch events to handlers registered for their exact class.

    A handler that raises is logged and skipped; the remaining handlers still
    run, since by the time events are published the transaction that raised
    them has already committed.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_class: Type[DomainEvent], handler: EventHandler) -> None:
        if handler not in self._handlers[event_class]:
            self._handlers[event_class].append(handler)

    def on(self, event_class: Type[DomainEvent]) -> Callable[[EventHandler], EventHandler]:
        """Decorator form of :meth:`subscribe`."""

        def register(handler: EventHandler) -> EventHandler:
            self.subscribe(event_class, handler)
            return handler

        return register

    def publish(self, event: DomainEvent) -> None:
        for handler in list(self._handlers.get(type(event), ())):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "event.handler_failed",
                    event_name=event.event_name,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )

    def publish_on_commit(self, events: Iterable[DomainEvent]) -> None:
        """Queue ``events`` for publication once the current transaction commits.

        Nothing is published if it rolls back.  Outside ``atomic`` Django runs
        the callback immediately.
        """
        for event in list(events):
            logger.debug("event.scheduled", event_name=event.event_name)
            transaction.on_commit(lambda event=event: self.publish(event))


event_bus = InMemoryEventBus()
