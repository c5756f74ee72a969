"""Contracts between aggregates that raise events and code that reacts."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol, Type

from shared.domain.events import DomainEvent

EventHandler = Callable[[DomainEvent], None]


class IEventBus(Protocol):
    def subscribe(self, event_class: Type[DomainEvent], handler: EventHandler) -> None: ...

    def publish(self, event: DomainEvent) -> None: ...

    def publish_on_commit(self, events: Iterable[DomainEvent]) -> None: ...
