"""Domain event base class and the aggregate-side collector."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Something that happened to an aggregate; ``event_name`` is the class name."""

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=_utcnow)
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", type(self).__name__)


class DomainEventMixin:
    """Lets a model queue events until the service that saved it publishes them."""

    @property
    def _pending_events(self) -> List[DomainEvent]:
        # model instances are built by the ORM without calling our __init__
        try:
            return self.__dict__["_domain_events"]
        except KeyError:
            return self.__dict__.setdefault("_domain_events", [])

    @property
    def domain_events(self) -> List[DomainEvent]:
        return list(self._pending_events)

    def add_domain_event(self, event: DomainEvent) -> None:
        self._pending_events.append(event)

    def clear_domain_events(self) -> None:
        self._pending_events.clear()

    def pull_domain_events(self) -> List[DomainEvent]:
        events = self.domain_events
        self.clear_domain_events()
        return events
