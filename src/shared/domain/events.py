"""Domain events primitives shared by the catalog and promotions contexts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    Subclasses set ``topic`` to the outbox topic they are relayed on.
    """

    topic: ClassVar[str] = "default"

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)


class DomainEventMixin:
    """Mixin for aggregate roots that buffer events until the repository saves them."""

    _pending_events: list[DomainEvent]

    def record_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_pending_events"):
            self._pending_events = []
        self._pending_events.append(event)

    def pull_domain_events(self) -> list[DomainEvent]:
        """Return buffered events and empty the buffer."""
        events = list(getattr(self, "_pending_events", []))
        self._pending_events = []
        return events
