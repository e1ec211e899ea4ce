"""Domain events for the Promotions bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class DiscountCreated(DomainEvent):
    topic: ClassVar[str] = "promotions"

    name: str = ""
    product_ids: tuple[str, ...] = field(default_factory=tuple)
    codes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DiscountCodeIssued(DomainEvent):
    topic: ClassVar[str] = "promotions"

    code: str = ""
    user_id: int | None = None
