"""Domain events for the Catalog bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ProductVariantsAdded(DomainEvent):
    """Raised when a batch of variants is added to a product."""

    topic: ClassVar[str] = "catalog"

    variant_ids: tuple[str, ...] = field(default_factory=tuple)
    stock_delta: int = 0


@dataclass(frozen=True)
class ProductVariantUpdated(DomainEvent):
    """Raised when a variant changes; ``stock_delta`` may be zero."""

    topic: ClassVar[str] = "catalog"

    variant_id: str = ""
    stock_delta: int = 0
