"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that the catalog and
promotions repository interfaces extend.  Service-layer code depends on this
abstraction, never on Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract for an aggregate root ``T``.

    ``save`` is atomic across the aggregate and the children it owns.
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        """Retrieve an aggregate by primary key (``None`` when absent)."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[T]:
        """Retrieve an aggregate with its children under a row-level lock."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an aggregate."""
