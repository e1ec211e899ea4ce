"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups and writes the variant
pipelines need.  Every write method is atomic across the product and the
variants / attributes it owns.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import (
        Product,
        ProductVariant,
        VariantAttribute,
        VariantName,
    )

VariantDraft = tuple["ProductVariant", list["VariantAttribute"]]


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_for_update(self, id: Any) -> "Product | None":
        """Lock the product row (SELECT FOR UPDATE) and prefetch
        ``variants`` with their ``attributes``.

        Concurrent variant writes against the same product serialize on
        this lock, so stock deltas are never lost.
        """

    @abstractmethod
    def get_variant_names(self, ids: Iterable[Any]) -> Dict[str, "VariantName"]:
        """Map ``str(id)`` to VariantName for the ids that exist."""

    @abstractmethod
    def add_variants(
        self, product: "Product", drafts: Sequence[VariantDraft]
    ) -> List["ProductVariant"]:
        """Insert new variants with their attributes and save the product."""

    @abstractmethod
    def update_variant(
        self,
        product: "Product",
        variant: "ProductVariant",
        changed_attributes: Sequence["VariantAttribute"] = (),
    ) -> "ProductVariant":
        """Save a modified variant, its changed attributes and the product."""

    @abstractmethod
    def list_variants(self, product_id: Any) -> List["ProductVariant"]:
        """Variants of a product with attributes prefetched."""
