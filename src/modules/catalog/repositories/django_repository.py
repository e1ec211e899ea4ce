"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Look-ups follow the Null Object pattern: they return ``None`` instead of
raising; the service decides how a missing product is reported.
Writes run inside ``transaction.atomic()`` so the product, its variants and
their attributes are persisted all-or-nothing, together with the outbox
rows for any domain events the product buffered.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch

from modules.catalog.models import (
    Product,
    ProductVariant,
    VariantAttribute,
    VariantName,
)
from modules.catalog.repositories.interfaces import IProductRepository, VariantDraft
from modules.core.models import OutboxEvent

logger = structlog.get_logger(__name__)


def _variants_prefetch() -> Prefetch:
    return Prefetch(
        "variants",
        queryset=ProductVariant.objects.order_by("created_at", "id").prefetch_related(
            "attributes"
        ),
    )


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Product]:
        try:
            return (
                Product.objects.select_for_update()
                .prefetch_related(_variants_prefetch())
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list_variants(self, product_id: Any) -> List[ProductVariant]:
        try:
            return list(
                ProductVariant.objects.filter(product_id=product_id)
                .order_by("created_at", "id")
                .prefetch_related("attributes")
            )
        except (ValueError, ValidationError):
            return []

    def get_variant_names(self, ids: Iterable[Any]) -> Dict[str, VariantName]:
        try:
            names = VariantName.objects.filter(id__in=list(ids))
            return {str(name.id): name for name in names}
        except (ValueError, ValidationError):
            return {}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product and its buffered events."""
        entity.save()
        self._flush_events(entity)
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def add_variants(
        self, product: Product, drafts: Sequence[VariantDraft]
    ) -> List[ProductVariant]:
        variants: List[ProductVariant] = []
        attributes: List[VariantAttribute] = []
        for variant, variant_attributes in drafts:
            variant.product = product
            variants.append(variant)
            for attribute in variant_attributes:
                attribute.variant = variant
                attributes.append(attribute)

        ProductVariant.objects.bulk_create(variants)
        VariantAttribute.objects.bulk_create(attributes)
        product.save()
        self._flush_events(product)

        logger.info(
            "product.variants_inserted",
            product_id=str(product.id),
            variant_count=len(variants),
            attribute_count=len(attributes),
        )
        return variants

    @transaction.atomic
    def update_variant(
        self,
        product: Product,
        variant: ProductVariant,
        changed_attributes: Sequence[VariantAttribute] = (),
    ) -> ProductVariant:
        variant.save()
        for attribute in changed_attributes:
            attribute.save(update_fields=["value", "modified_by", "updated_at"])
        product.save()
        self._flush_events(product)

        logger.info(
            "product.variant_updated",
            product_id=str(product.id),
            variant_id=str(variant.id),
            attribute_count=len(changed_attributes),
        )
        return variant

    @staticmethod
    def _flush_events(product: Product) -> None:
        for event in product.pull_domain_events():
            OutboxEvent.record(event)
