"""Product aggregate: Product, ProductVariant, VariantName, VariantAttribute.

Invariants kept by ``ProductVariantService`` (not by ``save()``):
- every variant of a product has the same attribute shape;
- no two variants of a product share a variant key;
- ``Product.stock_quantity`` is the sum of variant stock while
  ``has_variant`` is set, and is never negative;
- a variant with zero stock is ``out_of_stock``.

Products are soft-deleted via ``status = deleted`` (StatusSoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MinValueValidator
from django.db import models

from modules.catalog.attributes import variant_key
from modules.catalog.constants import (
    VARIANT_VALUE_MAX_LENGTH,
    ProductStatus,
    VariantStatus,
)
from modules.core.models import AuditedModel, BaseModel, StatusSoftDeleteModel
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Product(DomainEventMixin, StatusSoftDeleteModel):
    """Product aggregate root.

    ``stock_quantity`` is the aggregate stock: the product's own stock while
    it has no variants, the denormalised sum of variant stock afterwards.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    sold_quantity = models.PositiveIntegerField(default=0)
    has_variant = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product_created", product_id=str(self.id), name=self.name)

    @property
    def is_sellable(self) -> bool:
        """Eligible to be attached to a discount."""
        return self.status not in (ProductStatus.INACTIVE, ProductStatus.DELETED)

    def __str__(self) -> str:
        return self.name


class VariantName(BaseModel):
    """A variant dimension such as "Color" or "Size"."""

    name = models.CharField(max_length=100, unique=True)

    class Meta:
        db_table = "variant_names"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class ProductVariant(AuditedModel):
    """A purchasable variant of a product, keyed by its attribute values."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="variants",
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    sold_quantity = models.PositiveIntegerField(default=0)
    variant_image = models.URLField(max_length=500, null=True, blank=True)  # noqa: DJ01
    status = models.CharField(
        max_length=20,
        choices=VariantStatus.choices,
        default=VariantStatus.ACTIVE,
    )

    class Meta:
        db_table = "product_variants"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "status"], name="variants_product_status_idx"),
        ]

    def attribute_pairs(self) -> list[tuple[str, str]]:
        """``(variant_name_id, value)`` pairs of this variant's attributes."""
        return [
            (str(attr.variant_name_id), attr.value) for attr in self.attributes.all()
        ]

    @property
    def key(self) -> tuple[tuple[str, str], ...]:
        return variant_key(self.attribute_pairs())

    def __str__(self) -> str:
        return f"{self.product_id} {self.key}"


class VariantAttribute(AuditedModel):
    """One dimension/value of a variant's identity, e.g. (Color, "Red")."""

    variant = models.ForeignKey(
        ProductVariant,
        on_delete=models.CASCADE,
        related_name="attributes",
    )
    variant_name = models.ForeignKey(
        VariantName,
        on_delete=models.PROTECT,
        related_name="+",
    )
    value = models.CharField(max_length=VARIANT_VALUE_MAX_LENGTH)

    class Meta:
        db_table = "variant_attributes"
        constraints = [
            models.UniqueConstraint(
                fields=["variant", "variant_name"],
                name="variant_attributes_unique_dimension",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.variant_name_id}={self.value}"
