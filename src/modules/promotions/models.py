"""Discount aggregate: Discount, DiscountProduct, DiscountCode.

Invariants kept by ``DiscountService``:
- ``from_date <= to_date`` for a discount and for each of its codes;
- every code window lies inside its discount window;
- codes are unique ignoring case (stored upper-cased, UNIQUE column).

Discounts are soft-deleted via ``status = deleted``.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.catalog.models import Product
from modules.core.models import AuditedModel, BaseModel, StatusSoftDeleteModel
from modules.promotions.constants import DiscountCodeStatus, DiscountStatus
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


def normalize_code(code: str) -> str:
    """Canonical stored form of a discount code."""
    return code.strip().upper()


class Discount(DomainEventMixin, StatusSoftDeleteModel):
    """Promotional discount, percentage or fixed amount."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    is_percentage = models.BooleanField(default=False)
    discount_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    minimum_order_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    maximum_discount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    from_date = models.DateTimeField()
    to_date = models.DateTimeField()
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)
    min_quantity = models.PositiveIntegerField(null=True, blank=True)
    max_quantity = models.PositiveIntegerField(null=True, blank=True)
    is_first_order = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=DiscountStatus.choices,
        default=DiscountStatus.ACTIVE,
    )
    products = models.ManyToManyField(
        Product,
        through="DiscountProduct",
        related_name="discounts",
        blank=True,
    )

    class Meta:
        db_table = "discounts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="discounts_name_idx"),
            models.Index(fields=["status"], name="discounts_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(from_date__lte=models.F("to_date")),
                name="discounts_window_ordered",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("discount_created", discount_id=str(self.id), name=self.name)

    def covers(self, from_date, to_date) -> bool:
        """True when ``[from_date, to_date]`` lies inside this discount's window."""
        return self.from_date <= from_date and to_date <= self.to_date

    def __str__(self) -> str:
        return self.name


class DiscountProduct(BaseModel):
    """Product a discount applies to."""

    discount = models.ForeignKey(
        Discount,
        on_delete=models.CASCADE,
        related_name="product_links",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="+",
    )

    class Meta:
        db_table = "discount_products"
        constraints = [
            models.UniqueConstraint(
                fields=["discount", "product"],
                name="discount_products_unique_pair",
            ),
        ]


class DiscountCode(AuditedModel):
    """Redeemable code of a discount, optionally restricted to one user."""

    discount = models.ForeignKey(
        Discount,
        on_delete=models.CASCADE,
        related_name="codes",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="discount_codes",
    )
    # Normalized in save(), so the UNIQUE index is case-insensitive in effect.
    code = models.CharField(max_length=50, unique=True)
    from_date = models.DateTimeField()
    to_date = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=DiscountCodeStatus.choices,
        default=DiscountCodeStatus.ACTIVE,
    )

    class Meta:
        db_table = "discount_codes"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(from_date__lte=models.F("to_date")),
                name="discount_codes_window_ordered",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.code
