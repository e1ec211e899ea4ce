"""Django ORM implementation of the Discount repository."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Set

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.models import OutboxEvent
from modules.promotions.models import (
    Discount,
    DiscountCode,
    DiscountProduct,
    normalize_code,
)
from modules.promotions.repositories.interfaces import IDiscountRepository

logger = structlog.get_logger(__name__)


class DiscountDjangoRepository(IDiscountRepository):
    """Concrete Discount repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Discount]:
        try:
            return Discount.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Discount]:
        try:
            return Discount.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[Discount]:
        return Discount.objects.alive().filter(name=name.strip()).first()

    def get_code_by_code(self, code: str) -> Optional[DiscountCode]:
        return (
            DiscountCode.objects.select_related("discount")
            .filter(code=normalize_code(code))
            .first()
        )

    def existing_codes(self, codes: Iterable[str]) -> Set[str]:
        normalized = {normalize_code(code) for code in codes}
        if not normalized:
            return set()
        return set(
            DiscountCode.objects.filter(code__in=normalized).values_list("code", flat=True)
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Discount) -> Discount:
        """Insert or update the discount header and its buffered events."""
        entity.save()
        self._flush_events(entity)
        return entity

    @transaction.atomic
    def attach(
        self,
        discount: Discount,
        product_ids: Sequence[Any] = (),
        codes: Sequence[DiscountCode] = (),
    ) -> Discount:
        DiscountProduct.objects.bulk_create(
            [DiscountProduct(discount=discount, product_id=pid) for pid in product_ids]
        )
        for code in codes:
            code.discount = discount
            code.save()
        discount.save(update_fields=["modified_by"])
        self._flush_events(discount)

        logger.info(
            "discount.children_attached",
            discount_id=str(discount.id),
            product_count=len(product_ids),
            code_count=len(codes),
        )
        return discount

    @transaction.atomic
    def add_code(self, discount: Discount, code: DiscountCode) -> DiscountCode:
        code.discount = discount
        code.save()
        self._flush_events(discount)
        logger.info(
            "discount.code_inserted",
            discount_id=str(discount.id),
            code=code.code,
        )
        return code

    @staticmethod
    def _flush_events(discount: Discount) -> None:
        for event in discount.pull_domain_events():
            OutboxEvent.record(event)
