"""Catalog domain constants.

Product / variant status choices and the derived variant status rule.
"""

from django.db import models


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    OUT_OF_STOCK = "out_of_stock", "Out of stock"
    DELETED = "deleted", "Deleted"


class VariantStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    OUT_OF_STOCK = "out_of_stock", "Out of stock"


# A product may only switch to "has variants" with at least this many.
MIN_VARIANTS_PER_PRODUCT = 2

VARIANT_VALUE_MAX_LENGTH = 255


def derive_variant_status(stock_quantity: int, requested: str | None = None) -> str:
    """Variant status is derived, never freely set.

    - no stock                    -> out_of_stock (whatever was requested)
    - stock, ``inactive`` requested -> inactive
    - stock, anything else          -> active
    """
    if stock_quantity == 0:
        return VariantStatus.OUT_OF_STOCK
    if requested == VariantStatus.INACTIVE:
        return VariantStatus.INACTIVE
    return VariantStatus.ACTIVE
