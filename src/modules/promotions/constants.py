"""Promotions domain constants."""

from datetime import datetime, timezone

from django.db import models


class DiscountStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    DELETED = "deleted", "Deleted"


class DiscountCodeStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


# Upper bound of a discount window when none is given.
OPEN_ENDED_TO_DATE = datetime(9999, 12, 31, tzinfo=timezone.utc)

DISCOUNT_CODE_PATTERN = r"^[A-Za-z0-9]+$"

# Percentage discounts are expressed in whole percent.
MAX_PERCENTAGE = 100
