"""Discount DTOs for the Service Layer (Pydantic v2, immutable).

Only types and shape are validated here.  Business ranges (percentage
bounds, date windows, code format) are pipeline stages of
``DiscountService`` so each one reports its own error code.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from django.utils import timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from modules.promotions.models import DiscountCode


class RequestedStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _aware(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes in the configured time zone."""
    if value is not None and timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


class AddDiscountCodeDTO(BaseModel):
    """A code to issue, nested in ``AddDiscountDTO`` or on its own."""

    model_config = ConfigDict(frozen=True)

    code: str
    user_id: int | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    status: RequestedStatus | None = None

    @field_validator("from_date", "to_date")
    @classmethod
    def dates_must_be_aware(cls, v: datetime | None) -> datetime | None:
        return _aware(v)


class AddDiscountDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    is_percentage: bool = False
    discount_value: Decimal
    minimum_order_amount: Decimal | None = None
    maximum_discount: Decimal | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    usage_limit: int | None = None
    min_quantity: int | None = None
    max_quantity: int | None = None
    is_first_order: bool = False
    status: RequestedStatus | None = None
    product_ids: list[UUID] = Field(default_factory=list)
    discount_codes: list[AddDiscountCodeDTO] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Discount name must not be blank.")
        return v

    @field_validator("from_date", "to_date")
    @classmethod
    def dates_must_be_aware(cls, v: datetime | None) -> datetime | None:
        return _aware(v)


class DiscountCodeOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    discount_id: UUID
    user_id: int | None
    code: str
    from_date: datetime
    to_date: datetime
    status: str

    @classmethod
    def from_entity(cls, discount_code: DiscountCode) -> DiscountCodeOutputDTO:
        return cls(
            discount_id=discount_code.discount_id,
            user_id=discount_code.user_id,
            code=discount_code.code,
            from_date=discount_code.from_date,
            to_date=discount_code.to_date,
            status=discount_code.status,
        )
