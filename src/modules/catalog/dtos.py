"""Product variant DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views) and
``ProductVariantService``.  DTOs are immutable (``frozen=True``).

- ``VariantValueDTO``: one ``(variant_name_id, value)`` pair.
- ``AddProductVariantDTO``: one variant of an add-variants batch.
- ``UpdateProductVariantDTO``: partial update; only fields present in the
  request (``model_fields_set``) are applied.
- ``ProductVariantOutputDTO``: a variant with its attribute pairs.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.catalog.constants import VARIANT_VALUE_MAX_LENGTH

if TYPE_CHECKING:
    from modules.catalog.models import ProductVariant


class VariantStatusEnum(StrEnum):
    """Statuses a caller may request; ``out_of_stock`` is derived from stock."""

    ACTIVE = "active"
    INACTIVE = "inactive"


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class VariantValueDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant_name_id: UUID
    value: str

    @field_validator("variant_name_id")
    @classmethod
    def id_must_not_be_empty(cls, v: UUID) -> UUID:
        if v.int == 0:
            raise ValueError("Variant name id must not be empty.")
        return v

    @field_validator("value")
    @classmethod
    def value_must_be_present(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Variant value must not be blank.")
        if len(v) > VARIANT_VALUE_MAX_LENGTH:
            raise ValueError(
                f"Variant value must be at most {VARIANT_VALUE_MAX_LENGTH} characters."
            )
        return v

    def as_pair(self) -> tuple[str, str]:
        return str(self.variant_name_id), self.value


def _pairs(values: list[VariantValueDTO]) -> list[tuple[str, str]]:
    return [value.as_pair() for value in values]


def _check_dimensions(values: list[VariantValueDTO]) -> list[VariantValueDTO]:
    if not values:
        raise ValueError("At least one variant value is required.")
    name_ids = [value.variant_name_id for value in values]
    if len(set(name_ids)) != len(name_ids):
        raise ValueError("Each variant name may appear only once per variant.")
    return values


class AddProductVariantDTO(BaseModel):
    """Immutable DTO for one variant of an add-variants request.

    Validates:
    - ``price`` and ``stock_quantity`` are non-negative.
    - ``variant_values`` is non-empty with one value per variant name.
    """

    model_config = ConfigDict(frozen=True)

    price: Decimal
    stock_quantity: int
    variant_image: str | None = None
    variant_values: list[VariantValueDTO]

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v

    @field_validator("variant_values")
    @classmethod
    def values_must_be_distinct_dimensions(
        cls, v: list[VariantValueDTO]
    ) -> list[VariantValueDTO]:
        return _check_dimensions(v)

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return _pairs(self.variant_values)


class UpdateProductVariantDTO(BaseModel):
    """Immutable DTO for a partial variant update.

    A field counts as supplied only when it is present in the request, so
    ``stock_quantity=0`` sets the stock to zero and ``variant_image=None``
    clears the image.
    """

    model_config = ConfigDict(frozen=True)

    price: Decimal | None = None
    stock_quantity: int | None = None
    variant_image: str | None = None
    status: VariantStatusEnum | None = None
    variant_values: list[VariantValueDTO] | None = None

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v

    @field_validator("variant_values")
    @classmethod
    def values_must_be_distinct_dimensions(
        cls, v: list[VariantValueDTO] | None
    ) -> list[VariantValueDTO] | None:
        return v if v is None else _check_dimensions(v)

    def supplied(self, field: str) -> bool:
        return field in self.model_fields_set and (
            field == "variant_image" or getattr(self, field) is not None
        )

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return _pairs(self.variant_values or [])


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class ProductVariantOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    product_id: UUID
    price: Decimal
    stock_quantity: int
    variant_image: str | None
    status: str
    variant_values: list[VariantValueDTO]
    updated_at: datetime

    @classmethod
    def from_entity(cls, variant: ProductVariant) -> ProductVariantOutputDTO:
        return cls(
            id=variant.id,
            product_id=variant.product_id,
            price=variant.price,
            stock_quantity=variant.stock_quantity,
            variant_image=variant.variant_image,
            status=variant.status,
            variant_values=[
                VariantValueDTO(variant_name_id=attr.variant_name_id, value=attr.value)
                for attr in variant.attributes.all()
            ],
            updated_at=variant.updated_at,
        )
