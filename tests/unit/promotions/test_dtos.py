"""Unit tests for the discount DTOs."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from django.utils import timezone as dj_timezone
from pydantic import ValidationError

from modules.promotions.dtos import (
    AddDiscountCodeDTO,
    AddDiscountDTO,
    DiscountCodeOutputDTO,
    RequestedStatus,
)
from modules.promotions.models import Discount, DiscountCode

pytestmark = pytest.mark.unit


class TestAddDiscountDTO:
    def test_minimal(self):
        dto = AddDiscountDTO(name="Sale", discount_value=Decimal("5"))
        assert dto.is_percentage is False
        assert dto.product_ids == []
        assert dto.discount_codes == []
        assert dto.status is None

    def test_name_is_stripped(self):
        assert AddDiscountDTO(name="  Sale ", discount_value=1).name == "Sale"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            AddDiscountDTO(name="   ", discount_value=1)

    def test_value_required(self):
        with pytest.raises(ValidationError):
            AddDiscountDTO(name="Sale")

    def test_out_of_range_values_are_left_to_the_service(self):
        dto = AddDiscountDTO(name="Sale", is_percentage=True, discount_value=Decimal("150"))
        assert dto.discount_value == Decimal("150")

    def test_naive_dates_become_aware(self):
        dto = AddDiscountDTO(
            name="Sale", discount_value=1, from_date=datetime(2026, 5, 1, 8, 0)
        )
        assert dj_timezone.is_aware(dto.from_date)

    def test_nested_codes_parsed(self):
        dto = AddDiscountDTO.model_validate(
            {
                "name": "Sale",
                "discount_value": "10",
                "product_ids": ["0190a4c2-7b1e-7cc0-8000-000000000001"],
                "discount_codes": [{"code": "SAVE10", "status": "inactive"}],
            }
        )
        assert dto.discount_codes[0].status == RequestedStatus.INACTIVE
        assert str(dto.product_ids[0]) == "0190a4c2-7b1e-7cc0-8000-000000000001"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            AddDiscountDTO(name="Sale", discount_value=1, status="deleted")

    def test_frozen(self):
        dto = AddDiscountDTO(name="Sale", discount_value=1)
        with pytest.raises(ValidationError):
            dto.name = "Other"


class TestAddDiscountCodeDTO:
    def test_code_kept_verbatim(self):
        # Normalized by the service, not the DTO.
        assert AddDiscountCodeDTO(code=" save10 ").code == " save10 "

    def test_user_id_must_be_integer(self):
        with pytest.raises(ValidationError):
            AddDiscountCodeDTO(code="SAVE10", user_id="someone")


def test_output_dto_from_entity():
    start = datetime(2026, 5, 1, tzinfo=timezone.utc)
    end = datetime(2026, 5, 31, tzinfo=timezone.utc)
    discount = Discount.objects.create(
        name="May", discount_value=Decimal("5"), from_date=start, to_date=end
    )
    code = DiscountCode.objects.create(discount=discount, code="may5", from_date=start, to_date=end)

    dto = DiscountCodeOutputDTO.from_entity(code)

    assert dto.discount_id == discount.id
    assert dto.code == "MAY5"
    assert dto.user_id is None
    assert (dto.from_date, dto.to_date) == (start, end)
    assert dto.status == "active"
