"""Integration tests for the product variant endpoints.

Covers:
- POST /api/v1/products/{id}/variants/: 201, envelope, error codes.
- PATCH /api/v1/products/{id}/variants/{variant_id}/: partial update.
- GET /api/v1/products/{id}/variants/: listing with total_record.
- Validation 400, authentication 401, role 403, throttling 429.
"""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

import pytest
from django.core.cache import cache
from rest_framework.throttling import ScopedRateThrottle

from modules.catalog.constants import VariantStatus
from modules.catalog.models import ProductVariant

pytestmark = pytest.mark.integration


def _url(product_id) -> str:
    return f"/api/v1/products/{product_id}/variants/"


def _value(variant_name, value) -> dict:
    return {"variant_name_id": str(variant_name.id), "value": value}


def _payload(color, size, *rows) -> dict:
    return {
        "variants": [
            {
                "price": "19.90",
                "stock_quantity": stock,
                "variant_values": [_value(color, color_value), _value(size, size_value)],
            }
            for color_value, size_value, stock in rows
        ]
    }


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()


@pytest.fixture()
def seeded(manager_client, product, color, size):
    response = manager_client.post(
        _url(product.id),
        _payload(color, size, ("Red", "S", 5), ("Blue", "S", 0)),
        format="json",
    )
    assert response.status_code == 201, response.json()
    return product


# ===========================================================================
# POST
# ===========================================================================


class TestAddVariantsEndpoint:
    def test_created(self, seeded):
        seeded.refresh_from_db()
        assert seeded.has_variant is True
        assert seeded.stock_quantity == 5

    def test_envelope(self, manager_client, product, color, size):
        response = manager_client.post(
            _url(product.id),
            _payload(color, size, ("Red", "S", 1), ("Red", "M", 1)),
            format="json",
        )
        assert response.json() == {"is_success": True, "data": 2, "error_code": "Ok"}

    def test_bare_list_body_accepted(self, manager_client, product, color, size):
        body = _payload(color, size, ("Red", "S", 1), ("Red", "M", 1))["variants"]
        response = manager_client.post(_url(product.id), body, format="json")
        assert response.status_code == 201

    def test_single_first_variant_is_400(self, manager_client, product, color, size):
        response = manager_client.post(
            _url(product.id), _payload(color, size, ("Red", "M", 3)), format="json"
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "AtLeastTwoProductVariant"

    def test_duplicate_is_409(self, manager_client, seeded, color, size):
        response = manager_client.post(
            _url(seeded.id), _payload(color, size, ("Red", "S", 2)), format="json"
        )
        assert response.status_code == 409
        body = response.json()
        assert body["is_success"] is False
        assert body["data"] is None
        assert body["error_code"] == "VariantAlreadyExists"

    def test_shape_mismatch_is_500(self, manager_client, seeded, color):
        response = manager_client.post(
            _url(seeded.id),
            {"variants": [{"price": "1.00", "stock_quantity": 1, "variant_values": [_value(color, "Green")]}]},
            format="json",
        )
        assert response.status_code == 500
        assert response.json()["error_code"] == "DataInconsistency"

    def test_missing_product_is_404(self, manager_client, color, size):
        response = manager_client.post(
            _url(uuid4()), _payload(color, size, ("Red", "S", 1), ("Blue", "S", 1)), format="json"
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "ProductNotFound"

    @pytest.mark.parametrize(
        "variant",
        [
            {"price": "-1", "stock_quantity": 1, "variant_values": []},
            {"price": "1.00", "stock_quantity": -1},
            {"price": "abc", "stock_quantity": 1},
            {"stock_quantity": 1},
        ],
    )
    def test_invalid_body_is_400(self, manager_client, product, variant):
        response = manager_client.post(_url(product.id), {"variants": [variant]}, format="json")
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "BadRequest"
        assert body["errors"]

    def test_empty_batch_is_400(self, manager_client, product):
        response = manager_client.post(_url(product.id), {"variants": []}, format="json")
        assert response.status_code == 400
        assert response.json()["error_code"] == "BadRequest"

    def test_unauthenticated_is_401(self, api_client, product, color, size):
        response = api_client.post(
            _url(product.id), _payload(color, size, ("Red", "S", 1), ("Blue", "S", 1)), format="json"
        )
        assert response.status_code == 401

    def test_customer_is_403(self, api_client, customer_user, product, color, size):
        api_client.force_authenticate(user=customer_user)
        response = api_client.post(
            _url(product.id), _payload(color, size, ("Red", "S", 1), ("Blue", "S", 1)), format="json"
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "NotAuthority"

    def test_writes_are_throttled(self, manager_client, product, color, size):
        body = _payload(color, size, ("Red", "S", 1))
        with patch.dict(ScopedRateThrottle.THROTTLE_RATES, {"merchandising_writes": "2/minute"}):
            for _ in range(2):
                manager_client.post(_url(product.id), body, format="json")
            response = manager_client.post(_url(product.id), body, format="json")
        assert response.status_code == 429

    def test_reads_are_not_write_throttled(self, manager_client, seeded):
        with patch.dict(ScopedRateThrottle.THROTTLE_RATES, {"merchandising_writes": "1/minute"}):
            statuses = {manager_client.get(_url(seeded.id)).status_code for _ in range(3)}
        assert statuses == {200}


# ===========================================================================
# PATCH
# ===========================================================================


class TestUpdateVariantEndpoint:
    def _red(self, product):
        for variant in ProductVariant.objects.filter(product=product):
            if "Red" in {value for _, value in variant.attribute_pairs()}:
                return variant
        raise AssertionError("Red variant missing")

    def test_stock_to_zero(self, manager_client, seeded):
        red = self._red(seeded)
        response = manager_client.patch(
            f"{_url(seeded.id)}{red.id}/", {"stock_quantity": 0}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["data"] == 1
        red.refresh_from_db()
        assert red.status == VariantStatus.OUT_OF_STOCK

    def test_no_change_returns_zero(self, manager_client, seeded):
        red = self._red(seeded)
        response = manager_client.patch(
            f"{_url(seeded.id)}{red.id}/", {"stock_quantity": 5}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["data"] == 0

    def test_unknown_status_is_400(self, manager_client, seeded):
        red = self._red(seeded)
        response = manager_client.patch(
            f"{_url(seeded.id)}{red.id}/", {"status": "deleted"}, format="json"
        )
        assert response.status_code == 400

    def test_unknown_variant_is_404(self, manager_client, seeded):
        response = manager_client.patch(
            f"{_url(seeded.id)}{uuid4()}/", {"stock_quantity": 1}, format="json"
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "ProductVariantNotFound"


# ===========================================================================
# GET
# ===========================================================================


class TestListVariantsEndpoint:
    def test_lists_variants(self, manager_client, seeded, color):
        response = manager_client.get(_url(seeded.id))

        assert response.status_code == 200
        body = response.json()
        assert body["total_record"] == 2
        assert {v["status"] for v in body["data"]} == {"active", "out_of_stock"}
        assert all(
            str(color.id) in {pair["variant_name_id"] for pair in v["variant_values"]}
            for v in body["data"]
        )

    def test_missing_product_is_404(self, manager_client):
        response = manager_client.get(_url(uuid4()))
        assert response.status_code == 404
        assert "total_record" not in response.json()
