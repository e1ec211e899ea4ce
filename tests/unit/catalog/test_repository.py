"""Unit tests for ProductDjangoRepository.

Covers:
- Look-ups (get_by_id, get_for_update, list_variants, get_variant_names).
- Variant writes (add_variants, update_variant) and outbox flushing.
- Edge cases (invalid UUIDs, soft-deleted products).
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.catalog.events import ProductVariantsAdded
from modules.catalog.models import Product, ProductVariant, VariantAttribute
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.repositories.interfaces import IProductRepository
from modules.core.models import OutboxEvent

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _draft(color, value, stock=1):
    variant = ProductVariant(price=Decimal("10.00"), stock_quantity=stock)
    return variant, [VariantAttribute(variant_name=color, value=value)]


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


# ===========================================================================
# Instantiation
# ===========================================================================


class TestRepositoryInstantiation:
    def test_is_instance_of_interface(self, repo):
        assert isinstance(repo, IProductRepository)


# ===========================================================================
# Look-ups
# ===========================================================================


class TestGetById:
    def test_returns_product_when_found(self, repo, product):
        result = repo.get_by_id(str(product.id))
        assert result is not None
        assert result.id == product.id

    def test_returns_none_when_not_found(self, repo):
        assert repo.get_by_id(uuid4()) is None

    def test_returns_none_for_invalid_uuid(self, repo):
        assert repo.get_by_id("not-a-uuid") is None

    def test_returns_soft_deleted_product(self, repo, product):
        product.delete()
        result = repo.get_by_id(product.id)
        assert result is not None
        assert result.is_deleted is True


class TestGetForUpdate:
    def test_prefetches_variants_and_attributes(self, repo, product, color):
        repo.add_variants(product, [_draft(color, "Red"), _draft(color, "Blue")])

        locked = repo.get_for_update(product.id)

        assert sorted(v.attribute_pairs()[0][1] for v in locked.variants.all()) == ["Blue", "Red"]

    def test_returns_none_for_invalid_uuid(self, repo):
        assert repo.get_for_update("not-a-uuid") is None


class TestVariantNames:
    def test_returns_known_names_keyed_by_string_id(self, repo, color, size):
        names = repo.get_variant_names([color.id, size.id, uuid4()])
        assert set(names) == {str(color.id), str(size.id)}

    def test_invalid_ids_return_empty(self, repo):
        assert repo.get_variant_names(["nope"]) == {}


class TestListVariants:
    def test_invalid_product_id_returns_empty(self, repo):
        assert repo.list_variants("nope") == []


# ===========================================================================
# Writes
# ===========================================================================


class TestAddVariants:
    def test_inserts_variants_and_attributes(self, repo, product, color):
        product.has_variant = True
        product.stock_quantity = 5
        created = repo.add_variants(product, [_draft(color, "Red", 2), _draft(color, "Blue", 3)])

        assert len(created) == 2
        assert ProductVariant.objects.filter(product=product).count() == 2
        assert VariantAttribute.objects.filter(variant__product=product).count() == 2
        product.refresh_from_db()
        assert product.has_variant is True
        assert product.stock_quantity == 5

    def test_flushes_buffered_events(self, repo, product, color):
        product.record_event(ProductVariantsAdded(aggregate_id=product.id, stock_delta=1))
        repo.add_variants(product, [_draft(color, "Red")])

        event = OutboxEvent.objects.get()
        assert event.event_type == "ProductVariantsAdded"
        assert event.topic == "catalog"
        assert product.pull_domain_events() == []


class TestUpdateVariant:
    def test_saves_variant_attributes_and_product(self, repo, product, color):
        (variant,) = repo.add_variants(product, [_draft(color, "Red")])
        attribute = VariantAttribute.objects.get(variant=variant)

        variant.stock_quantity = 9
        attribute.value = "Crimson"
        product.stock_quantity = 9
        repo.update_variant(product, variant, [attribute])

        assert ProductVariant.objects.get(pk=variant.pk).stock_quantity == 9
        assert VariantAttribute.objects.get(pk=attribute.pk).value == "Crimson"
        assert Product.objects.get(pk=product.pk).stock_quantity == 9
