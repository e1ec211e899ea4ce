"""Unit tests for domain events buffered on aggregate roots."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.catalog.events import ProductVariantsAdded
from modules.catalog.models import Product

pytestmark = pytest.mark.unit


def test_product_buffers_and_releases_domain_events():
    product = Product(name="Tee", price=Decimal("10.00"))

    assert product.pull_domain_events() == []

    event = ProductVariantsAdded(aggregate_id=product.id, variant_ids=("a", "b"), stock_delta=4)
    product.record_event(event)

    assert product.pull_domain_events() == [event]
    assert event.event_name == "ProductVariantsAdded"
    assert product.pull_domain_events() == []


def test_events_are_immutable():
    event = ProductVariantsAdded(aggregate_id=Product().id)
    with pytest.raises(AttributeError):
        event.stock_delta = 3  # type: ignore[misc]
