from decimal import Decimal

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from modules.catalog.constants import ProductStatus
from modules.catalog.models import Product, VariantName


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


def _user_in_group(username: str, group_name: str, **extra):
    user = get_user_model().objects.create_user(
        username=username, password="not-a-real-password", **extra
    )
    group, _ = Group.objects.get_or_create(name=group_name)
    user.groups.add(group)
    return user


@pytest.fixture()
def manager_user():
    return _user_in_group("manager", settings.MANAGER_ROLE)


@pytest.fixture()
def customer_user():
    return _user_in_group("customer", "Customer")


@pytest.fixture()
def manager_client(api_client, manager_user):
    api_client.force_authenticate(user=manager_user)
    return api_client


@pytest.fixture()
def color():
    return VariantName.objects.create(name="Color")


@pytest.fixture()
def size():
    return VariantName.objects.create(name="Size")


@pytest.fixture()
def product():
    return Product.objects.create(
        name="Basic Tee",
        price=Decimal("49.90"),
        stock_quantity=7,
        status=ProductStatus.ACTIVE,
    )
