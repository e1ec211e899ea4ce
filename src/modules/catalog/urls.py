"""Catalog URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.catalog.views import ProductVariantDetailView, ProductVariantListView

urlpatterns = [
    path(
        "products/<str:product_id>/variants/",
        ProductVariantListView.as_view(),
        name="product-variant-list",
    ),
    path(
        "products/<str:product_id>/variants/<str:variant_id>/",
        ProductVariantDetailView.as_view(),
        name="product-variant-detail",
    ),
]
