"""Promotions URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.promotions.views import (
    DiscountCodeCreateView,
    DiscountCodeDetailView,
    DiscountCreateView,
)

urlpatterns = [
    path("discounts/", DiscountCreateView.as_view(), name="discount-create"),
    path(
        "discounts/<str:discount_id>/codes/",
        DiscountCodeCreateView.as_view(),
        name="discount-code-create",
    ),
    path(
        "discount-codes/<str:code>/",
        DiscountCodeDetailView.as_view(),
        name="discount-code-detail",
    ),
]
