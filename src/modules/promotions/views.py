"""Discount API views (thin adapters over ``DiscountService``)."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.views import WRITE_THROTTLE_SCOPE
from modules.core.identity import IdentityGate
from modules.core.responses import result_response, validation_error_response
from modules.promotions.dtos import AddDiscountCodeDTO, AddDiscountDTO
from modules.promotions.repositories.django_repository import DiscountDjangoRepository
from modules.promotions.services import DiscountService


class _DiscountServiceMixin:
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DiscountService(
            discount_repository=DiscountDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            identity_gate=IdentityGate(),
        )


class DiscountCreateView(_DiscountServiceMixin, APIView):
    throttle_scope = WRITE_THROTTLE_SCOPE

    def post(self, request: Request) -> Response:
        """POST /api/v1/discounts/"""
        try:
            dto = AddDiscountDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return validation_error_response(exc)

        result = self._service.add_discount(request.user, dto)
        return result_response(result, success_status=status.HTTP_201_CREATED)


class DiscountCodeCreateView(_DiscountServiceMixin, APIView):
    throttle_scope = WRITE_THROTTLE_SCOPE

    def post(self, request: Request, discount_id: str) -> Response:
        """POST /api/v1/discounts/{discount_id}/codes/"""
        try:
            dto = AddDiscountCodeDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return validation_error_response(exc)

        result = self._service.add_discount_code(request.user, discount_id, dto)
        return result_response(result, success_status=status.HTTP_201_CREATED)


class DiscountCodeDetailView(_DiscountServiceMixin, APIView):
    def get(self, request: Request, code: str) -> Response:
        """GET /api/v1/discount-codes/{code}/"""
        result = self._service.get_discount_code_by_code(code)
        return result_response(result, total_record=1 if result.is_success else 0)
