"""Product variant API views.

Thin DRF adapters over ``ProductVariantService``: the request body is parsed
into pydantic DTOs (400 on validation errors), the service returns an
``OperationResult`` and ``result_response`` maps its error code to the HTTP
status.  No ORM access happens here.
"""

from __future__ import annotations

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.views import APIView

from modules.catalog.dtos import AddProductVariantDTO, UpdateProductVariantDTO
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.services import ProductVariantService
from modules.core.identity import IdentityGate
from modules.core.responses import result_response, validation_error_response

WRITE_THROTTLE_SCOPE = "merchandising_writes"

_variant_batch = TypeAdapter(list[AddProductVariantDTO])


def _build_service() -> ProductVariantService:
    return ProductVariantService(
        repository=ProductDjangoRepository(),
        identity_gate=IdentityGate(),
    )


class ProductVariantListView(APIView):
    """GET / POST /api/v1/products/{product_id}/variants/"""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Only writes count against the merchandising write scope."""
        self.throttle_scope = None if self.request.method == "GET" else WRITE_THROTTLE_SCOPE
        return super().get_throttles()

    def get(self, request: Request, product_id: str) -> Response:
        result = self._service.list_product_variants(product_id)
        total = len(result.data) if result.is_success else None
        return result_response(result, total_record=total)

    def post(self, request: Request, product_id: str) -> Response:
        """Body: ``{"variants": [{price, stock_quantity, variant_image?, variant_values}]}``."""
        payload = request.data.get("variants") if isinstance(request.data, dict) else request.data
        try:
            variants = _variant_batch.validate_python(payload or [])
        except PydanticValidationError as exc:
            return validation_error_response(exc)

        result = self._service.add_product_variants(request.user, product_id, variants)
        return result_response(result, success_status=status.HTTP_201_CREATED)


class ProductVariantDetailView(APIView):
    """PATCH /api/v1/products/{product_id}/variants/{variant_id}/"""

    throttle_scope = WRITE_THROTTLE_SCOPE

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def patch(self, request: Request, product_id: str, variant_id: str) -> Response:
        try:
            dto = UpdateProductVariantDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return validation_error_response(exc)

        result = self._service.update_product_variant(
            request.user, product_id, variant_id, dto
        )
        return result_response(result)
