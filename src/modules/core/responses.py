"""Render ``OperationResult`` values as DRF responses.

The response body never carries the internal cause of a failure.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel as PydanticModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response

from modules.core.results import ErrorCode, OperationResult, http_status_for


def _render_data(data: Any) -> Any:
    if isinstance(data, PydanticModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [_render_data(item) for item in data]
    return data


def result_response(
    result: OperationResult,
    success_status: int = status.HTTP_200_OK,
    total_record: Optional[int] = None,
) -> Response:
    body = {
        "is_success": result.is_success,
        "data": _render_data(result.data),
        "error_code": str(result.error_code),
    }
    if total_record is not None:
        body["total_record"] = total_record
    if not result.is_success:
        return Response(body, status=http_status_for(result.error_code))
    return Response(body, status=success_status)


def validation_error_response(exc: PydanticValidationError | ValueError) -> Response:
    """400 response for a request body the DTOs rejected."""
    if isinstance(exc, PydanticValidationError):
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "detail": err["msg"]}
            for err in exc.errors()
        ]
    else:
        errors = [{"field": "", "detail": str(exc)}]
    return Response(
        {
            "is_success": False,
            "data": None,
            "error_code": str(ErrorCode.BAD_REQUEST),
            "errors": errors,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )
