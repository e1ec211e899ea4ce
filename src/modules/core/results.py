"""Typed operation results and the error-code taxonomy.

Every public service operation returns an ``OperationResult``: a success
flag, a payload and an ``ErrorCode``.  Validation pipelines raise
``DomainError`` subclasses internally; the ``operation`` decorator is the
single boundary that turns them into failed results, after the unit of work
has rolled back.  Unexpected faults are logged and surfaced as
``InternalServerError`` with the cause kept for diagnostics only.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Generic, Optional, TypeVar

import structlog

from modules.core.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ErrorCode(StrEnum):
    OK = "Ok"
    BAD_REQUEST = "BadRequest"
    # Catalog
    PRODUCT_NOT_FOUND = "ProductNotFound"
    PRODUCT_VARIANT_NOT_FOUND = "ProductVariantNotFound"
    DATA_INCONSISTENCY = "DataInconsistency"
    AT_LEAST_TWO_PRODUCT_VARIANT = "AtLeastTwoProductVariant"
    VARIANT_ALREADY_EXISTS = "VariantAlreadyExists"
    INVALID_STOCK_QUANTITY = "InvalidStockQuantity"
    INVALID_VARIANT_ATTRIBUTE_STRUCTURE = "InvalidVariantAttributeStructure"
    # Promotions
    NAME_ALREADY_EXISTS = "NameAlreadyExists"
    INVALID_PERCENTAGE = "InvalidPercentage"
    INVALID_NUMBER = "InvalidNumber"
    INVALID_DATE = "InvalidDate"
    DISCOUNT_NOT_FOUND = "DiscountNotFound"
    DISCOUNT_CODE_ALREADY_EXISTS = "DiscountCodeAlreadyExists"
    INVALID_DISCOUNT_CODE = "InvalidDiscountCode"
    USER_NOT_FOUND = "UserNotFound"
    # Identity
    NOT_AUTHENTICATION = "NotAuthentication"
    NOT_AUTHORITY = "NotAuthority"
    ACCOUNT_IS_INACTIVE = "AccountIsInactive"
    INTERNAL_SERVER_ERROR = "InternalServerError"


class ErrorCategory(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DATA_INCONSISTENCY = "data_inconsistency"
    AUTHORIZATION = "authorization"
    INTERNAL = "internal"


ERROR_CATEGORIES: dict[ErrorCode, ErrorCategory] = {
    ErrorCode.BAD_REQUEST: ErrorCategory.VALIDATION,
    ErrorCode.AT_LEAST_TWO_PRODUCT_VARIANT: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_STOCK_QUANTITY: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_VARIANT_ATTRIBUTE_STRUCTURE: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_PERCENTAGE: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_NUMBER: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_DATE: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_DISCOUNT_CODE: ErrorCategory.VALIDATION,
    ErrorCode.PRODUCT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.PRODUCT_VARIANT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.DISCOUNT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.VARIANT_ALREADY_EXISTS: ErrorCategory.CONFLICT,
    ErrorCode.NAME_ALREADY_EXISTS: ErrorCategory.CONFLICT,
    ErrorCode.DISCOUNT_CODE_ALREADY_EXISTS: ErrorCategory.CONFLICT,
    ErrorCode.DATA_INCONSISTENCY: ErrorCategory.DATA_INCONSISTENCY,
    ErrorCode.NOT_AUTHENTICATION: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_AUTHORITY: ErrorCategory.AUTHORIZATION,
    ErrorCode.ACCOUNT_IS_INACTIVE: ErrorCategory.AUTHORIZATION,
    ErrorCode.INTERNAL_SERVER_ERROR: ErrorCategory.INTERNAL,
}

HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.OK: 200,
    ErrorCode.NOT_AUTHENTICATION: 401,
    ErrorCode.NOT_AUTHORITY: 403,
    ErrorCode.ACCOUNT_IS_INACTIVE: 403,
    ErrorCode.DATA_INCONSISTENCY: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}

_HTTP_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
}


def category_of(code: ErrorCode) -> Optional[ErrorCategory]:
    return ERROR_CATEGORIES.get(code)


def http_status_for(code: ErrorCode) -> int:
    """Map an error code to the HTTP status the API layer responds with."""
    if code in HTTP_STATUS_BY_CODE:
        return HTTP_STATUS_BY_CODE[code]
    category = ERROR_CATEGORIES.get(code)
    return _HTTP_STATUS_BY_CATEGORY.get(category, 500)


class DomainError(Exception):
    """Base for rule violations detected by a validation pipeline.

    Subclasses pin ``code``; the message is for logs, not for callers.
    """

    code: ErrorCode = ErrorCode.BAD_REQUEST

    def __init__(self, message: str = "", code: Optional[ErrorCode] = None) -> None:
        super().__init__(message or str(code or self.code))
        if code is not None:
            self.code = code


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a public operation: success flag, payload and error code."""

    is_success: bool
    data: Optional[T] = None
    error_code: ErrorCode = ErrorCode.OK
    message: str = ""
    cause: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @classmethod
    def ok(cls, data: Optional[T] = None) -> OperationResult[T]:
        return cls(is_success=True, data=data)

    @classmethod
    def failure(
        cls,
        code: ErrorCode,
        message: str = "",
        cause: Optional[BaseException] = None,
    ) -> OperationResult[T]:
        return cls(is_success=False, error_code=code, message=message, cause=cause)

    @property
    def category(self) -> Optional[ErrorCategory]:
        return category_of(self.error_code)


def operation(name: str) -> Callable[[Callable[..., T]], Callable[..., OperationResult[T]]]:
    """Run a service method as one unit of work and return an ``OperationResult``.

    ``DomainError`` raised anywhere in the pipeline rolls the unit of work
    back and becomes a failed result carrying the error's code.  Any other
    exception is logged and reported as ``InternalServerError``.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., OperationResult[T]]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> OperationResult[T]:
            log = logger.bind(operation=name)
            try:
                with UnitOfWork():
                    data = func(*args, **kwargs)
            except DomainError as exc:
                log.warning(f"{name}.rejected", error_code=str(exc.code), reason=str(exc))
                return OperationResult.failure(exc.code, message=str(exc))
            except Exception as exc:
                log.exception(f"{name}.failed")
                return OperationResult.failure(
                    ErrorCode.INTERNAL_SERVER_ERROR,
                    message="An unexpected internal server error occurred.",
                    cause=exc,
                )
            return OperationResult.ok(data)

        return wrapper

    return decorator
