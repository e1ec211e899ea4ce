"""Promotions domain exceptions.

Each pipeline stage of ``DiscountService`` raises one of these; the
``operation`` boundary turns it into a failed ``OperationResult``.
"""

from __future__ import annotations

from modules.core.results import DomainError, ErrorCode


class NameAlreadyExists(DomainError):
    code = ErrorCode.NAME_ALREADY_EXISTS


class InvalidPercentage(DomainError):
    """Percentage discount value outside ``[0, 100]``."""

    code = ErrorCode.INVALID_PERCENTAGE


class InvalidNumber(DomainError):
    """Out-of-range amount, limit or quantity bound."""

    code = ErrorCode.INVALID_NUMBER


class InvalidDate(DomainError):
    """Malformed or non-contained date window."""

    code = ErrorCode.INVALID_DATE


class DiscountNotFound(DomainError):
    """Missing discount, or an attached product that is not eligible."""

    code = ErrorCode.DISCOUNT_NOT_FOUND


class DiscountCodeAlreadyExists(DomainError):
    code = ErrorCode.DISCOUNT_CODE_ALREADY_EXISTS


class InvalidDiscountCode(DomainError):
    code = ErrorCode.INVALID_DISCOUNT_CODE
