"""Catalog domain exceptions.

Raised inside the variant pipelines; the ``operation`` boundary of
``ProductVariantService`` converts them into failed ``OperationResult``
values carrying the matching ``ErrorCode``.
"""

from __future__ import annotations

from modules.core.results import DomainError, ErrorCode


class InvalidVariantRequest(DomainError):
    """Malformed variant request (empty batch, unknown dimension, ...)."""

    code = ErrorCode.BAD_REQUEST


class DuplicateVariantInRequest(InvalidVariantRequest):
    """The same variant key appears twice in one request."""


class ProductNotFound(DomainError):
    """The product does not exist or has been soft-deleted."""

    code = ErrorCode.PRODUCT_NOT_FOUND


class ProductVariantNotFound(DomainError):
    code = ErrorCode.PRODUCT_VARIANT_NOT_FOUND


class DataInconsistency(DomainError):
    """Stored or requested variant state breaks the attribute-shape invariant."""

    code = ErrorCode.DATA_INCONSISTENCY


class AtLeastTwoProductVariant(DomainError):
    """A product cannot start having variants with a single one."""

    code = ErrorCode.AT_LEAST_TWO_PRODUCT_VARIANT


class VariantAlreadyExists(DomainError):
    code = ErrorCode.VARIANT_ALREADY_EXISTS


class InvalidStockQuantity(DomainError):
    """Aggregate stock would become negative."""

    code = ErrorCode.INVALID_STOCK_QUANTITY


class InvalidVariantAttributeStructure(DomainError):
    """An update tried to change the set of variant dimensions."""

    code = ErrorCode.INVALID_VARIANT_ATTRIBUTE_STRUCTURE
