"""Discount service layer (Use Cases).

``add_discount`` runs an ordered validation pipeline and stops at the first
violated rule:

1. actor is a manager
2. name not used by a non-deleted discount        -> NameAlreadyExists
3. value range, depending on ``is_percentage``    -> InvalidPercentage / InvalidNumber
4. discount window well formed, not in the past   -> InvalidDate
5. nested code windows inside the discount window -> InvalidDate
6. minimum order amount and usage limit >= 0      -> InvalidNumber
7. quantity bounds                                -> InvalidNumber
8. attached products exist and are sellable       -> DiscountNotFound
9. nested codes well formed and not yet issued    -> InvalidDiscountCode /
                                                     DiscountCodeAlreadyExists

The header is inserted first; product links and codes are attached in a
second write only when supplied.  Both writes share one unit of work.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

import structlog
from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from modules.core.identity import IdentityGate
from modules.core.results import operation
from modules.promotions.constants import (
    DISCOUNT_CODE_PATTERN,
    MAX_PERCENTAGE,
    OPEN_ENDED_TO_DATE,
    DiscountCodeStatus,
    DiscountStatus,
)
from modules.promotions.dtos import (
    AddDiscountCodeDTO,
    AddDiscountDTO,
    DiscountCodeOutputDTO,
    RequestedStatus,
)
from modules.promotions.events import DiscountCodeIssued, DiscountCreated
from modules.promotions.exceptions import (
    DiscountCodeAlreadyExists,
    DiscountNotFound,
    InvalidDate,
    InvalidDiscountCode,
    InvalidNumber,
    InvalidPercentage,
    NameAlreadyExists,
)
from modules.promotions.models import Discount, DiscountCode, normalize_code

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.promotions.repositories.interfaces import IDiscountRepository

logger = structlog.get_logger(__name__)

_CODE_RE = re.compile(DISCOUNT_CODE_PATTERN)

Window = Tuple[datetime, datetime]


def start_of_today(now: datetime) -> datetime:
    return timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)


class DiscountService:
    """Application service for discounts and discount codes.

    Receives repositories and the identity gate via constructor injection.
    """

    def __init__(
        self,
        discount_repository: IDiscountRepository,
        product_repository: IProductRepository,
        identity_gate: Optional[IdentityGate] = None,
    ) -> None:
        self._repo = discount_repository
        self._products = product_repository
        self._identity = identity_gate or IdentityGate()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @operation("discount.add")
    def add_discount(self, actor: Any, dto: AddDiscountDTO) -> bool:
        user_id = self._identity.resolve_manager(actor)
        log = logger.bind(discount_name=dto.name)
        now = timezone.now()

        if self._repo.get_by_name(dto.name) is not None:
            raise NameAlreadyExists(f"Discount {dto.name!r} already exists.")

        self._check_value(dto)

        from_date, to_date = self._resolve_discount_window(dto, now)
        code_windows = [
            self._resolve_code_window(code, from_date, to_date, now)
            for code in dto.discount_codes
        ]

        self._check_amounts(dto)
        self._check_quantities(dto)

        product_ids = list(dict.fromkeys(dto.product_ids))
        self._check_products(product_ids)

        codes = self._check_new_codes(dto.discount_codes)

        discount = Discount(
            name=dto.name,
            description=dto.description,
            is_percentage=dto.is_percentage,
            discount_value=dto.discount_value,
            minimum_order_amount=dto.minimum_order_amount,
            maximum_discount=dto.maximum_discount,
            from_date=from_date,
            to_date=to_date,
            usage_limit=dto.usage_limit,
            used_count=0,
            min_quantity=dto.min_quantity,
            max_quantity=dto.max_quantity,
            is_first_order=dto.is_first_order,
            status=(
                DiscountStatus.INACTIVE
                if dto.status == RequestedStatus.INACTIVE
                else DiscountStatus.ACTIVE
            ),
        )
        discount.stamp_created(user_id)
        discount.record_event(
            DiscountCreated(
                aggregate_id=discount.id,
                name=discount.name,
                product_ids=tuple(str(pid) for pid in product_ids),
                codes=tuple(codes),
            )
        )
        self._repo.save(discount)

        if product_ids or codes:
            entities = [
                self._code_entity(code_dto, code, window, user_id)
                for code_dto, code, window in zip(dto.discount_codes, codes, code_windows)
            ]
            discount.stamp_modified(user_id)
            try:
                self._repo.attach(discount, product_ids, entities)
            except IntegrityError as exc:
                raise DiscountCodeAlreadyExists("A code was issued concurrently.") from exc

        log.info(
            "discount.added",
            discount_id=str(discount.id),
            product_count=len(product_ids),
            code_count=len(codes),
        )
        return True

    @operation("discount_code.add")
    def add_discount_code(self, actor: Any, discount_id: Any, dto: AddDiscountCodeDTO) -> bool:
        user_id = self._identity.resolve_manager(actor)
        log = logger.bind(discount_id=str(discount_id))
        now = timezone.now()

        code = self._check_code_format(dto.code)

        discount = self._repo.get_for_update(discount_id)
        if discount is None or discount.is_deleted:
            raise DiscountNotFound(f"Discount {discount_id} not found.")

        if dto.user_id is not None:
            self._identity.require_user(dto.user_id)

        window = self._resolve_code_window(dto, discount.from_date, discount.to_date, now)

        if self._repo.get_code_by_code(code) is not None:
            raise DiscountCodeAlreadyExists(f"Code {code} already exists.")

        entity = self._code_entity(dto, code, window, user_id)
        discount.record_event(
            DiscountCodeIssued(aggregate_id=discount.id, code=code, user_id=dto.user_id)
        )
        try:
            self._repo.add_code(discount, entity)
        except IntegrityError as exc:
            raise DiscountCodeAlreadyExists(f"Code {code} was issued concurrently.") from exc

        log.info("discount_code.added", code=code, user_id=dto.user_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @operation("discount_code.get")
    def get_discount_code_by_code(self, code: str) -> DiscountCodeOutputDTO:
        """Look a code up ignoring case."""
        discount_code = self._repo.get_code_by_code(code)
        if discount_code is None:
            raise DiscountNotFound(f"Code {normalize_code(code)} not found.")
        return DiscountCodeOutputDTO.from_entity(discount_code)

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    @staticmethod
    def _check_value(dto: AddDiscountDTO) -> None:
        if dto.is_percentage:
            if not 0 <= dto.discount_value <= MAX_PERCENTAGE:
                raise InvalidPercentage(
                    f"Percentage {dto.discount_value} is outside 0..{MAX_PERCENTAGE}."
                )
            if dto.maximum_discount is not None and dto.maximum_discount <= 0:
                raise InvalidNumber("Maximum discount must be positive.")
        elif dto.discount_value <= 0:
            raise InvalidNumber("Discount value must be positive.")

    @staticmethod
    def _resolve_discount_window(dto: AddDiscountDTO, now: datetime) -> Window:
        if dto.from_date and dto.to_date and dto.from_date > dto.to_date:
            raise InvalidDate("Discount starts after it ends.")
        if dto.from_date is not None and dto.from_date < now:
            raise InvalidDate("Discount cannot start in the past.")

        from_date = dto.from_date or start_of_today(now)
        to_date = dto.to_date or OPEN_ENDED_TO_DATE
        if from_date > to_date:
            raise InvalidDate("Discount ends before today.")
        return from_date, to_date

    @staticmethod
    def _resolve_code_window(
        dto: AddDiscountCodeDTO, parent_from: datetime, parent_to: datetime, now: datetime
    ) -> Window:
        """Resolve a code window, defaulting to the rest of the parent window."""
        if dto.from_date and dto.to_date and dto.from_date > dto.to_date:
            raise InvalidDate("Code starts after it ends.")
        if dto.from_date is not None and dto.from_date < now:
            raise InvalidDate("Code cannot start in the past.")

        from_date = dto.from_date or max(start_of_today(now), parent_from)
        to_date = dto.to_date or parent_to
        if from_date > to_date or from_date < parent_from or to_date > parent_to:
            raise InvalidDate("Code window must lie inside the discount window.")
        return from_date, to_date

    @staticmethod
    def _check_amounts(dto: AddDiscountDTO) -> None:
        if dto.minimum_order_amount is not None and dto.minimum_order_amount < 0:
            raise InvalidNumber("Minimum order amount cannot be negative.")
        if dto.usage_limit is not None and dto.usage_limit < 0:
            raise InvalidNumber("Usage limit cannot be negative.")

    @staticmethod
    def _check_quantities(dto: AddDiscountDTO) -> None:
        bounds = [q for q in (dto.min_quantity, dto.max_quantity) if q is not None]
        if any(q < 0 for q in bounds):
            raise InvalidNumber("Quantity bounds cannot be negative.")
        if len(bounds) == 2 and dto.min_quantity > dto.max_quantity:
            raise InvalidNumber("Minimum quantity exceeds maximum quantity.")

    def _check_products(self, product_ids: Sequence[Any]) -> None:
        for product_id in product_ids:
            product = self._products.get_by_id(product_id)
            if product is None or not product.is_sellable:
                raise DiscountNotFound(f"Product {product_id} is not eligible.")

    def _check_new_codes(self, code_dtos: Sequence[AddDiscountCodeDTO]) -> List[str]:
        codes = [self._check_code_format(code_dto.code) for code_dto in code_dtos]
        if len(set(codes)) != len(codes):
            raise DiscountCodeAlreadyExists("A code is repeated in the request.")
        taken = self._repo.existing_codes(codes)
        if taken:
            raise DiscountCodeAlreadyExists(f"Codes already exist: {sorted(taken)}.")
        for code_dto in code_dtos:
            if code_dto.user_id is not None:
                self._identity.require_user(code_dto.user_id)
        return codes

    @staticmethod
    def _check_code_format(raw: str) -> str:
        if (
            not settings.DISCOUNT_CODE_MIN_LENGTH
            <= len(raw)
            <= settings.DISCOUNT_CODE_MAX_LENGTH
            or not _CODE_RE.fullmatch(raw)
        ):
            raise InvalidDiscountCode(f"Invalid discount code {raw!r}.")
        return normalize_code(raw)

    @staticmethod
    def _code_entity(
        dto: AddDiscountCodeDTO, code: str, window: Window, user_id: Any
    ) -> DiscountCode:
        entity = DiscountCode(
            code=code,
            user_id=dto.user_id,
            from_date=window[0],
            to_date=window[1],
            status=(
                DiscountCodeStatus.INACTIVE
                if dto.status == RequestedStatus.INACTIVE
                else DiscountCodeStatus.ACTIVE
            ),
        )
        entity.stamp_created(user_id)
        return entity
