"""Discount repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence, Set

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.promotions.models import Discount, DiscountCode


class IDiscountRepository(IRepository["Discount"]):
    """Repository contract for the Discount aggregate.

    Code look-ups take any casing; codes are compared in normalized form.
    """

    @abstractmethod
    def get_by_name(self, name: str) -> Optional["Discount"]:
        """Non-deleted discount with exactly this name."""

    @abstractmethod
    def get_code_by_code(self, code: str) -> Optional["DiscountCode"]:
        """Discount code matching *code* ignoring case."""

    @abstractmethod
    def existing_codes(self, codes: Iterable[str]) -> Set[str]:
        """Normalized codes among *codes* that are already issued."""

    @abstractmethod
    def attach(
        self,
        discount: "Discount",
        product_ids: Sequence[Any] = (),
        codes: Sequence["DiscountCode"] = (),
    ) -> "Discount":
        """Link products and insert codes of a saved discount."""

    @abstractmethod
    def add_code(self, discount: "Discount", code: "DiscountCode") -> "DiscountCode":
        """Insert one code for an existing discount."""
