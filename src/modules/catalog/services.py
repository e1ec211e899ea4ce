"""Product variant service layer (Use Cases).

Adds and updates the purchasable variants of a product while keeping the
product aggregate consistent.  Every public method is one unit of work
(``@operation``) and returns an ``OperationResult``.

Invariants maintained:
- all variants of a product share one attribute shape;
- no two variants of a product share a variant key;
- product stock equals the sum of variant stock once it has variants,
  and never goes negative;
- a variant with zero stock is ``out_of_stock``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Sequence

import structlog

from modules.catalog.attributes import AttributeSetValidator, shape_of, variant_key
from modules.catalog.constants import (
    MIN_VARIANTS_PER_PRODUCT,
    ProductStatus,
    VariantStatus,
    derive_variant_status,
)
from modules.catalog.dtos import ProductVariantOutputDTO
from modules.catalog.events import ProductVariantsAdded, ProductVariantUpdated
from modules.catalog.exceptions import (
    AtLeastTwoProductVariant,
    DataInconsistency,
    InvalidStockQuantity,
    InvalidVariantAttributeStructure,
    InvalidVariantRequest,
    ProductNotFound,
    ProductVariantNotFound,
    VariantAlreadyExists,
)
from modules.catalog.models import ProductVariant, VariantAttribute
from modules.core.identity import IdentityGate
from modules.core.results import operation

if TYPE_CHECKING:
    from modules.catalog.dtos import AddProductVariantDTO, UpdateProductVariantDTO
    from modules.catalog.models import Product
    from modules.catalog.repositories.interfaces import IProductRepository, VariantDraft

logger = structlog.get_logger(__name__)


class ProductVariantService:
    """Application service reconciling a product with its variant set.

    Receives an ``IProductRepository`` and an ``IdentityGate`` via
    constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IProductRepository,
        identity_gate: Optional[IdentityGate] = None,
    ) -> None:
        self._repo = repository
        self._identity = identity_gate or IdentityGate()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @operation("product_variant.add")
    def add_product_variants(
        self,
        actor: Any,
        product_id: Any,
        variants: Sequence[AddProductVariantDTO],
    ) -> int:
        """Add a batch of variants; returns the number of variants created.

        Steps:
        1. Actor must be a manager; the batch must not be empty.
        2. Lock the product (404 when missing or soft-deleted).
        3. A product already having variants must hold at least two; a
           product without variants needs a batch of at least two.
        4. Every candidate must match the expected attribute shape and be
           unique against stored variants and the rest of the batch.
        5. Build the variants, add the stock delta, flag ``has_variant``
           and persist everything in one write.
        """
        user_id = self._identity.resolve_manager(actor)
        if not variants:
            raise InvalidVariantRequest("At least one variant is required.")

        log = logger.bind(product_id=str(product_id), batch_size=len(variants))

        product = self._load_product(product_id)
        existing = list(product.variants.all())
        self._check_variant_machinery(product, existing, len(variants))

        validator = AttributeSetValidator.for_variants(
            existing=[variant.attribute_pairs() for variant in existing],
            candidates=[dto.pairs for dto in variants],
        )
        validator.validate_all(dto.pairs for dto in variants)
        self._require_variant_names(variants)

        drafts = [self._draft_variant(product, dto, user_id) for dto in variants]

        stock_delta = sum(dto.stock_quantity for dto in variants)
        base_stock = product.stock_quantity if product.has_variant else 0
        self._apply_stock(product, base_stock, stock_delta)

        product.has_variant = True
        product.stamp_modified(user_id)
        product.record_event(
            ProductVariantsAdded(
                aggregate_id=product.id,
                variant_ids=tuple(str(variant.id) for variant, _ in drafts),
                stock_delta=stock_delta,
            )
        )
        created = self._repo.add_variants(product, drafts)

        log.info(
            "product_variant.added",
            variant_count=len(created),
            stock_quantity=product.stock_quantity,
        )
        return len(created)

    @operation("product_variant.update")
    def update_product_variant(
        self,
        actor: Any,
        product_id: Any,
        variant_id: Any,
        dto: UpdateProductVariantDTO,
    ) -> int:
        """Apply a partial update; returns the number of changed variants (0 or 1).

        An update that changes nothing performs no write.
        """
        user_id = self._identity.resolve_manager(actor)
        log = logger.bind(product_id=str(product_id), variant_id=str(variant_id))

        product = self._load_product(product_id)
        variants = list(product.variants.all())
        if not product.has_variant or not variants:
            raise DataInconsistency(f"Product {product_id} has no variants to update.")

        variant = next((v for v in variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise ProductVariantNotFound(f"Variant {variant_id} not found.")

        has_changes = False
        stock_delta = 0

        if dto.supplied("price") and dto.price != variant.price:
            variant.price = dto.price
            has_changes = True

        if dto.supplied("stock_quantity") and dto.stock_quantity != variant.stock_quantity:
            stock_delta = dto.stock_quantity - variant.stock_quantity
            variant.stock_quantity = dto.stock_quantity
            has_changes = True

        if dto.supplied("variant_image") and dto.variant_image != variant.variant_image:
            variant.variant_image = dto.variant_image
            has_changes = True

        new_status = derive_variant_status(
            variant.stock_quantity, self._requested_status(variant, dto)
        )
        if new_status != variant.status:
            variant.status = new_status
            has_changes = True

        changed_attributes: List[VariantAttribute] = []
        if dto.supplied("variant_values"):
            changed_attributes = self._apply_attribute_values(variant, variants, dto, user_id)
            has_changes = has_changes or bool(changed_attributes)

        if not has_changes:
            log.info("product_variant.unchanged")
            return 0

        variant.stamp_modified(user_id)
        self._apply_stock(product, product.stock_quantity, stock_delta)
        product.stamp_modified(user_id)
        product.record_event(
            ProductVariantUpdated(
                aggregate_id=product.id,
                variant_id=str(variant.id),
                stock_delta=stock_delta,
            )
        )
        self._repo.update_variant(product, variant, changed_attributes)

        log.info(
            "product_variant.updated",
            stock_delta=stock_delta,
            status=variant.status,
            stock_quantity=product.stock_quantity,
        )
        return 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @operation("product_variant.list")
    def list_product_variants(self, product_id: Any) -> List[ProductVariantOutputDTO]:
        product = self._repo.get_by_id(product_id)
        if product is None or product.is_deleted:
            raise ProductNotFound(f"Product {product_id} not found.")
        return [
            ProductVariantOutputDTO.from_entity(variant)
            for variant in self._repo.list_variants(product.id)
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_product(self, product_id: Any) -> Product:
        product = self._repo.get_for_update(product_id)
        if product is None or product.is_deleted:
            raise ProductNotFound(f"Product {product_id} not found.")
        return product

    @staticmethod
    def _check_variant_machinery(
        product: Product, existing: Sequence[ProductVariant], batch_size: int
    ) -> None:
        if product.has_variant:
            if len(existing) < MIN_VARIANTS_PER_PRODUCT:
                raise DataInconsistency(
                    f"Product {product.id} is flagged with variants but has {len(existing)}."
                )
            return
        if existing:
            raise DataInconsistency(
                f"Product {product.id} has variant rows but is not flagged with variants."
            )
        if batch_size < MIN_VARIANTS_PER_PRODUCT:
            raise AtLeastTwoProductVariant(
                f"A product needs at least {MIN_VARIANTS_PER_PRODUCT} variants."
            )

    def _require_variant_names(self, variants: Sequence[AddProductVariantDTO]) -> None:
        wanted = {name_id for dto in variants for name_id, _ in dto.pairs}
        known = self._repo.get_variant_names(wanted)
        missing = wanted - set(known)
        if missing:
            raise InvalidVariantRequest(f"Unknown variant names: {sorted(missing)}.")

    @staticmethod
    def _draft_variant(product: Product, dto: AddProductVariantDTO, user_id: Any) -> VariantDraft:
        requested = (
            VariantStatus.ACTIVE
            if product.status == ProductStatus.ACTIVE
            else VariantStatus.INACTIVE
        )
        variant = ProductVariant(
            product=product,
            price=dto.price,
            stock_quantity=dto.stock_quantity,
            variant_image=dto.variant_image,
            status=derive_variant_status(dto.stock_quantity, requested),
        )
        variant.stamp_created(user_id)
        attributes = []
        for value in dto.variant_values:
            attribute = VariantAttribute(variant_name_id=value.variant_name_id, value=value.value)
            attribute.stamp_created(user_id)
            attributes.append(attribute)
        return variant, attributes

    @staticmethod
    def _apply_stock(product: Product, base_stock: int, delta: int) -> None:
        new_stock = base_stock + delta
        if new_stock < 0:
            raise InvalidStockQuantity(
                f"Stock of product {product.id} would become {new_stock}."
            )
        product.stock_quantity = new_stock

    @staticmethod
    def _requested_status(variant: ProductVariant, dto: UpdateProductVariantDTO) -> str:
        if dto.supplied("status"):
            return dto.status
        if variant.status == VariantStatus.OUT_OF_STOCK:
            return VariantStatus.ACTIVE
        return variant.status

    @staticmethod
    def _apply_attribute_values(
        variant: ProductVariant,
        siblings: Sequence[ProductVariant],
        dto: UpdateProductVariantDTO,
        user_id: Any,
    ) -> List[VariantAttribute]:
        current = {str(attr.variant_name_id): attr for attr in variant.attributes.all()}
        if shape_of(dto.pairs) != tuple(sorted(current)):
            raise InvalidVariantAttributeStructure(
                f"Variant {variant.id} attributes must keep dimensions {sorted(current)}."
            )

        changed: List[VariantAttribute] = []
        for name_id, value in dto.pairs:
            attribute = current[name_id]
            if attribute.value != value:
                attribute.value = value
                attribute.stamp_modified(user_id)
                changed.append(attribute)

        if changed:
            new_key = variant_key(dto.pairs)
            if any(other.key == new_key for other in siblings if other.id != variant.id):
                raise VariantAlreadyExists(f"Variant {new_key} already exists.")
        return changed
