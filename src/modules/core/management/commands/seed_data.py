from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from modules.catalog.constants import ProductStatus
from modules.catalog.dtos import AddProductVariantDTO, VariantValueDTO
from modules.catalog.models import Product, VariantName
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.services import ProductVariantService
from modules.core.identity import Role
from modules.promotions.dtos import AddDiscountCodeDTO, AddDiscountDTO
from modules.promotions.repositories.django_repository import DiscountDjangoRepository
from modules.promotions.services import DiscountService

DEMO_PRODUCT = "Basic Tee"
DEMO_DISCOUNT = "Welcome"


class Command(BaseCommand):
    help = "Seed database with development data for variants and discounts."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        manager, users_created = self._seed_users()
        names = self._seed_variant_names()
        variants_created = self._seed_variants(manager, names)
        discounts_created = self._seed_discount(manager)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"variant_names={len(names)}, "
                f"variants={variants_created}, "
                f"discounts={discounts_created}"
            )
        )

    def _seed_users(self):
        User = get_user_model()
        manager_group, _ = Group.objects.get_or_create(name=settings.MANAGER_ROLE)
        customer_group, _ = Group.objects.get_or_create(name=Role.CUSTOMER)

        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        manager = User.objects.filter(username="manager").first()
        if manager is None:
            manager = User.objects.create_user("manager", password="manager123", is_staff=True)
            created += 1
        manager.groups.add(manager_group)
        customer = User.objects.filter(username="user").first()
        if customer is None:
            customer = User.objects.create_user("user", password="user123")
            created += 1
        customer.groups.add(customer_group)
        return manager, created

    def _seed_variant_names(self) -> dict[str, VariantName]:
        self.stdout.write("Creating variant names...")
        names = {}
        for name in ("Color", "Size"):
            names[name], _ = VariantName.objects.get_or_create(name=name)
        self.stdout.write(self.style.SUCCESS("Creating variant names... Done!"))
        return names

    def _seed_variants(self, manager, names: dict[str, VariantName]) -> int:
        self.stdout.write("Creating product variants...")
        product, _ = Product.objects.get_or_create(
            name=DEMO_PRODUCT,
            defaults={
                "price": Decimal("49.90"),
                "stock_quantity": 0,
                "status": ProductStatus.ACTIVE,
            },
        )
        if product.has_variant:
            self.stdout.write(self.style.WARNING("Skipping variants (already seeded)."))
            return 0

        batch = [
            AddProductVariantDTO(
                price=Decimal("49.90"),
                stock_quantity=stock,
                variant_values=[
                    VariantValueDTO(variant_name_id=names["Color"].id, value=color),
                    VariantValueDTO(variant_name_id=names["Size"].id, value=size),
                ],
            )
            for color, size, stock in (
                ("Red", "S", 10),
                ("Red", "M", 8),
                ("Blue", "S", 0),
                ("Blue", "M", 5),
            )
        ]
        service = ProductVariantService(repository=ProductDjangoRepository())
        result = service.add_product_variants(manager, product.id, batch)
        if not result.is_success:
            self.stdout.write(self.style.ERROR(f"Variants rejected: {result.error_code}"))
            return 0
        self.stdout.write(self.style.SUCCESS("Creating product variants... Done!"))
        return result.data

    def _seed_discount(self, manager) -> int:
        self.stdout.write("Creating discounts...")
        service = DiscountService(
            discount_repository=DiscountDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        product = Product.objects.filter(name=DEMO_PRODUCT).first()
        dto = AddDiscountDTO(
            name=DEMO_DISCOUNT,
            description="10% off the first order.",
            is_percentage=True,
            discount_value=Decimal("10"),
            maximum_discount=Decimal("50.00"),
            is_first_order=True,
            product_ids=[product.id] if product else [],
            discount_codes=[AddDiscountCodeDTO(code="WELCOME10")],
        )
        result = service.add_discount(manager, dto)
        if not result.is_success:
            self.stdout.write(self.style.WARNING(f"Skipping discount ({result.error_code})."))
            return 0
        self.stdout.write(self.style.SUCCESS("Creating discounts... Done!"))
        return 1
