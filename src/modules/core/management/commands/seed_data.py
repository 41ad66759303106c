from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.coupons.models import Coupon, DiscountType
from modules.customers.models import Address, Customer
from modules.products.models import Product


class Command(BaseCommand):
    help = "Seed the catalog, coupons and a demo buyer (idempotent)."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        products = self._seed_products()
        coupons = self._seed_coupons()
        users_created = self._seed_buyer()

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"products={len(products)}, "
                f"coupons={len(coupons)}, "
                f"users={users_created}"
            )
        )

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("STACK-DUPLO", "Stack Duplo", 8990, 300, 50),
            ("STACK-SIMPLES", "Stack Simples", 5490, 180, 80),
            ("KIT-INICIANTE", "Kit Iniciante", 12990, 650, 25),
            ("CAMISETA-P", "Camiseta P", 7990, 250, 40),
            ("ADESIVO", "Adesivo", 990, 20, 0),
        ]
        for sku, name, price_cents, weight_grams, stock in catalog:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "price_cents": price_cents,
                    "weight_grams": weight_grams,
                    "stock_managed": stock > 0,
                    "stock_quantity": stock,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_coupons(self) -> list[Coupon]:
        self.stdout.write("Creating coupons...")
        coupons: list[Coupon] = []
        seed_coupons = [
            ("BEMVINDO10", DiscountType.PERCENT, 10, 0),
            ("FRETE15", DiscountType.FIXED, 1500, 10000),
        ]
        for code, discount_type, value, min_subtotal_cents in seed_coupons:
            coupon, _ = Coupon.objects.get_or_create(
                code=code,
                defaults={
                    "discount_type": discount_type,
                    "value": value,
                    "min_subtotal_cents": min_subtotal_cents,
                },
            )
            coupons.append(coupon)
        self.stdout.write(self.style.SUCCESS("Creating coupons... Done!"))
        return coupons

    def _seed_buyer(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1

        buyer = User.objects.filter(username="cliente").first()
        if buyer is None:
            buyer = User.objects.create_user(
                "cliente", email="cliente@example.com", password="cliente123"
            )
            created += 1

        customer, _ = Customer.objects.get_or_create(
            user=buyer,
            defaults={
                "name": "Ana Souza",
                "email": "cliente@example.com",
                "document": "39053344705",
            },
        )
        if not customer.addresses.exists():
            Address.objects.create(
                customer=customer,
                postal_code="01310100",
                street="Avenida Paulista",
                number="1000",
                district="Bela Vista",
                city="São Paulo",
                state="SP",
            )
        return created
