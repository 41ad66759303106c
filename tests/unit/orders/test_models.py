"""Unit tests for Order / OrderItem models and the order repository."""

from __future__ import annotations

import re

import pytest
from django.db import IntegrityError, transaction
from freezegun import freeze_time

from modules.checkout.dtos import ShippingSelectionDTO
from modules.checkout.pricing import compute_totals
from modules.checkout.resolver import ResolvedItem
from modules.orders.models import Order, OrderItem
from modules.orders.repositories import OrderDjangoRepository

pytestmark = pytest.mark.unit

SHIPPING = ShippingSelectionDTO(
    carrier="Correios", service="SEDEX", price_cents=4190, delivery_time_days=2
)


@pytest.fixture()
def repository():
    return OrderDjangoRepository()


@pytest.fixture()
def order(repository, customer, address):
    return repository.create_order(compute_totals(2000, 4190, 0), SHIPPING, address, customer)


class TestOrderNumber:
    @freeze_time("2025-03-14 10:00:00")
    def test_format(self):
        number = Order.generate_order_number()
        assert re.fullmatch(r"ORD-20250314-[0-9A-F]{6}", number)

    def test_assigned_on_save(self, order):
        assert order.order_number.startswith("ORD-")

    def test_str_shows_total(self, order):
        assert str(order).endswith("(R$ 61.90)")


class TestOrderRepository:
    def test_create_order_copies_shipping_selection(self, order):
        order.refresh_from_db()
        assert order.shipping_carrier == "Correios"
        assert order.shipping_service == "SEDEX"
        assert order.shipping_estimate_days == 2
        assert order.total_cents == 6190
        assert order.coupon is None
        assert order.coupon_code == ""

    def test_record_items_snapshots_and_decrements(self, repository, order, product):
        repository.record_items(
            order, [ResolvedItem(product=product, quantity=3, unit_price_cents=950)]
        )

        item = order.items.get()
        assert (item.title, item.sku, item.quantity, item.unit_price_cents) == (
            "Stack Duplo",
            "STACK-DUPLO",
            3,
            950,
        )
        assert item.subtotal_cents == 2850
        product.refresh_from_db()
        assert product.stock_quantity == 7

    def test_snapshot_survives_catalog_change(self, repository, order, product):
        repository.record_items(
            order, [ResolvedItem(product=product, quantity=1, unit_price_cents=1000)]
        )
        product.name = "Stack Duplo v2"
        product.price_cents = 1500
        product.save()

        item = order.items.get()
        assert item.title == "Stack Duplo"
        assert item.unit_price_cents == 1000

    def test_attach_payment_preference(self, repository, order):
        repository.attach_payment_preference(order, "pref-xyz")
        order.refresh_from_db()
        assert order.payment_preference_id == "pref-xyz"

    def test_get_for_customer_scopes_by_owner(self, repository, order, customer):
        assert repository.get_for_customer(order.id, customer) == order
        assert repository.get_for_customer("not-a-uuid", customer) is None

    def test_quantity_must_be_positive(self, order, product):
        with pytest.raises(IntegrityError), transaction.atomic():
            OrderItem.objects.create(
                order=order,
                product=product,
                title="x",
                sku="x",
                quantity=0,
                unit_price_cents=1,
            )
