"""Unit tests for CheckoutService.

Covers:
- Quote: resolved items are sent to the carrier with package data.
- Order creation: totals, snapshots, stock decrement, preference attached.
- Coupons: discount folded into the payment breakdown.
- Validation before any external call (empty cart, foreign address).
- Atomicity: a payment failure leaves no order and restores stock.
- Concurrent stock loss surfaces as InsufficientStock.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model

from modules.checkout.dtos import (
    CreateOrderDTO,
    QuoteRequestDTO,
    ShippingSelectionDTO,
    parse_cart_lines,
)
from modules.checkout.exceptions import InsufficientStock, InvalidInput
from modules.checkout.services import CheckoutService
from modules.core.conf import get_checkout_settings
from modules.coupons.exceptions import CouponInvalid
from modules.coupons.models import Coupon, DiscountType
from modules.coupons.repositories import CouponDjangoRepository
from modules.coupons.services import CouponService
from modules.customers.exceptions import AddressNotFound, CustomerNotFound
from modules.customers.models import Address, Customer
from modules.customers.repositories import AddressDjangoRepository, CustomerDjangoRepository
from modules.orders.models import Order, OrderItem
from modules.orders.repositories import OrderDjangoRepository
from modules.payments.exceptions import PaymentGatewayFailure
from modules.products.exceptions import StockConflict
from modules.products.models import Product
from modules.products.repositories import ProductDjangoRepository

pytestmark = pytest.mark.unit

User = get_user_model()


@pytest.fixture()
def service(fake_shipping, fake_payment):
    product_repository = ProductDjangoRepository()
    return CheckoutService(
        product_repository=product_repository,
        customer_repository=CustomerDjangoRepository(),
        address_repository=AddressDjangoRepository(),
        order_repository=OrderDjangoRepository(product_repository),
        coupon_service=CouponService(CouponDjangoRepository()),
        shipping_gateway=fake_shipping,
        payment_gateway=fake_payment,
        config=get_checkout_settings(),
    )


@pytest.fixture()
def coupon():
    return Coupon.objects.create(
        code="TRES", discount_type=DiscountType.FIXED, value=300
    )


PAC = {"carrier": "Correios", "name": "PAC", "price_cents": 500, "delivery_time_days": 7}


def _dto(address, items=None, shipping=PAC, coupon_code=None) -> CreateOrderDTO:
    return CreateOrderDTO(
        items=parse_cart_lines(items) if items else [],
        address_id=str(address.id),
        shipping=ShippingSelectionDTO.model_validate(shipping),
        coupon_code=coupon_code,
    )


# ---------------------------------------------------------------------------
# Quote
# ---------------------------------------------------------------------------


class TestQuote:
    def test_sends_resolved_items_to_carrier(self, service, fake_shipping, product):
        dto = QuoteRequestDTO(
            items=parse_cart_lines([{"sku": product.sku, "qty": 2}]),
            postal_code="01310-100",
        )
        options = service.quote(dto)

        assert [option.name for option in options] == ["PAC", "SEDEX"]
        postal_code, items = fake_shipping.calls[0]
        assert postal_code == "01310100"
        assert items[0].product_id == product.pk
        assert items[0].quantity == 2
        assert items[0].unit_price_cents == 1000
        assert items[0].weight_grams == product.weight_grams

    def test_empty_cart_never_reaches_carrier(self, service, fake_shipping):
        dto = QuoteRequestDTO(items=[], postal_code="01310100")
        with pytest.raises(InvalidInput):
            service.quote(dto)
        assert fake_shipping.calls == []


# ---------------------------------------------------------------------------
# Create order
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_creates_order_with_items_and_preference(
        self, service, fake_payment, user, customer, address, product
    ):
        result = service.create_order(
            _dto(address, [{"sku": product.sku, "qty": 2}]), user
        )

        order = Order.objects.get(id=result.order.id)
        assert order.subtotal_cents == 2000
        assert order.shipping_cents == 500
        assert order.discount_cents == 0
        assert order.total_cents == 2500
        assert order.shipping_carrier == "Correios"
        assert order.shipping_service == "PAC"
        assert order.shipping_estimate_days == 7
        assert order.payment_preference_id == "pref-123"
        assert order.order_number.startswith("ORD-")
        assert result.preference.redirect_url.endswith("pref-123")

        item = OrderItem.objects.get(order=order)
        assert item.title == "Stack Duplo"
        assert item.sku == "STACK-DUPLO"
        assert item.quantity == 2
        assert item.unit_price_cents == 1000

        product.refresh_from_db()
        assert product.stock_quantity == 8

        call = fake_payment.calls[0]
        assert call["external_reference"] == str(order.id)
        assert call["payer"].email == customer.email
        assert call["payer"].cpf == customer.document
        assert [line.title for line in call["items"]] == ["Stack Duplo", "Frete - PAC"]

    def test_coupon_discount_reaches_payment_items(
        self, service, fake_payment, user, customer, address, product, coupon
    ):
        result = service.create_order(
            _dto(address, [{"sku": product.sku, "qty": 2}], coupon_code="tres"), user
        )

        assert result.order.discount_cents == 300
        assert result.order.total_cents == 2200
        assert result.order.coupon == coupon
        assert result.order.coupon_code == "TRES"
        first, shipping = fake_payment.calls[0]["items"]
        assert first.unit_price == Decimal("8.50")
        assert shipping.unit_price == Decimal("5.00")

    def test_untracked_stock_is_left_alone(
        self, service, user, customer, address, untracked_product
    ):
        service.create_order(_dto(address, [{"sku": untracked_product.sku, "qty": 3}]), user)
        untracked_product.refresh_from_db()
        assert untracked_product.stock_quantity == 0

    def test_no_shipping_line_for_free_shipping(
        self, service, fake_payment, user, customer, address, product
    ):
        service.create_order(
            _dto(address, [{"sku": product.sku}], shipping={"carrier": "Retirada"}), user
        )
        assert len(fake_payment.calls[0]["items"]) == 1

    def test_price_override_only_when_allowed(
        self, service, user, customer, address, product
    ):
        items = [{"sku": product.sku, "price_cents": 1}]
        result = service.create_order(_dto(address, items), user)
        assert result.order.subtotal_cents == 1000

        result = service.create_order(_dto(address, items), user, allow_price_override=True)
        assert result.order.subtotal_cents == 1


class TestCreateOrderValidation:
    def test_empty_cart_before_any_external_call(
        self, service, fake_payment, user, customer, address
    ):
        with pytest.raises(InvalidInput):
            service.create_order(_dto(address, []), user)
        assert fake_payment.calls == []
        assert Order.objects.count() == 0

    def test_caller_without_profile(self, service, address, product):
        stranger = User.objects.create_user(username="stranger", password="x")
        with pytest.raises(CustomerNotFound):
            service.create_order(_dto(address, [{"sku": product.sku}]), stranger)

    def test_foreign_address_rejected(self, service, user, customer, product):
        other_user = User.objects.create_user(username="other", password="x")
        other_customer = Customer.objects.create(
            user=other_user, name="Bruno Lima", email="bruno@example.com"
        )
        foreign = Address.objects.create(
            customer=other_customer,
            postal_code="20040002",
            street="Rua da Assembleia",
            number="10",
            city="Rio de Janeiro",
            state="RJ",
        )
        with pytest.raises(AddressNotFound):
            service.create_order(_dto(foreign, [{"sku": product.sku}]), user)
        assert Order.objects.count() == 0

    def test_invalid_coupon_creates_nothing(
        self, service, fake_payment, user, customer, address, product
    ):
        with pytest.raises(CouponInvalid):
            service.create_order(
                _dto(address, [{"sku": product.sku}], coupon_code="NOPE"), user
            )
        assert Order.objects.count() == 0
        assert fake_payment.calls == []


class TestCreateOrderAtomicity:
    def test_payment_failure_rolls_everything_back(
        self, service, fake_payment, user, customer, address, product
    ):
        fake_payment.fail = True

        with pytest.raises(PaymentGatewayFailure):
            service.create_order(_dto(address, [{"sku": product.sku, "qty": 3}]), user)

        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0
        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_stock_lost_between_check_and_decrement(
        self, service, user, customer, address, product
    ):
        with patch.object(
            ProductDjangoRepository,
            "decrement_stock",
            side_effect=StockConflict(product.pk, 2),
        ):
            with pytest.raises(InsufficientStock) as exc_info:
                service.create_order(_dto(address, [{"sku": product.sku, "qty": 2}]), user)

        assert exc_info.value.product.pk == product.pk
        assert Order.objects.count() == 0

    def test_conditional_decrement_refuses_oversell(self, product):
        Product.objects.filter(pk=product.pk).update(stock_quantity=1)
        with pytest.raises(StockConflict):
            ProductDjangoRepository().decrement_stock(product.pk, 2)
        product.refresh_from_db()
        assert product.stock_quantity == 1
