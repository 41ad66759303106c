"""Checkout service layer (Use Cases).

Orchestrates shipping quotes and order creation.  ``create_order`` is the
unit-of-work boundary: order header, item snapshots, stock decrements and
the payment preference id are written inside one transaction that commits
only after the payment provider has answered.

Business rules enforced:
- Every cart line resolves to an active product with enough stock.
- The delivery address belongs to the caller's customer profile.
- Coupons are validated and their discount clamped to the subtotal.
- The payment breakdown carries the coupon discount (greedy allocation).
- Any failure, including the payment call, rolls everything back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.db import transaction

from modules.checkout.exceptions import InsufficientStock
from modules.checkout.pricing import compute_subtotal, price_order
from modules.checkout.resolver import ItemResolver
from modules.customers.exceptions import AddressNotFound, CustomerNotFound
from modules.payments.dtos import Payer
from modules.payments.exceptions import PaymentGatewayFailure
from modules.products.exceptions import StockConflict
from modules.shipping.dtos import ShippingItem

if TYPE_CHECKING:
    from modules.checkout.dtos import CreateOrderDTO, QuoteRequestDTO
    from modules.checkout.resolver import ResolvedItem
    from modules.core.conf import CheckoutSettings
    from modules.coupons.services import CouponService
    from modules.customers.models import Customer
    from modules.customers.repositories.interfaces import (
        IAddressRepository,
        ICustomerRepository,
    )
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.dtos import PaymentPreference
    from modules.payments.gateways import PaymentGateway
    from modules.products.repositories.interfaces import IProductRepository
    from modules.shipping.dtos import ShippingOption
    from modules.shipping.gateways import ShippingGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    preference: PaymentPreference


def to_shipping_items(items: List[ResolvedItem]) -> List[ShippingItem]:
    return [
        ShippingItem(
            product_id=item.product.pk,
            quantity=item.quantity,
            unit_price_cents=item.unit_price_cents,
            weight_grams=item.product.weight_grams,
            width_cm=item.product.width_cm,
            height_cm=item.product.height_cm,
            length_cm=item.product.length_cm,
        )
        for item in items
    ]


def build_payer(customer: Customer) -> Payer:
    return Payer(email=customer.email, name=customer.name, cpf=customer.document or "")


class CheckoutService:
    """Application service for the checkout use-cases.

    Receives repositories and gateways via constructor injection (DIP).
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        customer_repository: ICustomerRepository,
        address_repository: IAddressRepository,
        order_repository: IOrderRepository,
        coupon_service: CouponService,
        shipping_gateway: ShippingGateway,
        payment_gateway: PaymentGateway,
        config: CheckoutSettings,
    ) -> None:
        self._resolver = ItemResolver(product_repository)
        self._customer_repo = customer_repository
        self._address_repo = address_repository
        self._order_repo = order_repository
        self._coupons = coupon_service
        self._shipping = shipping_gateway
        self._payments = payment_gateway
        self._config = config

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def quote(self, dto: QuoteRequestDTO) -> List[ShippingOption]:
        """Quote shipping for a cart.

        Raises:
            InvalidInput: empty or unusable cart.
            ProductNotFound / InsufficientStock: see ``ItemResolver``.
            ShippingUnavailable: the carrier could not be reached.
        """
        items = self._resolver.resolve(dto.items)
        options = self._shipping.quote(dto.postal_code, to_shipping_items(items))
        logger.info(
            "checkout.quoted",
            postal_code=dto.postal_code,
            item_count=len(items),
            option_count=len(options),
        )
        return options

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(
        self, dto: CreateOrderDTO, user: Any, allow_price_override: bool = False
    ) -> CheckoutResult:
        """Create an order and its payment preference atomically.

        Steps:
        1. Resolve cart lines (before any external call).
        2. Load the caller's profile and the owned delivery address.
        3. Evaluate the coupon against the subtotal.
        4. Price the order and build the discounted payment breakdown.
        5. Persist order + items, decrementing tracked stock.
        6. Create the payment preference and attach its id.

        Raises:
            InvalidInput: empty or unusable cart.
            ProductNotFound / InsufficientStock: see ``ItemResolver``.
            CustomerNotFound: the caller has no customer profile.
            AddressNotFound: missing address or owned by someone else.
            CouponInvalid: unknown, inactive, expired or below minimum.
            PaymentGatewayFailure: the provider failed; nothing is kept.
        """
        log = logger.bind(user_id=getattr(user, "pk", None))
        log.info("checkout.creation_started")

        items = self._resolver.resolve(dto.items, allow_price_override=allow_price_override)

        customer = self._customer_repo.get_by_user(user)
        if customer is None:
            raise CustomerNotFound("Customer profile not found.")
        address = self._address_repo.get_for_customer(dto.address_id, customer)
        if address is None:
            raise AddressNotFound(f"Address {dto.address_id} not found.")

        subtotal_cents = compute_subtotal(items)
        coupon, discount_cents = self._evaluate_coupon(dto.coupon_code, subtotal_cents)

        shipping = dto.shipping
        priced = price_order(
            items,
            shipping_cents=shipping.price_cents,
            discount_cents=discount_cents,
            shipping_service=shipping.name or "",
            currency_id=self._config.currency_id,
        )

        order = self._order_repo.create_order(
            priced.totals, shipping, address, customer, coupon=coupon
        )
        log = log.bind(order_id=str(order.id), order_number=order.order_number)
        self._record_items(order, items)

        try:
            preference = self._payments.create_preference(
                priced.payment_items, build_payer(customer), str(order.id)
            )
        except PaymentGatewayFailure as exc:
            log.error("checkout.payment_failed", error=str(exc))
            raise

        self._order_repo.attach_payment_preference(order, preference.preference_id)
        log.info(
            "checkout.order_created",
            total_cents=priced.totals.total_cents,
            discount_cents=priced.totals.discount_cents,
            preference_id=preference.preference_id,
        )
        return CheckoutResult(order=order, preference=preference)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _evaluate_coupon(self, code: Optional[str], subtotal_cents: int):
        if not code:
            return None, 0
        coupon = self._coupons.find_active_coupon(code)
        return coupon, self._coupons.compute_discount(coupon, subtotal_cents)

    def _record_items(self, order: Order, items: List[ResolvedItem]) -> None:
        try:
            self._order_repo.record_items(order, items)
        except StockConflict as exc:
            # Another order took the units between resolution and decrement.
            item = next(i for i in items if i.product.pk == exc.product_id)
            item.product.refresh_from_db(fields=["stock_quantity"])
            raise InsufficientStock(item.product, item.quantity) from exc


def build_checkout_service() -> CheckoutService:
    """Wire the service with its Django repositories and HTTP gateways."""
    from modules.core.conf import get_checkout_settings
    from modules.coupons.repositories import CouponDjangoRepository
    from modules.coupons.services import CouponService
    from modules.customers.repositories import (
        AddressDjangoRepository,
        CustomerDjangoRepository,
    )
    from modules.orders.repositories import OrderDjangoRepository
    from modules.payments.gateways import MercadoPagoPaymentGateway
    from modules.products.repositories import ProductDjangoRepository
    from modules.shipping.gateways import MelhorEnvioShippingGateway

    config = get_checkout_settings()
    product_repository = ProductDjangoRepository()
    return CheckoutService(
        product_repository=product_repository,
        customer_repository=CustomerDjangoRepository(),
        address_repository=AddressDjangoRepository(),
        order_repository=OrderDjangoRepository(product_repository),
        coupon_service=CouponService(CouponDjangoRepository()),
        shipping_gateway=MelhorEnvioShippingGateway(config),
        payment_gateway=MercadoPagoPaymentGateway(config),
        config=config,
    )
