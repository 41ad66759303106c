"""Order pricing and discount allocation.

Pure functions over integer centavos; nothing here touches the database.

Totals:
    subtotal = sum(unit_price_cents * quantity)
    total    = max(0, subtotal + shipping - discount)

Payment line items are built per resolved item, plus one shipping line
when shipping is charged.  The payment provider only receives unit prices,
so the discount is folded into those prices with a greedy, order-dependent
pass: the first lines absorb as much of the discount as they can and later
lines keep their price once nothing is left.  The provider's totals depend
on this exact order, so the allocation is deliberately not proportional.

Dividing a discounted line by its quantity can leave a per-unit rounding
remainder; across all lines the payment total may differ from ``total``
by at most one centavo per line.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, List, Sequence

from modules.payments.dtos import PaymentLineItem

if TYPE_CHECKING:
    from modules.checkout.resolver import ResolvedItem

CENT = Decimal("0.01")
SHIPPING_LINE_TITLE = "Frete"


@dataclass(frozen=True)
class OrderTotals:
    subtotal_cents: int
    shipping_cents: int
    discount_cents: int
    total_cents: int


@dataclass(frozen=True)
class PricedOrder:
    totals: OrderTotals
    payment_items: List[PaymentLineItem]


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_major(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def line_total_cents(item: PaymentLineItem) -> int:
    return round_half_up(item.unit_price * 100) * item.quantity


def payment_total_cents(items: Sequence[PaymentLineItem]) -> int:
    """What the payment provider will charge for ``items``, in centavos."""
    return sum(line_total_cents(item) for item in items)


def compute_subtotal(items: Sequence[ResolvedItem]) -> int:
    return sum(item.unit_price_cents * item.quantity for item in items)


def compute_totals(subtotal_cents: int, shipping_cents: int, discount_cents: int) -> OrderTotals:
    return OrderTotals(
        subtotal_cents=subtotal_cents,
        shipping_cents=shipping_cents,
        discount_cents=discount_cents,
        total_cents=max(0, subtotal_cents + shipping_cents - discount_cents),
    )


def shipping_line_title(service_name: str) -> str:
    return f"{SHIPPING_LINE_TITLE} - {service_name}" if service_name else SHIPPING_LINE_TITLE


def build_payment_items(
    items: Sequence[ResolvedItem],
    shipping_cents: int,
    shipping_service: str = "",
    currency_id: str = "BRL",
) -> List[PaymentLineItem]:
    payment_items = [
        PaymentLineItem(
            title=item.product.name,
            quantity=item.quantity,
            unit_price=cents_to_major(item.unit_price_cents),
            currency_id=currency_id,
        )
        for item in items
    ]
    if shipping_cents > 0:
        payment_items.append(
            PaymentLineItem(
                title=shipping_line_title(shipping_service),
                quantity=1,
                unit_price=cents_to_major(shipping_cents),
                currency_id=currency_id,
            )
        )
    return payment_items


def allocate_discount(
    payment_items: Sequence[PaymentLineItem], discount_cents: int
) -> List[PaymentLineItem]:
    """Fold ``discount_cents`` into the unit prices, first lines first."""
    if discount_cents <= 0 or not payment_items:
        return list(payment_items)

    remaining = discount_cents
    allocated = []
    for item in payment_items:
        line_cents = line_total_cents(item)
        if remaining <= 0 or line_cents <= 0:
            allocated.append(item)
            continue

        deduction = min(line_cents, remaining)
        unit_cents = max(0, round_half_up(Decimal(line_cents - deduction) / item.quantity))
        allocated.append(item.model_copy(update={"unit_price": cents_to_major(unit_cents)}))
        remaining -= deduction

    return allocated


def price_order(
    items: Sequence[ResolvedItem],
    shipping_cents: int,
    discount_cents: int,
    shipping_service: str = "",
    currency_id: str = "BRL",
) -> PricedOrder:
    """Totals plus the discounted payment breakdown for a resolved cart."""
    totals = compute_totals(compute_subtotal(items), shipping_cents, discount_cents)
    payment_items = build_payment_items(items, shipping_cents, shipping_service, currency_id)
    return PricedOrder(
        totals=totals,
        payment_items=allocate_discount(payment_items, discount_cents),
    )
