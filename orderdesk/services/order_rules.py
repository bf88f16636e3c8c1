"""
Pure business rules for orders: totals and status transitions.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from orderdesk.core.errors import BusinessError
from orderdesk.models.order import OrderStatus

TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = Decimal("50")
FLAT_SHIPPING = Decimal("10")
DISCOUNT_THRESHOLD = Decimal("100")
DISCOUNT_RATE = Decimal("0.10")

CENTS = Decimal("0.01")

ALLOWED_TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


class PricedItem(Protocol):
    total_price: float


@dataclass(frozen=True)
class OrderTotals:
    """Monetary summary of an order, each value rounded to cents."""

    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "shipping_amount": self.shipping_amount,
            "discount_amount": self.discount_amount,
            "total_amount": self.total_amount,
        }


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_order_totals(items: Iterable[PricedItem]) -> OrderTotals:
    """
    Compute subtotal, tax, shipping, discount and total for line items.

    Tax is 10% of the subtotal. Shipping is free above 50, otherwise a
    flat 10. Orders above 100 get a 10% discount. Every figure is rounded
    on its own from the unrounded intermediates.
    """
    subtotal = sum((Decimal(str(item.total_price)) for item in items), Decimal("0"))

    tax_amount = subtotal * TAX_RATE
    shipping_amount = Decimal("0") if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING
    discount_amount = subtotal * DISCOUNT_RATE if subtotal > DISCOUNT_THRESHOLD else Decimal("0")
    total_amount = subtotal + tax_amount + shipping_amount - discount_amount

    return OrderTotals(
        subtotal=_to_cents(subtotal),
        tax_amount=_to_cents(tax_amount),
        shipping_amount=_to_cents(shipping_amount),
        discount_amount=_to_cents(discount_amount),
        total_amount=_to_cents(total_amount),
    )


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[OrderStatus(current)]


def validate_status_transition(current: OrderStatus, requested: OrderStatus) -> None:
    """Raise BusinessError unless ``current -> requested`` is a legal move."""
    current = OrderStatus(current)
    requested = OrderStatus(requested)
    if not can_transition(current, requested):
        raise BusinessError(
            f"Invalid status transition from {current.value} to {requested.value}"
        )
