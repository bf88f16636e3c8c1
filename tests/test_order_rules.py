"""
Tests for order totals and status transition rules.
"""
from decimal import Decimal

import pytest

from orderdesk.core.errors import BusinessError, ErrorKind
from orderdesk.models.order import OrderStatus
from orderdesk.schemas.order import OrderItem
from orderdesk.services.order_rules import (
    ALLOWED_TRANSITIONS,
    calculate_order_totals,
    can_transition,
    validate_status_transition,
)


def _items(*totals: float) -> list[OrderItem]:
    return [
        OrderItem(
            product_id=f"p{index}",
            product_name=f"Product {index}",
            product_sku=f"SKU{index}",
            quantity=1,
            unit_price=total,
            total_price=total,
        )
        for index, total in enumerate(totals)
    ]


class TestCalculateOrderTotals:
    """Tests for the totals calculator."""

    def test_small_order_pays_flat_shipping(self):
        totals = calculate_order_totals(_items(40))

        assert totals.subtotal == Decimal("40.00")
        assert totals.tax_amount == Decimal("4.00")
        assert totals.shipping_amount == Decimal("10.00")
        assert totals.discount_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("54.00")

    def test_shipping_free_above_fifty(self):
        totals = calculate_order_totals(_items(35, 25))

        assert totals.subtotal == Decimal("60.00")
        assert totals.shipping_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("66.00")

    def test_shipping_charged_at_exactly_fifty(self):
        totals = calculate_order_totals(_items(50))

        assert totals.shipping_amount == Decimal("10.00")

    def test_discount_above_one_hundred(self):
        totals = calculate_order_totals(_items(100, 50))

        assert totals.subtotal == Decimal("150.00")
        assert totals.discount_amount == Decimal("15.00")
        assert totals.total_amount == Decimal("150.00")

    def test_no_discount_below_one_hundred(self):
        totals = calculate_order_totals(_items(90))

        assert totals.discount_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("99.00")

    def test_no_discount_at_exactly_one_hundred(self):
        totals = calculate_order_totals(_items(100))

        assert totals.discount_amount == Decimal("0.00")

    def test_each_figure_rounded_half_up(self):
        totals = calculate_order_totals(_items(10.05, 2.30))

        assert totals.subtotal == Decimal("12.35")
        assert totals.tax_amount == Decimal("1.24")
        assert totals.total_amount == Decimal("23.59")

    def test_float_noise_does_not_leak(self):
        totals = calculate_order_totals(_items(0.1, 0.2))

        assert totals.subtotal == Decimal("0.30")

    @pytest.mark.parametrize(
        "line_totals",
        [
            (40,),
            (35, 25),
            (100, 50),
            (19.99, 5.01, 0.5),
            (10.05, 2.30),
            (333.33, 666.67, 1.11),
        ],
    )
    def test_total_matches_components(self, line_totals):
        totals = calculate_order_totals(_items(*line_totals))

        recomposed = (
            totals.subtotal
            + totals.tax_amount
            + totals.shipping_amount
            - totals.discount_amount
        )
        assert abs(recomposed - totals.total_amount) <= Decimal("0.01")

    def test_as_dict_uses_column_names(self):
        totals = calculate_order_totals(_items(60))

        assert set(totals.as_dict()) == {
            "subtotal",
            "tax_amount",
            "shipping_amount",
            "discount_amount",
            "total_amount",
        }


class TestStatusTransitions:
    """Tests for the order status state machine."""

    @pytest.mark.parametrize(
        "current,requested",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
            (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
            (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.DELIVERED, OrderStatus.REFUNDED),
        ],
    )
    def test_allowed_transitions_pass(self, current, requested):
        validate_status_transition(current, requested)

    def test_backwards_transition_rejected(self):
        with pytest.raises(BusinessError) as exc_info:
            validate_status_transition(OrderStatus.SHIPPED, OrderStatus.PENDING)

        assert exc_info.value.kind is ErrorKind.BUSINESS
        assert exc_info.value.message == "Invalid status transition from shipped to pending"

    @pytest.mark.parametrize("terminal", [OrderStatus.CANCELLED, OrderStatus.REFUNDED])
    @pytest.mark.parametrize("requested", list(OrderStatus))
    def test_terminal_states_have_no_exits(self, terminal, requested):
        with pytest.raises(BusinessError):
            validate_status_transition(terminal, requested)

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_no_self_transitions(self, status):
        assert status not in ALLOWED_TRANSITIONS[status]
        assert not can_transition(status, status)

    def test_accepts_raw_status_strings(self):
        validate_status_transition("pending", "confirmed")

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(OrderStatus)
