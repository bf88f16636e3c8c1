"""
Services package for business logic layer.
"""
from orderdesk.services.order_rules import (
    ALLOWED_TRANSITIONS,
    OrderTotals,
    calculate_order_totals,
    validate_status_transition,
)
from orderdesk.services.order_service import OrderService
from orderdesk.services.payment_service import PaymentService

__all__ = [
    "OrderService",
    "PaymentService",
    "OrderTotals",
    "ALLOWED_TRANSITIONS",
    "calculate_order_totals",
    "validate_status_transition",
]
