"""
SQLAlchemy models package.
All models are imported here so their tables register on the metadata.
"""
from orderdesk.models.order import (
    Order,
    OrderSequence,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)

__all__ = [
    "Order",
    "OrderSequence",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
]
