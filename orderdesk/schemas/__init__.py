"""
Pydantic schemas package.
"""
from orderdesk.schemas.common import ApiResponse, ErrorBody, ErrorResponse
from orderdesk.schemas.order import (
    Address,
    CancelOrderRequest,
    CreateOrderRequest,
    OrderItem,
    OrderResponse,
    PaginatedOrdersResponse,
    ProcessPaymentRequest,
    UpdateOrderStatusRequest,
)
from orderdesk.schemas.payment import PaymentResult, RefundResult

__all__ = [
    # Envelope
    "ApiResponse",
    "ErrorBody",
    "ErrorResponse",
    # Order
    "OrderItem",
    "Address",
    "CreateOrderRequest",
    "UpdateOrderStatusRequest",
    "ProcessPaymentRequest",
    "CancelOrderRequest",
    "OrderResponse",
    "PaginatedOrdersResponse",
    # Payment
    "PaymentResult",
    "RefundResult",
]
