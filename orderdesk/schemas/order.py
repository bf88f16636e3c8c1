"""
Order Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderdesk.core.config import settings
from orderdesk.models.order import OrderStatus, PaymentMethod, PaymentStatus

# Order totals are stored as Numeric(12, 2); a subtotal at this cap still fits
# once tax and shipping are added.
MAX_ORDER_AMOUNT = 9_000_000_000


class OrderItem(BaseModel):
    """A single product line within an order."""

    product_id: str = Field(..., min_length=1, alias="productId")
    product_name: str = Field(..., min_length=1, alias="productName")
    product_sku: str = Field(..., min_length=1, alias="productSku")
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(
        ..., ge=0, le=MAX_ORDER_AMOUNT, allow_inf_nan=False, alias="unitPrice"
    )
    total_price: float = Field(
        ..., ge=0, le=MAX_ORDER_AMOUNT, allow_inf_nan=False, alias="totalPrice"
    )
    product_image: Optional[str] = Field(None, alias="productImage")

    model_config = ConfigDict(populate_by_name=True)


class Address(BaseModel):
    """Shipping or billing address."""

    first_name: str = Field(..., min_length=1, alias="firstName")
    last_name: str = Field(..., min_length=1, alias="lastName")
    address_line1: str = Field(..., min_length=1, alias="addressLine1")
    address_line2: Optional[str] = Field(None, alias="addressLine2")
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1, alias="postalCode")
    country: str = Field(..., min_length=1)
    phone: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class CreateOrderRequest(BaseModel):
    """Schema for placing a new order."""

    user_id: str = Field(..., min_length=1, alias="userId")
    items: list[OrderItem] = Field(..., min_length=1)
    shipping_address: Address = Field(..., alias="shippingAddress")
    billing_address: Address = Field(..., alias="billingAddress")
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    currency: str = Field(settings.default_currency, min_length=3, max_length=3)
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("items")
    @classmethod
    def check_order_amount(cls, items: list[OrderItem]) -> list[OrderItem]:
        if sum(item.total_price for item in items) > MAX_ORDER_AMOUNT:
            raise ValueError(f"Order subtotal must not exceed {MAX_ORDER_AMOUNT}")
        return items


class UpdateOrderStatusRequest(BaseModel):
    """Schema for moving an order to a new status."""

    status: OrderStatus
    reason: Optional[str] = None


class ProcessPaymentRequest(BaseModel):
    """Schema for paying for an order."""

    payment_method: PaymentMethod = Field(..., alias="paymentMethod")

    model_config = ConfigDict(populate_by_name=True)


class CancelOrderRequest(BaseModel):
    """Schema for cancelling an order."""

    reason: str = Field(..., min_length=1)
    cancelled_by: str = Field(..., min_length=1, alias="cancelledBy")

    model_config = ConfigDict(populate_by_name=True)


class OrderResponse(BaseModel):
    """Schema for order API responses."""

    id: str
    order_number: str = Field(alias="orderNumber")
    user_id: str = Field(alias="userId")
    status: OrderStatus
    items: list[OrderItem]
    subtotal: float
    tax_amount: float = Field(alias="taxAmount")
    shipping_amount: float = Field(alias="shippingAmount")
    discount_amount: float = Field(alias="discountAmount")
    total_amount: float = Field(alias="totalAmount")
    currency: str
    shipping_address: Address = Field(alias="shippingAddress")
    billing_address: Address = Field(alias="billingAddress")
    payment_status: PaymentStatus = Field(alias="paymentStatus")
    payment_method: Optional[PaymentMethod] = Field(None, alias="paymentMethod")
    payment_id: Optional[str] = Field(None, alias="paymentId")
    notes: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class PaginatedOrdersResponse(BaseModel):
    """Schema for one page of a user's orders."""

    orders: list[OrderResponse]
    total: int
    page: int
    total_pages: int = Field(alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)
