"""
Payment gateway result schemas.
"""
from pydantic import BaseModel, ConfigDict, Field

from orderdesk.models.order import PaymentStatus


class PaymentResult(BaseModel):
    """Outcome of a charge attempt."""

    payment_id: str = Field(alias="paymentId")
    status: PaymentStatus
    transaction_id: str = Field(alias="transactionId")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class RefundResult(BaseModel):
    """Outcome of a refund request."""

    refund_id: str = Field(alias="refundId")
    status: PaymentStatus
    message: str

    model_config = ConfigDict(populate_by_name=True)
