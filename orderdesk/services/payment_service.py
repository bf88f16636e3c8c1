"""
Payment Service - simulated payment gateway.

Stands in for a real processor (Stripe, PayPal, ...). Every call waits a
random processing delay, then approves or declines the charge:

- amounts above the configured limit are rejected outright
- credit cards are declined 10% of the time
- PayPal payments fail 5% of the time
- everything else succeeds

The random source and the sleep function are injected so tests can pin
the outcome and skip the delay.
"""
import asyncio
import random
import string
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Optional

from orderdesk.core.config import Settings
from orderdesk.core.errors import PaymentError
from orderdesk.core.logging import get_logger
from orderdesk.models.order import PaymentMethod, PaymentStatus
from orderdesk.schemas.payment import PaymentResult, RefundResult

logger = get_logger(__name__)

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


class PaymentService:
    """
    Stateless payment simulator.

    One instance is built at application startup and shared by every
    request through dependency injection.
    """

    DEFAULT_AMOUNT_LIMIT = 10000.0
    TRANSACTION_SUFFIX_LENGTH = 9

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        amount_limit: float = DEFAULT_AMOUNT_LIMIT,
        delay_range: tuple[float, float] = (1.0, 3.0),
        credit_card_failure_rate: float = 0.10,
        paypal_failure_rate: float = 0.05,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        low, high = delay_range
        if low < 0 or high < low:
            raise ValueError(f"Invalid delay range: {delay_range}")
        self.rng = rng or random.Random()
        self.amount_limit = amount_limit
        self.delay_range = (low, high)
        self.failure_rates = {
            PaymentMethod.CREDIT_CARD: (credit_card_failure_rate, "Credit card declined"),
            PaymentMethod.PAYPAL: (paypal_failure_rate, "PayPal payment failed"),
        }
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentService":
        """Build the simulator from application settings."""
        return cls(
            amount_limit=settings.payment_amount_limit,
            delay_range=(settings.payment_delay_min, settings.payment_delay_max),
            credit_card_failure_rate=settings.credit_card_failure_rate,
            paypal_failure_rate=settings.paypal_failure_rate,
        )

    async def process_payment(
        self,
        *,
        order_id: str,
        payment_method: PaymentMethod,
        amount: float,
        currency: str = "USD",
    ) -> PaymentResult:
        """
        Charge ``amount`` for an order.

        Declines are returned as a ``failed`` result; only an amount over
        the limit raises.

        Raises:
            PaymentError: If the amount exceeds the gateway limit
        """
        payment_method = PaymentMethod(payment_method)
        logger.info(
            "Processing payment",
            order_id=order_id,
            amount=float(amount),
            currency=currency,
            method=payment_method.value,
        )

        if amount > self.amount_limit:
            logger.warning(
                "Payment amount exceeds limit",
                order_id=order_id,
                amount=float(amount),
                limit=self.amount_limit,
            )
            raise PaymentError("Payment amount exceeds limit")

        await self._simulate_processing_delay()

        result = self._simulate_outcome(payment_method)

        logger.info(
            "Payment processing completed",
            order_id=order_id,
            payment_id=result.payment_id,
            status=result.status.value,
        )
        return result

    async def process_refund(self, payment_id: str, amount: float) -> RefundResult:
        """Refund a previous payment. Always succeeds after the usual delay."""
        logger.info("Processing refund", payment_id=payment_id, amount=float(amount))

        await self._simulate_processing_delay()

        return RefundResult(
            refund_id=self._new_id(),
            status=PaymentStatus.REFUNDED,
            message="Refund processed successfully",
        )

    async def _simulate_processing_delay(self) -> None:
        low, high = self.delay_range
        await self._sleep(self.rng.uniform(low, high))

    def _simulate_outcome(self, payment_method: PaymentMethod) -> PaymentResult:
        payment_id = self._new_id()
        transaction_id = self._new_transaction_id()

        rule = self.failure_rates.get(payment_method)
        if rule is not None:
            rate, message = rule
            if self.rng.random() < rate:
                return PaymentResult(
                    payment_id=payment_id,
                    status=PaymentStatus.FAILED,
                    transaction_id=transaction_id,
                    message=message,
                )

        return PaymentResult(
            payment_id=payment_id,
            status=PaymentStatus.COMPLETED,
            transaction_id=transaction_id,
            message="Payment processed successfully",
        )

    def _new_id(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))

    def _new_transaction_id(self) -> str:
        millis = int(time.time() * 1000)
        suffix = "".join(self.rng.choices(_SUFFIX_ALPHABET, k=self.TRANSACTION_SUFFIX_LENGTH))
        return f"TXN-{millis}-{suffix}"
