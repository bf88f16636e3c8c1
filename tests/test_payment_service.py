"""
Tests for the simulated payment gateway.
"""
import re

import pytest

from orderdesk.core.config import Settings
from orderdesk.core.errors import PaymentError
from orderdesk.models.order import PaymentMethod, PaymentStatus
from orderdesk.services.payment_service import PaymentService

TXN_PATTERN = re.compile(r"^TXN-\d{13}-[0-9a-z]{9}$")


async def _charge(service: PaymentService, method: PaymentMethod, amount: float = 100.0):
    return await service.process_payment(
        order_id="order-1",
        payment_method=method,
        amount=amount,
        currency="USD",
    )


class TestProcessPayment:
    """Tests for PaymentService.process_payment."""

    @pytest.mark.parametrize("method", list(PaymentMethod))
    async def test_amount_over_limit_always_rejected(self, make_payment_service, sleep, method):
        service = make_payment_service(0.99)

        with pytest.raises(PaymentError, match="Payment amount exceeds limit"):
            await _charge(service, method, amount=10001)

        # Rejected before any simulated gateway wait
        assert sleep.delays == []

    async def test_amount_at_limit_accepted(self, make_payment_service):
        result = await _charge(make_payment_service(0.99), PaymentMethod.STRIPE, amount=10000)

        assert result.status == PaymentStatus.COMPLETED

    async def test_credit_card_declined(self, make_payment_service):
        result = await _charge(make_payment_service(0.05), PaymentMethod.CREDIT_CARD)

        assert result.status == PaymentStatus.FAILED
        assert result.message == "Credit card declined"

    async def test_credit_card_approved(self, make_payment_service):
        result = await _charge(make_payment_service(0.10), PaymentMethod.CREDIT_CARD)

        assert result.status == PaymentStatus.COMPLETED
        assert result.message == "Payment processed successfully"

    async def test_paypal_failure(self, make_payment_service):
        result = await _charge(make_payment_service(0.01), PaymentMethod.PAYPAL)

        assert result.status == PaymentStatus.FAILED
        assert result.message == "PayPal payment failed"

    async def test_paypal_success_above_failure_rate(self, make_payment_service):
        result = await _charge(make_payment_service(0.07), PaymentMethod.PAYPAL)

        assert result.status == PaymentStatus.COMPLETED

    @pytest.mark.parametrize(
        "method",
        [PaymentMethod.DEBIT_CARD, PaymentMethod.STRIPE, PaymentMethod.BANK_TRANSFER],
    )
    async def test_other_methods_never_fail(self, make_payment_service, method):
        result = await _charge(make_payment_service(0.0), method)

        assert result.status == PaymentStatus.COMPLETED

    async def test_failed_outcome_still_has_identifiers(self, make_payment_service):
        result = await _charge(make_payment_service(0.0), PaymentMethod.CREDIT_CARD)

        assert result.status == PaymentStatus.FAILED
        assert result.payment_id
        assert TXN_PATTERN.match(result.transaction_id)

    async def test_identifiers_fresh_per_call(self, make_payment_service):
        service = make_payment_service(0.99)

        first = await _charge(service, PaymentMethod.STRIPE)
        second = await _charge(service, PaymentMethod.STRIPE)

        assert first.payment_id != second.payment_id
        assert TXN_PATTERN.match(first.transaction_id)
        assert TXN_PATTERN.match(second.transaction_id)

    async def test_waits_within_delay_range(self, make_payment_service, sleep):
        service = make_payment_service(0.5, delay_range=(1.0, 3.0))

        await _charge(service, PaymentMethod.STRIPE)

        assert sleep.delays == [pytest.approx(2.0)]


class TestProcessRefund:
    """Tests for PaymentService.process_refund."""

    async def test_refund_always_succeeds(self, make_payment_service, sleep):
        service = make_payment_service(0.0)

        result = await service.process_refund("payment-1", 42.0)

        assert result.status == PaymentStatus.REFUNDED
        assert result.message == "Refund processed successfully"
        assert result.refund_id
        assert len(sleep.delays) == 1


class TestConstruction:
    """Tests for building the gateway."""

    def test_rejects_inverted_delay_range(self):
        with pytest.raises(ValueError):
            PaymentService(delay_range=(3.0, 1.0))

    def test_from_settings(self):
        settings = Settings(
            payment_amount_limit=500,
            payment_delay_min=0,
            payment_delay_max=0,
            credit_card_failure_rate=0.5,
        )

        service = PaymentService.from_settings(settings)

        assert service.amount_limit == 500
        assert service.delay_range == (0, 0)
        assert service.failure_rates[PaymentMethod.CREDIT_CARD][0] == 0.5
