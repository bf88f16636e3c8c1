"""
Shared fixtures: in-memory database, deterministic payment gateway,
HTTP clients and order builders.
"""
import os

# Must be set before orderdesk modules read their settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["PAYMENT_DELAY_MIN"] = "0"
os.environ["PAYMENT_DELAY_MAX"] = "0"

import random
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from orderdesk.core.database import Base, engine
from orderdesk.main import create_app
from orderdesk.models.order import Order, OrderStatus, PaymentStatus
from orderdesk.services.payment_service import PaymentService


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(1234)
        self.value = value

    def random(self) -> float:
        return self.value


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_payment_service(sleep: RecordingSleep) -> Callable[..., PaymentService]:
    """Build a payment gateway whose dice always land on ``roll``."""

    def _make(roll: float = 0.5, **kwargs: Any) -> PaymentService:
        kwargs.setdefault("delay_range", (1.0, 3.0))
        return PaymentService(rng=FixedRandom(roll), sleep=sleep, **kwargs)

    return _make


@pytest.fixture
def payment_service(make_payment_service) -> PaymentService:
    """Gateway that approves every charge."""
    return make_payment_service(0.99)


@pytest.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh in-memory schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Dropping the only pooled connection discards the in-memory database
    await engine.dispose()


@pytest.fixture
def app(payment_service: PaymentService) -> FastAPI:
    return create_app(payment_service=payment_service)


@pytest.fixture
async def async_client(app: FastAPI, database: None) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def sample_address() -> dict:
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "addressLine1": "12 St James's Square",
        "city": "London",
        "state": "London",
        "postalCode": "SW1Y 4JH",
        "country": "GB",
        "phone": "+44 20 7946 0000",
    }


@pytest.fixture
def make_order_payload(sample_address: dict) -> Callable[..., dict]:
    """Build a create-order request body from a list of line totals."""

    def _make(*line_totals: float, user_id: str = "user-1", **overrides: Any) -> dict:
        items = [
            {
                "productId": f"prod-{index}",
                "productName": f"Product {index}",
                "productSku": f"SKU-{index:03d}",
                "quantity": 1,
                "unitPrice": total,
                "totalPrice": total,
            }
            for index, total in enumerate(line_totals or (25.0,), start=1)
        ]
        payload = {
            "userId": user_id,
            "items": items,
            "shippingAddress": sample_address,
            "billingAddress": sample_address,
            "paymentMethod": "credit_card",
            "currency": "USD",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def order_factory(sample_address: dict) -> Callable[..., Order]:
    """Build a detached Order row for service-level tests."""

    def _make(
        status: OrderStatus = OrderStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        total_amount: str = "66.00",
        **overrides: Any,
    ) -> Order:
        now = datetime.now(timezone.utc)
        fields = {
            "id": str(uuid4()),
            "order_number": "ORD-1700000000000-000001",
            "user_id": "user-1",
            "status": status.value,
            "payment_status": payment_status.value,
            "payment_method": "credit_card",
            "items": [{
                "product_id": "prod-1",
                "product_name": "Product 1",
                "product_sku": "SKU-001",
                "quantity": 1,
                "unit_price": 60.0,
                "total_price": 60.0,
                "product_image": None,
            }],
            "shipping_address": sample_address,
            "billing_address": sample_address,
            "subtotal": Decimal("60.00"),
            "tax_amount": Decimal("6.00"),
            "shipping_amount": Decimal("0.00"),
            "discount_amount": Decimal("0.00"),
            "total_amount": Decimal(total_amount),
            "currency": "USD",
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Order(**fields)

    return _make
