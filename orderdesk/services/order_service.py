"""
Order Service - business orchestration for the order lifecycle.

Each operation loads what it needs through the repository, checks the
business rules, optionally calls the payment gateway, and persists the
result. Typed domain errors propagate unchanged; anything else is
wrapped in a DatabaseError.
"""
import math
from datetime import datetime, timezone
from typing import Any, Optional

from orderdesk.core.errors import (
    BusinessError,
    DatabaseError,
    NotFoundError,
    OrderDeskError,
    ValidationError,
)
from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from orderdesk.repositories.order import OrderRepository
from orderdesk.schemas.order import CreateOrderRequest, UpdateOrderStatusRequest
from orderdesk.services.order_rules import calculate_order_totals, validate_status_transition
from orderdesk.services.payment_service import PaymentService

logger = get_logger(__name__)

NON_CANCELLABLE_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})


class OrderService:
    """Owns every business rule applied to orders."""

    def __init__(
        self,
        repository: OrderRepository,
        payment_service: PaymentService,
    ) -> None:
        self.repository = repository
        self.payment_service = payment_service

    async def create_order(self, data: CreateOrderRequest) -> Order:
        """Price the items and persist a new pending order."""
        logger.info("Creating order", user_id=data.user_id, items=len(data.items))

        totals = calculate_order_totals(data.items)

        try:
            now = datetime.now(timezone.utc)
            order_number = await self.repository.next_order_number(now)
            order = await self.repository.create({
                "order_number": order_number,
                "user_id": data.user_id,
                "status": OrderStatus.PENDING.value,
                "payment_status": PaymentStatus.PENDING.value,
                "payment_method": data.payment_method.value,
                "items": [item.model_dump(mode="json") for item in data.items],
                "shipping_address": data.shipping_address.model_dump(mode="json"),
                "billing_address": data.billing_address.model_dump(mode="json"),
                "currency": data.currency,
                "notes": data.notes,
                "created_at": now,
                "updated_at": now,
                **totals.as_dict(),
            })
        except OrderDeskError:
            raise
        except Exception as e:
            logger.error("Failed to create order", user_id=data.user_id, error=str(e))
            raise DatabaseError(f"Failed to create order: {e}") from e

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            total_amount=float(order.total_amount),
        )
        return order

    async def get_order_by_id(self, order_id: str) -> Order:
        """Fetch an order or raise NotFoundError."""
        logger.info("Fetching order", order_id=order_id)
        try:
            return await self._load(order_id)
        except OrderDeskError:
            raise
        except Exception as e:
            logger.error("Failed to fetch order", order_id=order_id, error=str(e))
            raise DatabaseError(f"Failed to fetch order: {e}") from e

    async def get_orders_by_user_id(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        """
        Get one page of a user's orders, newest first.

        Returns a dict with ``orders``, ``total``, ``page`` and
        ``total_pages``. The count and the page are read separately and
        may reflect different instants under concurrent writes.
        """
        if page < 1 or limit < 1:
            details = []
            if page < 1:
                details.append({"field": "page", "message": "Page must be at least 1"})
            if limit < 1:
                details.append({"field": "limit", "message": "Limit must be at least 1"})
            raise ValidationError(details)

        logger.info("Fetching user orders", user_id=user_id, page=page, limit=limit)

        skip = (page - 1) * limit
        try:
            orders = await self.repository.list_for_user(user_id, skip=skip, limit=limit)
            total = await self.repository.count_for_user(user_id)
        except OrderDeskError:
            raise
        except Exception as e:
            logger.error("Failed to fetch user orders", user_id=user_id, error=str(e))
            raise DatabaseError("Failed to fetch user orders") from e

        return {
            "orders": orders,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit),
        }

    async def update_order_status(
        self,
        order_id: str,
        data: UpdateOrderStatusRequest,
    ) -> Order:
        """Move an order along the status graph."""
        logger.info(
            "Updating order status",
            order_id=order_id,
            new_status=data.status.value,
            reason=data.reason,
        )
        try:
            order = await self._load(order_id)
            previous_status = OrderStatus(order.status)

            validate_status_transition(previous_status, data.status)

            order.status = data.status.value
            order.updated_at = datetime.now(timezone.utc)
            order = await self.repository.save(order)
        except OrderDeskError:
            raise
        except Exception as e:
            logger.error("Failed to update order status", order_id=order_id, error=str(e))
            raise DatabaseError("Failed to update order status") from e

        logger.info(
            "Order status updated",
            order_id=order_id,
            previous_status=previous_status.value,
            new_status=data.status.value,
        )
        return order

    async def process_payment(self, order_id: str, payment_method: PaymentMethod) -> Order:
        """
        Charge the order total through the payment gateway.

        A declined payment is recorded on the order, not raised. A
        completed payment also confirms the order.
        """
        payment_method = PaymentMethod(payment_method)
        logger.info("Processing order payment", order_id=order_id, method=payment_method.value)
        try:
            order = await self._load(order_id)

            if order.payment_status == PaymentStatus.COMPLETED:
                raise BusinessError("Payment already completed for this order")
            if order.status == OrderStatus.CANCELLED:
                raise BusinessError("Cannot process payment for cancelled order")

            result = await self.payment_service.process_payment(
                order_id=order.id,
                payment_method=payment_method,
                amount=float(order.total_amount),
                currency=order.currency,
            )

            order.payment_status = result.status.value
            order.payment_id = result.payment_id
            order.payment_method = payment_method.value
            order.updated_at = datetime.now(timezone.utc)
            if result.status == PaymentStatus.COMPLETED:
                order.status = OrderStatus.CONFIRMED.value

            order = await self.repository.save(order)
        except OrderDeskError:
            raise
        except Exception as e:
            logger.error("Failed to process payment", order_id=order_id, error=str(e))
            raise DatabaseError("Failed to process payment") from e

        logger.info(
            "Order payment processed",
            order_id=order_id,
            payment_status=order.payment_status,
            transaction_id=result.transaction_id,
        )
        return order

    async def cancel_order(
        self,
        order_id: str,
        reason: str,
        cancelled_by: Optional[str] = None,
    ) -> Order:
        """Cancel an order that has not shipped yet."""
        logger.info("Cancelling order", order_id=order_id, reason=reason, cancelled_by=cancelled_by)
        try:
            order = await self._load(order_id)
            previous_status = OrderStatus(order.status)

            if previous_status == OrderStatus.CANCELLED:
                raise BusinessError("Order is already cancelled")
            if previous_status in NON_CANCELLABLE_STATUSES:
                raise BusinessError(
                    "Cannot cancel order that has already been shipped or delivered"
                )

            order.status = OrderStatus.CANCELLED.value
            order.updated_at = datetime.now(timezone.utc)
            order = await self.repository.save(order)
        except OrderDeskError:
            raise
        except Exception as e:
            logger.error("Failed to cancel order", order_id=order_id, error=str(e))
            raise DatabaseError("Failed to cancel order") from e

        logger.info("Order cancelled", order_id=order_id, previous_status=previous_status.value)
        return order

    async def _load(self, order_id: str) -> Order:
        order = await self.repository.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order
