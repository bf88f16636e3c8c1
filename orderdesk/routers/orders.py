"""
Order management API routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from orderdesk.core.config import settings
from orderdesk.core.database import DbSession
from orderdesk.repositories.order import OrderRepository
from orderdesk.schemas.common import ApiResponse, ErrorResponse
from orderdesk.schemas.order import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderResponse,
    PaginatedOrdersResponse,
    ProcessPaymentRequest,
    UpdateOrderStatusRequest,
)
from orderdesk.services.order_service import OrderService
from orderdesk.services.payment_service import PaymentService

router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


async def get_order_repository(session: DbSession) -> OrderRepository:
    """Dependency to get order repository."""
    return OrderRepository(session)


def get_payment_service(request: Request) -> PaymentService:
    """Dependency returning the application-scoped payment gateway."""
    return request.app.state.payment_service


async def get_order_service(
    repo: Annotated[OrderRepository, Depends(get_order_repository)],
    payments: Annotated[PaymentService, Depends(get_payment_service)],
) -> OrderService:
    """Dependency to get order service."""
    return OrderService(repo, payments)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]


@router.post(
    "",
    response_model=ApiResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    order_data: CreateOrderRequest,
    service: OrderServiceDep,
) -> ApiResponse[OrderResponse]:
    """
    Place a new order.

    Totals are always computed server-side from the line items.
    """
    order = await service.create_order(order_data)
    return ApiResponse[OrderResponse](
        data=OrderResponse.model_validate(order),
        message="Order created successfully",
    )


@router.get("/user/{user_id}", response_model=ApiResponse[PaginatedOrdersResponse])
async def get_user_orders(
    user_id: str,
    service: OrderServiceDep,
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        description="Orders per page",
    ),
) -> ApiResponse[PaginatedOrdersResponse]:
    """Get a user's orders, newest first."""
    result = await service.get_orders_by_user_id(user_id, page, limit)
    return ApiResponse[PaginatedOrdersResponse](
        data=PaginatedOrdersResponse(
            orders=[OrderResponse.model_validate(order) for order in result["orders"]],
            total=result["total"],
            page=result["page"],
            total_pages=result["total_pages"],
        ),
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: str,
    service: OrderServiceDep,
) -> ApiResponse[OrderResponse]:
    """Get order details by ID."""
    order = await service.get_order_by_id(order_id)
    return ApiResponse[OrderResponse](data=OrderResponse.model_validate(order))


@router.patch("/{order_id}/status", response_model=ApiResponse[OrderResponse])
async def update_order_status(
    order_id: str,
    status_update: UpdateOrderStatusRequest,
    service: OrderServiceDep,
) -> ApiResponse[OrderResponse]:
    """Move an order to a new status."""
    order = await service.update_order_status(order_id, status_update)
    return ApiResponse[OrderResponse](
        data=OrderResponse.model_validate(order),
        message="Order status updated successfully",
    )


@router.post("/{order_id}/payment", response_model=ApiResponse[OrderResponse])
async def process_payment(
    order_id: str,
    payment: ProcessPaymentRequest,
    service: OrderServiceDep,
) -> ApiResponse[OrderResponse]:
    """
    Pay for an order.

    A declined payment still returns 200; check ``paymentStatus``.
    """
    order = await service.process_payment(order_id, payment.payment_method)
    return ApiResponse[OrderResponse](
        data=OrderResponse.model_validate(order),
        message="Payment processed successfully",
    )


@router.post("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
async def cancel_order(
    order_id: str,
    cancellation: CancelOrderRequest,
    service: OrderServiceDep,
) -> ApiResponse[OrderResponse]:
    """Cancel an order that has not shipped."""
    order = await service.cancel_order(
        order_id,
        cancellation.reason,
        cancellation.cancelled_by,
    )
    return ApiResponse[OrderResponse](
        data=OrderResponse.model_validate(order),
        message="Order cancelled successfully",
    )
