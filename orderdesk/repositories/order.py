"""
Order repository for data access operations.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order, OrderSequence
from orderdesk.repositories.base import BaseRepository

logger = get_logger(__name__)

ORDER_NUMBER_SEQUENCE = "order_number"


def format_order_number(created_at: datetime, sequence: int) -> str:
    """Build ``ORD-<epoch millis>-<6-digit sequence>``."""
    millis = int(created_at.timestamp()) * 1000 + created_at.microsecond // 1000
    return f"ORD-{millis}-{sequence:06d}"


class OrderRepository(BaseRepository[Order]):
    """Repository for Order model operations."""

    model = Order

    async def list_for_user(
        self,
        user_id: str,
        *,
        skip: int = 0,
        limit: int = 10,
    ) -> list[Order]:
        """Get a user's orders, newest first."""
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.order_number.desc())
            .offset(skip)
            .limit(limit)
        )
        return await self._all(stmt)

    async def count_for_user(self, user_id: str) -> int:
        """Count all orders belonging to a user."""
        stmt = select(func.count()).select_from(Order).where(Order.user_id == user_id)
        return await self._scalar(stmt, default=0)

    async def _increment(self, name: str) -> Optional[int]:
        stmt = (
            update(OrderSequence)
            .where(OrderSequence.name == name)
            .values(value=OrderSequence.value + 1)
            .returning(OrderSequence.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def next_sequence(self, name: str = ORDER_NUMBER_SEQUENCE) -> int:
        """
        Atomically increment and return a named counter.

        The increment is a single UPDATE ... RETURNING statement, so two
        concurrent callers never observe the same value. The first caller
        creates the row inside a savepoint; if a concurrent transaction
        created it first, the insert is rolled back and the increment is
        retried against the existing row.
        """
        value = await self._increment(name)
        if value is not None:
            return value

        try:
            async with self.session.begin_nested():
                self.session.add(OrderSequence(name=name, value=1))
        except IntegrityError:
            logger.info("Sequence row created concurrently, retrying", sequence=name)
            return await self._increment(name)
        return 1

    async def next_order_number(self, now: Optional[datetime] = None) -> str:
        """Allocate a fresh, unique order number."""
        sequence = await self.next_sequence()
        return format_order_number(now or datetime.now(timezone.utc), sequence)
