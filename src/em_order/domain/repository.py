# src/em_order/domain/repository.py
"""OrderRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.enums import OrderStatus
from src.em_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: Order) -> None: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def transition(
        self,
        db: AsyncSession,
        order_id: str,
        expected: OrderStatus,
        target: OrderStatus,
        stamp: str | None = None,
        admin_notes: str | None = None,
        payment_screenshot_url: str | None = None,
    ) -> Order | None:
        """Compare-and-swap on status. Returns None when ``expected`` no longer holds."""
        ...

    async def list_by_buyer(
        self, db: AsyncSession, buyer_id: str, cursor_id: str | None, limit: int
    ) -> list[Order]: ...

    async def list_by_seller(
        self, db: AsyncSession, seller_id: str, cursor_id: str | None, limit: int
    ) -> list[Order]: ...

    async def list_all(
        self,
        db: AsyncSession,
        status: OrderStatus | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...
