from datetime import datetime
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from models.order import Order, OrderDTO
from models.orderItem import OrderItem, OrderItemDTO

logger = logging.getLogger(__name__)


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, order_items: list[OrderItemDTO], session: AsyncSession | Session) -> int:
        order_data = order_dto.model_dump(exclude_none=True, exclude={"id", "items"})
        order = Order(**order_data)
        order.items = [OrderItem(**item.model_dump(exclude_none=True, exclude={"id", "order_id"}))
                       for item in order_items]
        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession | Session) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession | Session) -> list[OrderDTO]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def has_used_voucher(user_id: int, voucher_code: str, session: AsyncSession | Session) -> bool:
        """Cancelled orders do not consume a voucher."""
        stmt = (select(Order.id)
                .where(Order.user_id == user_id,
                       Order.voucher_code == voucher_code,
                       Order.status != OrderStatus.CANCELLED)
                .limit(1))
        result = await session_execute(stmt, session)
        return result.scalar() is not None

    @staticmethod
    async def update_status(order_id: int, status: OrderStatus, session: AsyncSession | Session,
                            payment_status: PaymentStatus | None = None,
                            cancelled_at: datetime | None = None) -> None:
        values = {"status": status}
        if payment_status is not None:
            values["payment_status"] = payment_status
        if cancelled_at is not None:
            values["cancelled_at"] = cancelled_at
        stmt = update(Order).where(Order.id == order_id).values(**values)
        await session_execute(stmt, session)
