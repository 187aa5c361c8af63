from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from .exceptions import OrderNotFound
from .models import Order, OrderLine, OrderStatus


class OrderStore(ABC):
    """Persistence contract for order aggregates (lines travel with their order)."""

    @abstractmethod
    async def find_all(self) -> Sequence[Order]:
        ...

    @abstractmethod
    async def find_by_id(self, order_id: int) -> Optional[Order]:
        ...

    @abstractmethod
    async def find_by_user(self, user_id: int) -> Sequence[Order]:
        ...

    @abstractmethod
    async def find_by_status(self, status: OrderStatus) -> Sequence[Order]:
        ...

    @abstractmethod
    async def save(self, order: Order) -> Order:
        ...

    @abstractmethod
    async def delete(self, order: Order) -> None:
        ...


class OrderRepository(OrderStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self) -> List[Order]:
        result = await self.db.execute(select(Order).order_by(Order.id))
        return list(result.scalars().all())

    async def find_by_id(self, order_id: int) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    async def find_by_user(self, user_id: int) -> List[Order]:
        result = await self.db.execute(
            select(Order).where(Order.user_id == user_id).order_by(Order.id)
        )
        return list(result.scalars().all())

    async def find_by_status(self, status: OrderStatus) -> List[Order]:
        result = await self.db.execute(
            select(Order).where(Order.status == status).order_by(Order.id)
        )
        return list(result.scalars().all())

    async def save(self, order: Order) -> Order:
        # One commit per aggregate: the order row and all of its lines.
        # Rollback expires the instance, so the id is read up front.
        order_id = order.id
        self.db.add(order)
        try:
            await self.db.commit()
        except StaleDataError as e:
            # Row deleted by someone else between our read and this write
            await self.db.rollback()
            raise OrderNotFound(order_id) from e
        return order

    async def delete(self, order: Order) -> None:
        order_id = order.id
        # Statement deletes report matched rows; a flushed session.delete()
        # only warns when the row is already gone.
        await self.db.execute(delete(OrderLine).where(OrderLine.order_id == order_id))
        result = await self.db.execute(delete(Order).where(Order.id == order_id))
        if result.rowcount == 0:
            await self.db.rollback()
            raise OrderNotFound(order_id)
        await self.db.commit()
