from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable

from .models import Order, OrderLine, OrderStatus, utcnow
from .schemas import ProductRecord


class OrderAssembler:
    """Builds a PENDING order from validated (product snapshot, quantity) pairs. No I/O."""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock

    @staticmethod
    def snapshot_line(product: ProductRecord, quantity: int) -> OrderLine:
        return OrderLine(
            product_id=product.id,
            product_name=product.name,
            unit_price=Decimal(product.price),
            quantity=quantity,
        )

    def build(self, user_id: int, lines: Iterable[OrderLine]) -> Order:
        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING,
            created_at=self.clock(),
        )
        for line in lines:
            order.add_line(line)
        if not order.lines:
            raise ValueError("An order needs at least one line")
        return order
