import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship, validates

from shared.config.database import Base

CENTS = Decimal("0.01")


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.CANCELLED, OrderStatus.DELIVERED)

    @property
    def can_cancel(self) -> bool:
        return self not in (OrderStatus.SHIPPED, OrderStatus.DELIVERED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderLine(Base):
    __tablename__ = "order_lines"
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, index=True)
    # Plain column, not a relationship: a line never navigates back to its order
    order_id = Column(Integer, ForeignKey("order_schema.orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    @validates("quantity")
    def _validate_quantity(self, key, value):
        if value is None or int(value) < 1:
            raise ValueError("quantity must be at least 1")
        return int(value)

    @property
    def subtotal(self) -> Decimal:
        return Decimal(self.unit_price) * self.quantity


class Order(Base):
    __tablename__ = "orders"
    # We use a separate schema to simulate microservice isolation
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, native_enum=False, length=20),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    total_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    lines = relationship(
        OrderLine,
        cascade="all, delete-orphan",
        order_by=OrderLine.position,
        lazy="selectin",
    )

    def add_line(self, line: OrderLine) -> None:
        line.position = len(self.lines)
        self.lines.append(line)
        self.recalculate_total()

    def remove_line(self, line: OrderLine) -> None:
        self.lines.remove(line)
        self.recalculate_total()

    def computed_total(self) -> Decimal:
        total = sum((line.subtotal for line in self.lines), Decimal("0"))
        return total.quantize(CENTS)

    def recalculate_total(self) -> None:
        self.total_amount = self.computed_total()

    def touch(self) -> None:
        self.updated_at = utcnow()

    @validates("total_amount")
    def _validate_total(self, key, value):
        value = Decimal(value).quantize(CENTS)
        if self.lines and value != self.computed_total():
            raise ValueError("total_amount is derived from the order lines")
        return value
