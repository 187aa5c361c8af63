"""
Order workflow: create (saga-style, across the user and product services),
status changes, cancellation, queries and deletion.

Creation runs as a SagaOrchestrator with one step per requested line, so
stock is reserved strictly in request order and line i+1 is only looked at
once line i's decrement went through. Decrements are NOT undone on failure
unless compensation is switched on (ORDER_COMPENSATE_STOCK_ON_FAILURE=true);
then every applied decrement is restored in reverse order before the error
reaches the caller.
"""
import os
from dataclasses import dataclass, field
from functools import partial
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import structlog

from shared.observability import (
    order_creation_duration_seconds,
    order_status_changes_total,
    orders_created_total,
    stock_reservations_total,
)

from .assembler import OrderAssembler
from .clients import ProductAvailabilityClient, RemoteServiceError, UserLookupClient
from .exceptions import (
    InsufficientStock,
    InvalidTransition,
    OrderNotFound,
    OrderServiceError,
    ProductUnavailable,
    UserNotFound,
)
from .models import Order, OrderLine, OrderStatus
from .repository import OrderStore
from .saga import SagaOrchestrator
from .schemas import OrderLineRequest, UserRecord

logger = structlog.get_logger(__name__)

COMPENSATE_STOCK_ON_FAILURE = os.getenv("ORDER_COMPENSATE_STOCK_ON_FAILURE", "false").lower() == "true"

LineInput = Union[OrderLineRequest, Tuple[int, int]]


@dataclass
class OrderCreationContext:
    user_id: int
    items: List[OrderLineRequest]
    user: Optional[UserRecord] = None
    lines: List[OrderLine] = field(default_factory=list)
    order: Optional[Order] = None


class OrderOrchestrator:
    def __init__(
        self,
        store: OrderStore,
        users: UserLookupClient,
        products: ProductAvailabilityClient,
        assembler: Optional[OrderAssembler] = None,
        compensate_stock: bool = COMPENSATE_STOCK_ON_FAILURE,
    ):
        self.store = store
        self.users = users
        self.products = products
        self.assembler = assembler or OrderAssembler()
        self.compensate_stock = compensate_stock

    # --- CREATE ---

    async def create_order(self, user_id: int, items: Iterable[LineInput]) -> Order:
        requested = [self._as_request(item) for item in items]
        if not requested:
            raise ValueError("An order needs at least one item")

        ctx = OrderCreationContext(user_id=user_id, items=requested)
        log = logger.bind(user_id=user_id, lines=len(requested))

        with order_creation_duration_seconds.time():
            try:
                await self._build_creation_saga(requested).execute(ctx)
            except OrderServiceError as e:
                orders_created_total.labels(status=e.code).inc()
                self._log_abort(log, ctx, e)
                raise
            except Exception as e:
                orders_created_total.labels(status="error").inc()
                self._log_abort(log, ctx, e)
                raise

        orders_created_total.labels(status="success").inc()
        log.info("order_created", order_id=ctx.order.id, total_amount=str(ctx.order.total_amount))
        return ctx.order

    def _build_creation_saga(self, requested: Sequence[OrderLineRequest]) -> SagaOrchestrator:
        saga = SagaOrchestrator("create_order")
        saga.add_step("resolve_user", self._resolve_user)
        for index, item in enumerate(requested):
            compensation = partial(self._release_line, item) if self.compensate_stock else None
            saga.add_step(
                f"reserve_stock:{index}:{item.product_id}",
                partial(self._reserve_line, item),
                compensation,
            )
        saga.add_step("persist_order", self._persist)
        return saga

    @staticmethod
    def _as_request(item: LineInput) -> OrderLineRequest:
        if isinstance(item, OrderLineRequest):
            request = item
        else:
            product_id, quantity = item
            request = OrderLineRequest(product_id=product_id, quantity=quantity)
        if request.quantity < 1:
            raise ValueError(f"Invalid quantity {request.quantity} for product {request.product_id}")
        return request

    async def _resolve_user(self, ctx: OrderCreationContext) -> None:
        try:
            user = await self.users.get_by_id(ctx.user_id)
        except RemoteServiceError as e:
            raise UserNotFound(ctx.user_id) from e
        if user is None:
            raise UserNotFound(ctx.user_id)
        ctx.user = user

    async def _reserve_line(self, item: OrderLineRequest, ctx: OrderCreationContext) -> None:
        product_id, quantity = item.product_id, item.quantity
        try:
            product = await self.products.get_by_id(product_id)
        except RemoteServiceError as e:
            raise ProductUnavailable(product_id, "product service unreachable") from e
        if product is None:
            raise ProductUnavailable(product_id, "not found")
        if not product.is_active:
            raise ProductUnavailable(product_id, "inactive")

        if product.stock_quantity < quantity:
            raise InsufficientStock(product_id, product.stock_quantity, quantity)

        try:
            await self.products.decrease_stock(product_id, quantity)
        except RemoteServiceError as e:
            stock_reservations_total.labels(outcome="failed").inc()
            raise ProductUnavailable(product_id, "stock reservation rejected") from e
        stock_reservations_total.labels(outcome="reserved").inc()

        ctx.lines.append(self.assembler.snapshot_line(product, quantity))

    async def _release_line(self, item: OrderLineRequest, ctx: OrderCreationContext) -> None:
        await self.products.restore_stock(item.product_id, item.quantity)

    async def _persist(self, ctx: OrderCreationContext) -> None:
        order = self.assembler.build(ctx.user_id, ctx.lines)
        ctx.order = await self.store.save(order)

    def _log_abort(self, log, ctx: OrderCreationContext, error: Exception) -> None:
        reserved = [(line.product_id, line.quantity) for line in ctx.lines]
        log.warning("order_creation_aborted", error=str(error), reserved=reserved)
        if reserved and not self.compensate_stock:
            log.warning("stock_left_decremented", reserved=reserved)

    # --- STATUS ---

    async def update_status(self, order_id: int, status: Union[OrderStatus, str]) -> Order:
        """Sets any status from any status; only cancel_order checks legality."""
        order = await self._require(order_id)
        order.status = OrderStatus(status)
        order.touch()
        saved = await self.store.save(order)
        order_status_changes_total.labels(status=saved.status.value).inc()
        logger.info("order_status_updated", order_id=order_id, status=saved.status.value)
        return saved

    async def cancel_order(self, order_id: int) -> Order:
        order = await self._require(order_id)
        current = OrderStatus(order.status)
        if not current.can_cancel:
            raise InvalidTransition(order_id, current.value, OrderStatus.CANCELLED.value)
        order.status = OrderStatus.CANCELLED
        order.touch()
        saved = await self.store.save(order)
        order_status_changes_total.labels(status=OrderStatus.CANCELLED.value).inc()
        logger.info("order_cancelled", order_id=order_id, previous_status=current.value)
        return saved

    # --- QUERIES ---

    async def list_orders(self) -> Sequence[Order]:
        return await self.store.find_all()

    async def get_order(self, order_id: int) -> Order:
        return await self._require(order_id)

    async def list_orders_by_user(self, user_id: int) -> Sequence[Order]:
        return await self.store.find_by_user(user_id)

    async def list_orders_by_status(self, status: Union[OrderStatus, str]) -> Sequence[Order]:
        return await self.store.find_by_status(OrderStatus(status))

    async def delete_order(self, order_id: int) -> None:
        order = await self._require(order_id)
        await self.store.delete(order)
        logger.info("order_deleted", order_id=order_id)

    async def _require(self, order_id: int) -> Order:
        order = await self.store.find_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order
