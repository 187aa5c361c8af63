"""In-process stand-ins for the user/product services and the order store."""
import itertools
from typing import Dict, Iterable, List, Optional, Set

from services.order_service.clients import (
    ProductAvailabilityClient,
    RemoteServiceError,
    UserLookupClient,
)
from services.order_service.exceptions import OrderNotFound
from services.order_service.models import Order, OrderStatus
from services.order_service.repository import OrderStore
from services.order_service.schemas import ProductRecord, UserRecord


class FakeUserClient(UserLookupClient):
    def __init__(self, users: Iterable[UserRecord] = (), unreachable: bool = False):
        self.users: Dict[int, UserRecord] = {u.id: u for u in users}
        self.unreachable = unreachable
        self.calls: List[tuple] = []

    async def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        self.calls.append(("get_by_id", user_id))
        if self.unreachable:
            raise RemoteServiceError("user_service", "connection refused")
        return self.users.get(user_id)

    async def get_by_username(self, username: str) -> Optional[UserRecord]:
        self.calls.append(("get_by_username", username))
        if self.unreachable:
            raise RemoteServiceError("user_service", "connection refused")
        return next((u for u in self.users.values() if u.username == username), None)


class FakeProductClient(ProductAvailabilityClient):
    def __init__(
        self,
        products: Iterable[ProductRecord] = (),
        unreachable: Iterable[int] = (),
        reject_decrease: Iterable[int] = (),
        fail_restore: Iterable[int] = (),
    ):
        self.products: Dict[int, ProductRecord] = {p.id: p.model_copy() for p in products}
        self.unreachable: Set[int] = set(unreachable)
        self.reject_decrease: Set[int] = set(reject_decrease)
        self.fail_restore: Set[int] = set(fail_restore)
        self.calls: List[tuple] = []

    def stock(self, product_id: int) -> int:
        return self.products[product_id].stock_quantity

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def get_by_id(self, product_id: int) -> Optional[ProductRecord]:
        self.calls.append(("get_by_id", product_id))
        if product_id in self.unreachable:
            raise RemoteServiceError("product_service", "timed out")
        product = self.products.get(product_id)
        return product.model_copy() if product else None

    async def decrease_stock(self, product_id: int, quantity: int) -> ProductRecord:
        self.calls.append(("decrease_stock", product_id, quantity))
        product = self.products.get(product_id)
        if product_id in self.reject_decrease or product is None or quantity > product.stock_quantity:
            raise RemoteServiceError("product_service", "HTTP 400")
        product.stock_quantity -= quantity
        return product.model_copy()

    async def restore_stock(self, product_id: int, quantity: int) -> None:
        self.calls.append(("restore_stock", product_id, quantity))
        if product_id in self.fail_restore:
            raise RemoteServiceError("product_service", "HTTP 503")
        self.products[product_id].stock_quantity += quantity


class InMemoryOrderStore(OrderStore):
    def __init__(self):
        self.orders: Dict[int, Order] = {}
        self.saves = 0
        self._order_ids = itertools.count(1)
        self._line_ids = itertools.count(1)

    async def find_all(self) -> List[Order]:
        return [self.orders[k] for k in sorted(self.orders)]

    async def find_by_id(self, order_id: int) -> Optional[Order]:
        return self.orders.get(order_id)

    async def find_by_user(self, user_id: int) -> List[Order]:
        return [o for o in await self.find_all() if o.user_id == user_id]

    async def find_by_status(self, status: OrderStatus) -> List[Order]:
        return [o for o in await self.find_all() if o.status == status]

    async def save(self, order: Order) -> Order:
        if order.id is None:
            order.id = next(self._order_ids)
            for line in order.lines:
                line.id = next(self._line_ids)
                line.order_id = order.id
        elif order.id not in self.orders:
            raise OrderNotFound(order.id)
        self.orders[order.id] = order
        self.saves += 1
        return order

    async def delete(self, order: Order) -> None:
        if self.orders.pop(order.id, None) is None:
            raise OrderNotFound(order.id)
