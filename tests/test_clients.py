import json
from decimal import Decimal

import httpx
import pytest

from services.order_service.clients import HttpProductClient, HttpUserClient, RemoteServiceError

USER = {"id": 1, "username": "alice", "email": "alice@shop.io", "full_name": "Alice Doe", "is_active": True}
PRODUCT = {"id": 7, "name": "Keyboard", "price": "10.00", "stock_quantity": 5, "is_active": True}


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_user_lookup_by_id():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json=USER)

    async with mock_client(handler) as client:
        user = await HttpUserClient(client, "http://users/").get_by_id(1)

    assert seen == [("GET", "/1")]
    assert user.username == "alice"
    assert user.full_name == "Alice Doe"


async def test_user_lookup_by_username():
    def handler(request):
        assert request.url.path == "/users/username/alice"
        return httpx.Response(200, json=USER)

    async with mock_client(handler) as client:
        user = await HttpUserClient(client, "http://cluster/users").get_by_username("alice")

    assert user.id == 1


async def test_missing_user_is_none():
    async with mock_client(lambda request: httpx.Response(404, json={"detail": "User not found"})) as client:
        assert await HttpUserClient(client, "http://users").get_by_id(5) is None


@pytest.mark.parametrize("status_code", [400, 500, 503])
async def test_error_status_raises_remote_service_error(status_code):
    async with mock_client(lambda request: httpx.Response(status_code)) as client:
        with pytest.raises(RemoteServiceError) as exc:
            await HttpUserClient(client, "http://users").get_by_id(1)

    assert exc.value.service == "user_service"


async def test_transport_error_raises_remote_service_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(RemoteServiceError):
            await HttpProductClient(client, "http://products").get_by_id(7)


async def test_product_lookup_parses_decimal_price():
    async with mock_client(lambda request: httpx.Response(200, json=PRODUCT)) as client:
        product = await HttpProductClient(client, "http://products").get_by_id(7)

    assert product.price == Decimal("10.00")
    assert product.stock_quantity == 5
    assert product.is_active


async def test_decrease_stock_sends_quantity_as_query_param():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, request.url.params.get("quantity")))
        return httpx.Response(200, json={**PRODUCT, "stock_quantity": 2})

    async with mock_client(handler) as client:
        product = await HttpProductClient(client, "http://products").decrease_stock(7, 3)

    assert seen == [("PATCH", "/7/decrease-stock", "3")]
    assert product.stock_quantity == 2


async def test_rejected_decrease_raises():
    def handler(request):
        return httpx.Response(400, json={"detail": "Insufficient stock. Available: 1, Requested: 3"})

    async with mock_client(handler) as client:
        with pytest.raises(RemoteServiceError):
            await HttpProductClient(client, "http://products").decrease_stock(7, 3)


async def test_restore_stock_posts_quantity():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(200, json=PRODUCT)

    async with mock_client(handler) as client:
        await HttpProductClient(client, "http://products").restore_stock(7, 3)

    assert seen == [("POST", "/7/restore-stock", {"quantity": 3})]
