"""
RPC wrappers for the User and Product services.

The orchestrator only sees the two abstract contracts below; the httpx
implementations are wired in by the router dependency, tests pass fakes.
A 404 from a lookup means "absent" and is returned as None. Any other
failure (connection error, timeout, non-2xx) is raised as RemoteServiceError.
"""
import os
from abc import ABC, abstractmethod
from typing import Optional

import httpx
import structlog

from .schemas import ProductRecord, UserRecord

logger = structlog.get_logger(__name__)

# Env Vars
USER_SERVICE_URL = os.getenv("USER_SERVICE_URL", "http://localhost:8000/users")
PRODUCT_SERVICE_URL = os.getenv("PRODUCT_SERVICE_URL", "http://localhost:8000/products")
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "10.0"))


class RemoteServiceError(Exception):
    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service


class UserLookupClient(ABC):

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[UserRecord]:
        ...


class ProductAvailabilityClient(ABC):

    @abstractmethod
    async def get_by_id(self, product_id: int) -> Optional[ProductRecord]:
        ...

    @abstractmethod
    async def decrease_stock(self, product_id: int, quantity: int) -> ProductRecord:
        """Must fail, never clamp, when quantity exceeds the current stock."""

    @abstractmethod
    async def restore_stock(self, product_id: int, quantity: int) -> None:
        ...


class _HttpClient:
    service_name = "remote"

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("remote_call_failed", service=self.service_name, url=url, error=str(e))
            raise RemoteServiceError(self.service_name, str(e)) from e
        return resp

    def _raise_for_status(self, resp: httpx.Response) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "remote_call_rejected",
                service=self.service_name,
                url=str(resp.request.url),
                status_code=resp.status_code,
            )
            raise RemoteServiceError(self.service_name, f"HTTP {resp.status_code}") from e

    async def _lookup(self, path: str) -> Optional[dict]:
        resp = await self._request("GET", path)
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp)
        return resp.json()


class HttpUserClient(_HttpClient, UserLookupClient):
    service_name = "user_service"

    def __init__(self, client: httpx.AsyncClient, base_url: str = USER_SERVICE_URL):
        super().__init__(client, base_url)

    async def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        data = await self._lookup(f"/{user_id}")
        return UserRecord.model_validate(data) if data is not None else None

    async def get_by_username(self, username: str) -> Optional[UserRecord]:
        data = await self._lookup(f"/username/{username}")
        return UserRecord.model_validate(data) if data is not None else None


class HttpProductClient(_HttpClient, ProductAvailabilityClient):
    service_name = "product_service"

    def __init__(self, client: httpx.AsyncClient, base_url: str = PRODUCT_SERVICE_URL):
        super().__init__(client, base_url)

    async def get_by_id(self, product_id: int) -> Optional[ProductRecord]:
        data = await self._lookup(f"/{product_id}")
        return ProductRecord.model_validate(data) if data is not None else None

    async def decrease_stock(self, product_id: int, quantity: int) -> ProductRecord:
        resp = await self._request(
            "PATCH", f"/{product_id}/decrease-stock", params={"quantity": quantity}
        )
        self._raise_for_status(resp)
        return ProductRecord.model_validate(resp.json())

    async def restore_stock(self, product_id: int, quantity: int) -> None:
        resp = await self._request(
            "POST", f"/{product_id}/restore-stock", json={"quantity": quantity}
        )
        self._raise_for_status(resp)
