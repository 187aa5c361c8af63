from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from shared.config.database import Base, get_db
from services.order_service import models as order_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.user_service import models as user_models  # noqa: F401
from services.order_service.schemas import ProductRecord, UserRecord

from fakes import FakeProductClient, FakeUserClient, InMemoryOrderStore

# SQLite has no schemas; map every service schema onto the default one
SCHEMA_MAP = {"order_schema": None, "product_schema": None, "user_schema": None}


@pytest.fixture
def alice():
    return UserRecord(id=1, username="alice", email="alice@shop.io", full_name="Alice Doe")


@pytest.fixture
def users(alice):
    return FakeUserClient([alice])


@pytest.fixture
def products():
    return FakeProductClient([
        ProductRecord(id=1, name="Keyboard", price=Decimal("10.00"), stock_quantity=5),
        ProductRecord(id=2, name="Mouse", price=Decimal("4.50"), stock_quantity=1),
        ProductRecord(id=3, name="Monitor", price=Decimal("199.99"), stock_quantity=10),
        ProductRecord(id=4, name="Floppy drive", price=Decimal("9.99"), stock_quantity=50, is_active=False),
    ])


@pytest.fixture
def store():
    return InMemoryOrderStore()


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'services.db'}",
        execution_options={"schema_translate_map": SCHEMA_MAP},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


def build_app(session_factory, *routers) -> FastAPI:
    """A bare service app (no tracing exporter, no /metrics) bound to the test database."""
    app = FastAPI()
    for router in routers:
        app.include_router(router)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest_asyncio.fixture
async def product_api(session_factory):
    from services.product_service.router import public_router, router

    app = build_app(session_factory, public_router, router)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://products") as client:
        yield client


@pytest_asyncio.fixture
async def user_api(session_factory):
    from services.user_service.router import public_router, router

    app = build_app(session_factory, public_router, router)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://users") as client:
        yield client
