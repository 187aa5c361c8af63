from fastapi import FastAPI
from sqlalchemy import text

from shared.config.database import Base, engine
from shared.observability.setup import setup_observability

from .models import User  # noqa: F401 - registers model with SQLAlchemy Base
from .router import router, public_router

user_app = FastAPI(
    title="User Service",
    version="1.0.0",
    description="User directory: lookup by id, username or email.",
)

setup_observability(user_app, "user_service")

user_app.include_router(public_router)
user_app.include_router(router)

@user_app.on_event("startup")
async def startup_event() -> None:
    async with engine.begin() as conn:
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS user_schema"))
        await conn.run_sync(Base.metadata.create_all)
