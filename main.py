from fastapi import FastAPI
from sqlalchemy import text
from shared.config.database import engine, Base

# IMPORTANT: import models so they register with Base
from services.user_service import models as user_models
from services.product_service import models as product_models
from services.order_service import models as order_models

from services.user_service.main import user_app
from services.product_service.main import product_app
from services.order_service.main import order_app

app = FastAPI(title="Ecommerce Cluster")

@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        # Create schemas
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS user_schema"))
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS product_schema"))
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS order_schema"))

        # Create all tables
        await conn.run_sync(Base.metadata.create_all)

app.mount("/users", user_app)
app.mount("/products", product_app)
app.mount("/orders", order_app)
