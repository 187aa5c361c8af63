from typing import List

import httpx
from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db

from .clients import REMOTE_TIMEOUT_SECONDS, HttpProductClient, HttpUserClient
from .exceptions import OrderServiceError
from .models import OrderStatus
from .repository import OrderRepository
from .schemas import OrderCreate, OrderResponse
from .service import OrderOrchestrator

router = APIRouter()
public_router = APIRouter()  # For any public endpoints (e.g. health check)


async def get_http_client():
    async with httpx.AsyncClient(timeout=REMOTE_TIMEOUT_SECONDS) as client:
        yield client


async def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> OrderOrchestrator:
    return OrderOrchestrator(
        store=OrderRepository(db),
        users=HttpUserClient(client),
        products=HttpProductClient(client),
    )


async def order_service_error_handler(request: Request, exc: OrderServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate, orders: OrderOrchestrator = Depends(get_orchestrator)):
    return await orders.create_order(payload.user_id, payload.items)


@router.get("/", response_model=List[OrderResponse])
async def list_orders(orders: OrderOrchestrator = Depends(get_orchestrator)):
    return await orders.list_orders()


@router.get("/user/{user_id}", response_model=List[OrderResponse])
async def list_orders_by_user(user_id: int, orders: OrderOrchestrator = Depends(get_orchestrator)):
    return await orders.list_orders_by_user(user_id)


@router.get("/status/{order_status}", response_model=List[OrderResponse])
async def list_orders_by_status(
    order_status: OrderStatus, orders: OrderOrchestrator = Depends(get_orchestrator)
):
    return await orders.list_orders_by_status(order_status)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, orders: OrderOrchestrator = Depends(get_orchestrator)):
    return await orders.get_order(order_id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    new_status: OrderStatus = Query(alias="status"),
    orders: OrderOrchestrator = Depends(get_orchestrator),
):
    return await orders.update_status(order_id, new_status)


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: int, orders: OrderOrchestrator = Depends(get_orchestrator)):
    return await orders.cancel_order(order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: int, orders: OrderOrchestrator = Depends(get_orchestrator)):
    await orders.delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
