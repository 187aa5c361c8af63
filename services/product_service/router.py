from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from shared.config.database import get_db
from .schemas import ProductCreate, ProductResponse, StockUpdate
from .service import ProductService

router = APIRouter()
public_router = APIRouter()  # For any public endpoints (e.g. health check)

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "product", "status": "running"}


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.create_product(db, product)

@router.get("/", response_model=list[ProductResponse])
async def list_products(
    active_only: bool = Query(default=False),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.list_products(db, active_only)

@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.get_product_by_id(db, product_id)

@router.patch("/{product_id}/decrease-stock", response_model=ProductResponse)
async def decrease_stock(
    product_id: int,
    quantity: int = Query(ge=1),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.decrease_stock(db, product_id, quantity)

@router.post("/{product_id}/restore-stock", response_model=ProductResponse)
async def restore_stock(
    product_id: int,
    payload: StockUpdate,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.restore_stock(db, product_id, payload.quantity)

@router.delete("/{product_id}", response_model=ProductResponse)
async def deactivate_product(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.deactivate_product(db, product_id)
