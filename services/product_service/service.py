import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate

logger = structlog.get_logger(__name__)

class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate):
        product = Product(
            name=data.name,
            description=data.description,
            category=data.category,
            price=data.price,
            stock_quantity=data.stock_quantity,
            is_active=data.is_active,
        )
        return await ProductRepository.create_product(db, product)

    @staticmethod
    async def list_products(db: AsyncSession, active_only: bool = False):
        return await ProductRepository.get_all_products(db, active_only)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product

    @staticmethod
    async def decrease_stock(db: AsyncSession, product_id: int, quantity: int):
        # 1. Get Product (locked)
        product = await ProductRepository.get_product_for_update(db, product_id)
        if not product:
            await db.rollback()
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

        # 2. Check Stock. Never clamp: the caller asked for more than exists
        available = product.stock_quantity
        if available < quantity:
            # Releases the row lock; expires product, hence `available`
            await db.rollback()
            logger.info("stock_decrease_refused", product_id=product_id, available=available, requested=quantity)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock. Available: {available}, Requested: {quantity}",
            )

        # 3. Deduct
        product.stock_quantity -= quantity
        product = await ProductRepository.update_product(db, product)
        logger.info("stock_decreased", product_id=product_id, quantity=quantity, remaining=product.stock_quantity)
        return product

    @staticmethod
    async def restore_stock(db: AsyncSession, product_id: int, quantity: int):
        product = await ProductRepository.get_product_for_update(db, product_id)
        if not product:
            await db.rollback()
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        product.stock_quantity += quantity
        product = await ProductRepository.update_product(db, product)
        logger.info("stock_restored", product_id=product_id, quantity=quantity, remaining=product.stock_quantity)
        return product

    @staticmethod
    async def deactivate_product(db: AsyncSession, product_id: int):
        # Soft delete - mark as inactive instead of removing
        product = await ProductService.get_product_by_id(db, product_id)
        product.is_active = False
        return await ProductRepository.update_product(db, product)
