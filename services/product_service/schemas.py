from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal = Field(ge=0, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True

class StockUpdate(BaseModel):
    quantity: int = Field(ge=1)

class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    stock_quantity: int
    is_active: bool

    class Config:
        from_attributes = True
