from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import OrderStatus


class OrderLineRequest(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class OrderCreate(BaseModel):
    user_id: int
    items: List[OrderLineRequest] = Field(min_length=1)


class OrderLineResponse(BaseModel):
    id: Optional[int] = None
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None
    lines: List[OrderLineResponse] = []

    class Config:
        from_attributes = True


# --- Collaborator payloads (what the user/product services return) ---

class UserRecord(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None


class ProductRecord(BaseModel):
    id: int
    name: str
    price: Decimal
    stock_quantity: int
    is_active: bool = True
