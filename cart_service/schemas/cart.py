from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from .cart_item import CartItem


class CartSummary(BaseModel):
    id: int
    customer_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CartDetailResponse(BaseModel):
    # Для покупателя без корзины возвращается пустая деталь с id=None
    id: Optional[int] = None
    customer_id: Optional[str] = None
    created_at: Optional[datetime] = None
    total_items: int = 0
    items: List[CartItem] = []

    class Config:
        from_attributes = True


class CartCount(BaseModel):
    count: int
