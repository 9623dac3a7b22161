from pydantic import BaseModel, Field
from typing import Optional


class CartItemBase(BaseModel):
    product_id: int
    quantity: int


class CartItemCreate(CartItemBase):
    price: Optional[float] = Field(None, ge=0)


class CartItemUpdate(CartItemBase):
    """Количество 0 означает удаление позиции"""
    price: Optional[float] = Field(None, ge=0)


class CartItem(CartItemBase):
    id: int
    price_at_add: Optional[float] = None

    class Config:
        from_attributes = True


class CartItemPutResponse(BaseModel):
    cart_id: Optional[int] = None
    customer_id: str
    product_id: int
    quantity: int
    status: str
