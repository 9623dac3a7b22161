from .cart import CartSummary, CartDetailResponse, CartCount
from .cart_item import CartItem, CartItemCreate, CartItemUpdate, CartItemPutResponse
from .product import ProductThumbnail

__all__ = [
    "CartSummary",
    "CartDetailResponse",
    "CartCount",
    "CartItem",
    "CartItemCreate",
    "CartItemUpdate",
    "CartItemPutResponse",
    "ProductThumbnail",
]
