from fastapi import APIRouter, Depends, Query, Response
from typing import List

from ...schemas.cart import CartSummary, CartDetailResponse, CartCount
from ...schemas.cart_item import CartItemCreate, CartItemUpdate, CartItemPutResponse
from ...services.cart_service import CartService
from ..dependencies import get_cart_service, get_current_customer_id

router = APIRouter()


@router.get("/carts", response_model=List[CartSummary])
def get_carts(cart_service: CartService = Depends(get_cart_service)):
    """Список всех корзин"""
    return cart_service.get_carts()


@router.get("/carts/{customer_id}", response_model=List[CartDetailResponse])
def get_cart_detail_by_customer_id(
        customer_id: str,
        cart_service: CartService = Depends(get_cart_service)
):
    """Все корзины покупателя с позициями"""
    return cart_service.get_cart_detail_by_customer_id(customer_id)


@router.get("/cart", response_model=CartDetailResponse)
def get_last_cart(
        customer_id: str = Depends(get_current_customer_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Текущая корзина пользователя"""
    return cart_service.get_last_cart(customer_id)


@router.get("/cart/count", response_model=CartCount)
def count_items_in_cart(
        customer_id: str = Depends(get_current_customer_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Количество товаров в текущей корзине"""
    return CartCount(count=cart_service.count_items_in_cart(customer_id))


@router.post("/cart/items", response_model=CartDetailResponse)
async def add_to_cart(
        items: List[CartItemCreate],
        customer_id: str = Depends(get_current_customer_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Добавление товаров в корзину"""
    return await cart_service.add_to_cart(items, customer_id)


@router.put("/cart/items", response_model=CartItemPutResponse)
async def update_cart_item(
        item: CartItemUpdate,
        customer_id: str = Depends(get_current_customer_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Обновление количества товара, 0 удаляет позицию"""
    return await cart_service.update_cart_item(item, customer_id)


@router.delete("/cart/items", status_code=204)
async def remove_cart_items(
        product_ids: List[int] = Query(..., alias="productIds"),
        customer_id: str = Depends(get_current_customer_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Удаление нескольких товаров из корзины"""
    await cart_service.remove_cart_items_by_product_ids(product_ids, customer_id)
    return Response(status_code=204)


@router.delete("/cart/items/{product_id}", status_code=204)
async def remove_cart_item(
        product_id: int,
        customer_id: str = Depends(get_current_customer_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Удаление товара из корзины"""
    await cart_service.remove_cart_item_by_product_id(product_id, customer_id)
    return Response(status_code=204)
