from typing import Optional
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..services.cart_service import CartService
from ..services.catalog_client import CatalogClient


def get_catalog_client() -> CatalogClient:
    """Dependency для получения CatalogClient"""
    return CatalogClient()


def get_cart_service(
    db: Session = Depends(get_db),
    catalog_client: CatalogClient = Depends(get_catalog_client)
) -> CartService:
    """Dependency для получения CartService"""
    return CartService(db, catalog_client)


def get_current_customer_id(request: Request) -> str:
    """ID покупателя из заголовка, который выставляет шлюз аутентификации"""
    customer_id: Optional[str] = request.headers.get(settings.customer_id_header)
    if not customer_id or not customer_id.strip():
        raise HTTPException(status_code=401, detail="Customer is not authenticated")
    return customer_id.strip()
