from pydantic import BaseModel
from typing import Optional


class ProductThumbnail(BaseModel):
    """Краткая информация о товаре из catalog-service"""
    id: int
    name: Optional[str] = None
    slug: Optional[str] = None
    thumbnail_url: Optional[str] = None

    class Config:
        extra = "ignore"
