import httpx
import logging
from typing import List, Optional

from ..config import settings
from ..exceptions import CatalogServiceError
from ..schemas.product import ProductThumbnail

logger = logging.getLogger(__name__)


class CatalogClient:
    """Клиент для взаимодействия с Catalog Service"""

    def __init__(
            self,
            base_url: Optional[str] = None,
            timeout: Optional[float] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.catalog_service_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.catalog_timeout
        self.transport = transport

    async def get_products(self, product_ids: List[int]) -> List[ProductThumbnail]:
        """
        Получить товары одним запросом.

        catalog-service возвращает только существующие товары, поэтому
        отсутствие ID в ответе означает, что такого товара нет.
        """
        if not product_ids:
            return []

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/products/thumbnails",
                    params={"ids": list(product_ids)}
                )
        except httpx.TimeoutException as e:
            logger.error(f"❌ Timeout when fetching products {product_ids}")
            raise CatalogServiceError(
                "Catalog service timed out",
                details={"product_ids": list(product_ids)}
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Error fetching products {product_ids}: {e}")
            raise CatalogServiceError(
                "Catalog service is unavailable",
                details={"product_ids": list(product_ids)}
            ) from e

        if response.status_code != 200:
            logger.error(f"❌ Error fetching products {product_ids}: {response.status_code}")
            raise CatalogServiceError(
                f"Catalog service responded with status {response.status_code}",
                details={"product_ids": list(product_ids), "status_code": response.status_code}
            )

        products = [ProductThumbnail.model_validate(data) for data in response.json()]
        logger.info(f"✅ Retrieved {len(products)} of {len(product_ids)} products from catalog")
        return products
