from .cart_service import CartService
from .catalog_client import CatalogClient
from .kafka_client import KafkaClient, kafka_client

__all__ = [
    "CartService",
    "CatalogClient",
    "KafkaClient",
    "kafka_client"
]
