"""
Общие фикстуры тестов cart-service.

Сервис работает с in-memory SQLite, catalog-service подменяется AsyncMock,
публикация событий в Kafka отключена.
"""
import os

# Настройки читаются при импорте cart_service.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["KAFKA_ENABLED"] = "false"

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cart_service.api.dependencies import get_catalog_client
from cart_service.database import Base, get_db
from cart_service.main import app
from cart_service.models import Cart, CartItem
from cart_service.schemas.product import ProductThumbnail
from cart_service.services.cart_service import CartService
from cart_service.services.catalog_client import CatalogClient

CUSTOMER_1 = "customer-1"
CUSTOMER_2 = "customer-2"


def thumbnail(product_id: int) -> ProductThumbnail:
    return ProductThumbnail(
        id=product_id,
        name=f"Product {product_id}",
        slug=f"product-{product_id}",
        thumbnail_url=f"http://images/{product_id}.png"
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def carts(db_session):
    """customer-1: товар 1 x 2, customer-2: товар 2 x 3"""
    cart1 = Cart(customer_id=CUSTOMER_1)
    cart2 = Cart(customer_id=CUSTOMER_2)
    db_session.add_all([cart1, cart2])
    db_session.flush()

    db_session.add_all([
        CartItem(cart_id=cart1.id, product_id=1, quantity=2),
        CartItem(cart_id=cart2.id, product_id=2, quantity=3),
    ])
    db_session.commit()
    return cart1, cart2


@pytest.fixture
def catalog_client():
    """Каталог, в котором по умолчанию нет ни одного товара"""
    client = AsyncMock(spec=CatalogClient)
    client.get_products.return_value = []
    return client


@pytest.fixture
def cart_service(db_session, catalog_client):
    return CartService(db_session, catalog_client)


@pytest.fixture
def test_client(db_session, catalog_client):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_client] = lambda: catalog_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def stock_catalog(catalog_client):
    """Наполнить каталог товарами с указанными ID"""
    def _stock(*product_ids):
        catalog_client.get_products.return_value = [thumbnail(pid) for pid in product_ids]
    return _stock
