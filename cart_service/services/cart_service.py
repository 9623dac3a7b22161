import logging
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.cart import Cart
from ..models.cart_item import CartItem
from ..schemas.cart import CartSummary, CartDetailResponse
from ..schemas.cart_item import CartItemCreate, CartItemUpdate, CartItemPutResponse
from ..exceptions import (
    BadRequestError,
    EmptyCartError,
    InvalidQuantityError,
    ProductNotFoundError,
    ProductNotInCartError,
)
from .catalog_client import CatalogClient
from .kafka_client import kafka_client

logger = logging.getLogger(__name__)

PRODUCT_UPDATED = "PRODUCT UPDATED"
PRODUCT_DELETED = "PRODUCT DELETED"


class CartService:
    """
    Бизнес-логика корзины покупателя.

    Все методы принимают customer_id явно. Каждая мутация выполняется одной
    транзакцией: commit в конце, rollback при любой ошибке. События в Kafka
    публикуются только после успешного commit.
    """

    def __init__(self, db: Session, catalog_client: Optional[CatalogClient] = None):
        self.db = db
        self.catalog_client = catalog_client or CatalogClient()

    def _find_last_cart(self, customer_id: str) -> Optional[Cart]:
        """Последняя по времени создания корзина покупателя"""
        return (
            self.db.query(Cart)
            .filter(Cart.customer_id == customer_id)
            .order_by(Cart.created_at.desc(), Cart.id.desc())
            .first()
        )

    def _get_or_create_last_cart(self, customer_id: str) -> Cart:
        cart = self._find_last_cart(customer_id)
        if not cart:
            cart = Cart(customer_id=customer_id)
            self.db.add(cart)
            self.db.flush()
            logger.info(f"Created cart {cart.id} for customer {customer_id}")
        return cart

    def _find_item(self, cart_id: int, product_id: int) -> Optional[CartItem]:
        return self.db.query(CartItem).filter(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id
        ).first()

    async def _validate_products(self, product_ids: List[int]) -> None:
        """Все товары должны существовать в каталоге, иначе NotFoundError со списком отсутствующих"""
        products = await self.catalog_client.get_products(product_ids)
        found_ids = {product.id for product in products}
        missing_ids = [product_id for product_id in product_ids if product_id not in found_ids]
        if missing_ids:
            logger.warning(f"Products {missing_ids} not found in catalog")
            raise ProductNotFoundError(missing_ids)

    def get_carts(self) -> List[CartSummary]:
        """Список всех корзин"""
        carts = self.db.query(Cart).order_by(Cart.id).all()
        return [CartSummary.model_validate(cart) for cart in carts]

    def get_cart_detail_by_customer_id(self, customer_id: str) -> List[CartDetailResponse]:
        """Все корзины покупателя вместе с позициями, от старых к новым"""
        carts = (
            self.db.query(Cart)
            .filter(Cart.customer_id == customer_id)
            .order_by(Cart.created_at, Cart.id)
            .all()
        )
        return [CartDetailResponse.model_validate(cart) for cart in carts]

    def get_last_cart(self, customer_id: str) -> CartDetailResponse:
        """Актуальная корзина покупателя или пустая, если корзины ещё нет"""
        cart = self._find_last_cart(customer_id)
        if not cart:
            return CartDetailResponse(customer_id=customer_id)
        return CartDetailResponse.model_validate(cart)

    def count_items_in_cart(self, customer_id: str) -> int:
        """Сумма количеств по всем позициям актуальной корзины"""
        cart = self._find_last_cart(customer_id)
        if not cart:
            return 0

        total = (
            self.db.query(func.coalesce(func.sum(CartItem.quantity), 0))
            .filter(CartItem.cart_id == cart.id)
            .scalar()
        )
        return int(total)

    async def remove_cart_items_by_product_ids(self, product_ids: List[int], customer_id: str) -> None:
        """
        Удалить из актуальной корзины позиции с указанными товарами.

        Если хотя бы одного товара нет в корзине, ничего не удаляется.
        """
        cart = self._find_last_cart(customer_id)
        if not cart or not cart.items:
            raise EmptyCartError(customer_id)

        items_by_product = {item.product_id: item for item in cart.items}
        for product_id in product_ids:
            if product_id not in items_by_product:
                raise ProductNotInCartError(product_id, customer_id)

        cart_id = cart.id
        removed_ids = list(dict.fromkeys(product_ids))
        try:
            for product_id in removed_ids:
                self.db.delete(items_by_product[product_id])
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error removing products {removed_ids} from cart {cart_id}: {e}")
            raise

        logger.info(f"Removed products {removed_ids} from cart {cart_id}")
        for product_id in removed_ids:
            await self._publish_item_removed_event(customer_id, cart_id, product_id)

    async def remove_cart_item_by_product_id(self, product_id: int, customer_id: str) -> None:
        """Удалить товар из актуальной корзины; отсутствие позиции не ошибка"""
        cart = self._find_last_cart(customer_id)
        if not cart:
            return

        cart_id = cart.id
        item = self._find_item(cart_id, product_id)
        if not item:
            return

        try:
            self.db.delete(item)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error removing product {product_id} from cart {cart_id}: {e}")
            raise

        logger.info(f"Removed product {product_id} from cart {cart_id}")
        await self._publish_item_removed_event(customer_id, cart_id, product_id)

    async def add_to_cart(self, items: List[CartItemCreate], customer_id: str) -> CartDetailResponse:
        """
        Добавить товары в корзину покупателя.

        Товары проверяются в каталоге одним запросом. Корзина создаётся при
        первом добавлении. Для товара, который уже есть в корзине,
        количество увеличивается, новая позиция не создаётся.
        """
        if not items:
            raise BadRequestError("No items to add to cart", details={"customer_id": customer_id})

        for item_data in items:
            if item_data.quantity <= 0:
                raise InvalidQuantityError(item_data.product_id, item_data.quantity)

        product_ids = list(dict.fromkeys(item_data.product_id for item_data in items))
        await self._validate_products(product_ids)

        try:
            cart = self._get_or_create_last_cart(customer_id)
            items_by_product = {item.product_id: item for item in cart.items}
            actions = {}

            for item_data in items:
                item = items_by_product.get(item_data.product_id)
                if item:
                    item.quantity += item_data.quantity
                    actions.setdefault(item_data.product_id, "updated")
                else:
                    item = CartItem(
                        product_id=item_data.product_id,
                        quantity=item_data.quantity
                    )
                    cart.items.append(item)
                    items_by_product[item_data.product_id] = item
                    actions[item_data.product_id] = "added"

                if item_data.price is not None:
                    item.price_at_add = item_data.price

            self.db.commit()
            self.db.refresh(cart)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error adding products {product_ids} to cart of customer {customer_id}: {e}")
            raise

        logger.info(f"Added products {product_ids} to cart {cart.id} of customer {customer_id}")

        for product_id, action in actions.items():
            await self._publish_item_added_event(customer_id, cart.id, items_by_product[product_id], action)

        return CartDetailResponse.model_validate(cart)

    async def update_cart_item(self, item_data: CartItemUpdate, customer_id: str) -> CartItemPutResponse:
        """
        Установить количество товара в актуальной корзине.

        quantity == 0 удаляет позицию, quantity > 0 обновляет её или создаёт,
        если товара в корзине ещё нет.
        """
        product_id = item_data.product_id
        if item_data.quantity < 0:
            raise InvalidQuantityError(product_id, item_data.quantity)

        cart = self._find_last_cart(customer_id)
        item = self._find_item(cart.id, product_id) if cart else None

        if item_data.quantity == 0:
            if not item:
                raise ProductNotInCartError(product_id, customer_id)

            cart_id = cart.id
            try:
                self.db.delete(item)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Error deleting product {product_id} from cart {cart_id}: {e}")
                raise

            logger.info(f"Deleted product {product_id} from cart {cart_id}")
            await self._publish_item_removed_event(customer_id, cart_id, product_id)
            return CartItemPutResponse(
                cart_id=cart_id,
                customer_id=customer_id,
                product_id=product_id,
                quantity=0,
                status=PRODUCT_DELETED
            )

        if not item:
            await self._validate_products([product_id])

        old_quantity = item.quantity if item else 0
        try:
            if not item:
                cart = self._get_or_create_last_cart(customer_id)
                item = CartItem(product_id=product_id, quantity=item_data.quantity)
                cart.items.append(item)
            else:
                item.quantity = item_data.quantity

            if item_data.price is not None:
                item.price_at_add = item_data.price

            self.db.commit()
            self.db.refresh(item)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating product {product_id} in cart of customer {customer_id}: {e}")
            raise

        logger.info(f"Set quantity of product {product_id} in cart {item.cart_id} to {item.quantity}")

        if old_quantity:
            await self._publish_item_updated_event(customer_id, item, old_quantity)
        else:
            await self._publish_item_added_event(customer_id, item.cart_id, item, "added")

        return CartItemPutResponse(
            cart_id=item.cart_id,
            customer_id=customer_id,
            product_id=product_id,
            quantity=item.quantity,
            status=PRODUCT_UPDATED
        )

    # Публикация событий в Kafka

    async def _publish_item_added_event(self, customer_id: str, cart_id: int, item: CartItem, action: str):
        """Публикация события добавления товара в корзину"""
        try:
            payload = {
                "cart_id": cart_id,
                "customer_id": customer_id,
                "item": {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price_at_add": item.price_at_add
                },
                "action": action  # "added" или "updated"
            }

            await kafka_client.publish_event(
                topic="cart.item.added",
                event_type="item_added_to_cart",
                payload=payload,
                key=customer_id
            )
        except Exception as e:
            logger.error(f"❌ Failed to publish item_added event: {e}")

    async def _publish_item_updated_event(self, customer_id: str, item: CartItem, old_quantity: int):
        """Публикация события обновления товара"""
        try:
            payload = {
                "cart_id": item.cart_id,
                "customer_id": customer_id,
                "item": {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "old_quantity": old_quantity,
                    "price_at_add": item.price_at_add
                },
                "action": "updated",
                "change": {
                    "from": old_quantity,
                    "to": item.quantity,
                    "difference": item.quantity - old_quantity
                }
            }

            await kafka_client.publish_event(
                topic="cart.item.updated",
                event_type="item_updated_in_cart",
                payload=payload,
                key=customer_id
            )
        except Exception as e:
            logger.error(f"❌ Failed to publish item_updated event: {e}")

    async def _publish_item_removed_event(self, customer_id: str, cart_id: int, product_id: int):
        """Публикация события удаления товара"""
        try:
            payload = {
                "cart_id": cart_id,
                "customer_id": customer_id,
                "product_id": product_id,
                "action": "removed"
            }

            await kafka_client.publish_event(
                topic="cart.item.removed",
                event_type="item_removed_from_cart",
                payload=payload,
                key=customer_id
            )
        except Exception as e:
            logger.error(f"❌ Failed to publish item_removed event: {e}")
