"""
Исключения cart-service.

Каждое исключение несёт сообщение для клиента и словарь с контекстом
(ID товаров, покупателя). Соответствие HTTP-статусам задаётся в main.py.
"""
from typing import Iterable, Optional


class CartServiceException(Exception):
    """Базовое исключение cart-service"""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class BadRequestError(CartServiceException):
    """Операция некорректна для текущего состояния корзины"""

    status_code = 400


class NotFoundError(CartServiceException):
    """Товар или позиция корзины не найдены"""

    status_code = 404


class CatalogServiceError(CartServiceException):
    """catalog-service недоступен или ответил ошибкой"""

    status_code = 503


class EmptyCartError(BadRequestError):
    def __init__(self, customer_id: str):
        super().__init__(
            "There is no cart item in current cart to update!",
            details={"customer_id": customer_id}
        )
        self.customer_id = customer_id


class ProductNotInCartError(NotFoundError):
    def __init__(self, product_id: int, customer_id: str):
        super().__init__(
            f"There is no product with ID: {product_id} in the current cart",
            details={"product_id": product_id, "customer_id": customer_id}
        )
        self.product_id = product_id
        self.customer_id = customer_id


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_ids: Iterable[int]):
        self.product_ids = list(product_ids)
        super().__init__(
            f"Not found product [{', '.join(str(pid) for pid in self.product_ids)}]",
            details={"product_ids": self.product_ids}
        )


class InvalidQuantityError(BadRequestError):
    def __init__(self, product_id: int, quantity: int):
        super().__init__(
            f"Invalid quantity {quantity} for product {product_id}",
            details={"product_id": product_id, "quantity": quantity}
        )
        self.product_id = product_id
        self.quantity = quantity
