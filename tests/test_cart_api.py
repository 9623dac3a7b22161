"""
Тесты HTTP API cart-service.

Роуты, CartService и SQLite работают вместе, подменяются только каталог и
сессия БД.
"""
from cart_service.exceptions import CatalogServiceError

HEADERS = {"X-Customer-Id": "customer-1"}


class TestReadEndpoints:

    def test_list_carts(self, test_client, carts):
        response = test_client.get("/api/v1/carts")

        assert response.status_code == 200
        assert sorted(cart["customer_id"] for cart in response.json()) == ["customer-1", "customer-2"]

    def test_cart_details_of_customer(self, test_client, carts):
        response = test_client.get("/api/v1/carts/customer-2")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["items"][0]["product_id"] == 2
        assert data[0]["items"][0]["quantity"] == 3

    def test_current_cart_requires_customer_header(self, test_client, carts):
        response = test_client.get("/api/v1/cart")

        assert response.status_code == 401

    def test_current_cart(self, test_client, carts):
        response = test_client.get("/api/v1/cart", headers=HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["customer_id"] == "customer-1"
        assert data["total_items"] == 2
        assert [item["product_id"] for item in data["items"]] == [1]

    def test_current_cart_for_new_customer_is_empty(self, test_client, carts):
        response = test_client.get("/api/v1/cart", headers={"X-Customer-Id": "customer-9"})

        assert response.status_code == 200
        assert response.json()["id"] is None
        assert response.json()["items"] == []

    def test_count(self, test_client, carts):
        response = test_client.get("/api/v1/cart/count", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"count": 2}


class TestMutatingEndpoints:

    def test_add_items(self, test_client, carts, stock_catalog):
        stock_catalog(3)

        response = test_client.post(
            "/api/v1/cart/items",
            json=[{"product_id": 3, "quantity": 2, "price": 10.0}],
            headers=HEADERS
        )

        assert response.status_code == 200
        data = response.json()
        assert data["customer_id"] == "customer-1"
        assert sorted(item["product_id"] for item in data["items"]) == [1, 3]
        assert data["total_items"] == 4

    def test_add_unknown_product_returns_404(self, test_client, carts):
        response = test_client.post(
            "/api/v1/cart/items",
            json=[{"product_id": 9, "quantity": 1}],
            headers=HEADERS
        )

        assert response.status_code == 404
        assert response.json() == {"error": "ProductNotFoundError", "detail": "Not found product [9]"}

    def test_add_with_negative_price_is_rejected(self, test_client, carts):
        response = test_client.post(
            "/api/v1/cart/items",
            json=[{"product_id": 3, "quantity": 1, "price": -1}],
            headers=HEADERS
        )

        assert response.status_code == 422

    def test_catalog_unavailable_returns_503(self, test_client, carts, catalog_client):
        catalog_client.get_products.side_effect = CatalogServiceError("Catalog service is unavailable")

        response = test_client.post(
            "/api/v1/cart/items",
            json=[{"product_id": 3, "quantity": 1}],
            headers=HEADERS
        )

        assert response.status_code == 503

    def test_update_item(self, test_client, carts):
        response = test_client.put(
            "/api/v1/cart/items",
            json={"product_id": 1, "quantity": 4},
            headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["status"] == "PRODUCT UPDATED"
        assert test_client.get("/api/v1/cart/count", headers=HEADERS).json() == {"count": 4}

    def test_update_item_to_zero_deletes_it(self, test_client, carts):
        response = test_client.put(
            "/api/v1/cart/items",
            json={"product_id": 1, "quantity": 0},
            headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["status"] == "PRODUCT DELETED"
        assert test_client.get("/api/v1/cart", headers=HEADERS).json()["items"] == []

    def test_remove_items_not_in_cart_returns_404(self, test_client, carts):
        response = test_client.delete("/api/v1/cart/items", params={"productIds": [4]}, headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["detail"] == "There is no product with ID: 4 in the current cart"

    def test_remove_items_from_empty_cart_returns_400(self, test_client, carts):
        response = test_client.delete(
            "/api/v1/cart/items",
            params={"productIds": [1]},
            headers={"X-Customer-Id": "customer-9"}
        )

        assert response.status_code == 400

    def test_remove_items(self, test_client, carts):
        response = test_client.delete("/api/v1/cart/items", params={"productIds": [1]}, headers=HEADERS)

        assert response.status_code == 204
        assert test_client.get("/api/v1/cart/count", headers=HEADERS).json() == {"count": 0}

    def test_remove_single_item_is_idempotent(self, test_client, carts):
        first = test_client.delete("/api/v1/cart/items/1", headers=HEADERS)
        second = test_client.delete("/api/v1/cart/items/1", headers=HEADERS)

        assert first.status_code == 204
        assert second.status_code == 204
