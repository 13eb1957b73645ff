"""API tests for /api/v1/shop — session cart and checkout."""

from semisto.models.submission import Order

CUSTOMER = {"name": "Jeanne Dupont", "email": "jeanne@example.org", "phone": "0470000000"}


def _add(client, product_id, quantity=1):
    return client.post("/api/v1/shop/cart/items", json={"product_id": product_id, "quantity": quantity})


class TestCart:
    def test_empty_cart(self, client):
        body = client.get("/api/v1/shop/cart").get_json()
        assert body["lines"] == []
        assert body["subtotal"] == 0
        assert body["amount_to_free_pickup"] == 50
        assert body["currency"] == "EUR"

    def test_add_merges_and_persists_in_session(self, client):
        _add(client, "product-001")
        res = _add(client, "product-001", 2)
        assert res.status_code == 201
        body = client.get("/api/v1/shop/cart").get_json()
        assert len(body["lines"]) == 1
        assert body["lines"][0]["quantity"] == 3
        assert body["subtotal"] == 73.5

    def test_quantity_capped_at_stock(self, client):
        body = _add(client, "product-001", 50).get_json()
        assert body["lines"][0]["quantity"] == 12

    def test_out_of_stock_refused(self, client):
        res = _add(client, "product-004")
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_STATE"

    def test_unknown_product(self, client):
        assert _add(client, "nope").status_code == 404

    def test_bad_quantity(self, client):
        assert _add(client, "product-001", "many").status_code == 400
        assert _add(client, "product-001", 0).status_code == 400

    def test_set_quantity_zero_removes(self, client):
        _add(client, "product-002")
        res = client.put("/api/v1/shop/cart/items/product-002", json={"quantity": 0})
        assert res.get_json()["lines"] == []

    def test_update_item_not_in_cart(self, client):
        res = client.put("/api/v1/shop/cart/items/product-002", json={"quantity": 2})
        assert res.status_code == 404

    def test_delete_item_and_clear(self, client):
        _add(client, "product-002")
        _add(client, "product-003")
        body = client.delete("/api/v1/shop/cart/items/product-002").get_json()
        assert [line["product"]["id"] for line in body["lines"]] == ["product-003"]
        assert client.delete("/api/v1/shop/cart").get_json()["item_count"] == 0

    def test_suggestions_exclude_cart_and_out_of_stock(self, client):
        body = _add(client, "product-001").get_json()
        ids = [p["id"] for p in body["suggestions"]]
        assert "product-001" not in ids
        assert "product-004" not in ids
        assert len(ids) == 3

    def test_non_json_body_rejected(self, client):
        res = client.post("/api/v1/shop/cart/items", data="product_id=x",
                          content_type="application/x-www-form-urlencoded")
        assert res.status_code == 415


class TestCheckout:
    def _dispatch(self, client, action):
        return client.post("/api/v1/shop/checkout/dispatch", json=action)

    def test_dispatch_without_run(self, client):
        assert self._dispatch(client, {"type": "next"}).status_code == 409

    def test_empty_cart_is_blocked(self, client):
        client.post("/api/v1/shop/checkout/start")
        res = self._dispatch(client, {"type": "next"})
        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "WORKFLOW_BLOCKED"
        assert body["details"]["step"] == "cart"

    def test_full_checkout_clears_cart(self, client):
        _add(client, "product-002", 2)
        start = client.post("/api/v1/shop/checkout/start")
        assert start.status_code == 201
        assert start.get_json()["step"] == "cart"

        self._dispatch(client, {"type": "next"})
        self._dispatch(client, {"type": "update", "fields": CUSTOMER})
        assert self._dispatch(client, {"type": "next"}).get_json()["step"] == "pickup"
        self._dispatch(client, {"type": "update", "fields": {"pickup_location_id": "lab-fr"}})
        res = self._dispatch(client, {"type": "next"})

        body = res.get_json()
        assert res.status_code == 200
        assert body["committed"] is True
        assert body["completed"] is True
        assert body["result"]["order_code"] == "CMD-0001"
        assert Order.query.count() == 1
        assert client.get("/api/v1/shop/cart").get_json()["lines"] == []

        again = self._dispatch(client, {"type": "next"})
        assert again.status_code == 409
        assert again.get_json()["code"] == "WORKFLOW_COMPLETED"
        assert Order.query.count() == 1

    def test_get_checkout(self, client):
        assert client.get("/api/v1/shop/checkout").status_code == 404
        client.post("/api/v1/shop/checkout/start")
        assert client.get("/api/v1/shop/checkout").get_json()["workflow"] == "checkout"
