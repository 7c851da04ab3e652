from tests.web.conftest import create_inventory_item_in_db


def _item_payload(**overrides) -> dict:
    payload = {
        "item_name": "Shirt",
        "unit_price": "500",
        "available_quantity": "10",
        "category": "Clothing",
        "sku": "SH-001",
    }
    payload.update(overrides)
    return payload


class TestInventoryRoutes:
    def test_create(self, client):
        response = client.post("/affiliates/1/inventory", json=_item_payload())
        assert response.status_code == 201
        item = response.json()["item"]
        assert item["item_name"] == "Shirt"
        assert item["unit_price"] == "500.00"
        assert item["unit"] == "pcs"
        assert item["is_low_stock"] is False

    def test_create_duplicate(self, client):
        client.post("/affiliates/1/inventory", json=_item_payload())
        response = client.post("/affiliates/1/inventory", json=_item_payload())
        assert response.status_code == 400
        assert response.json()["code"] == "duplicate_inventory_item"

    def test_same_name_other_affiliate(self, client):
        client.post("/affiliates/1/inventory", json=_item_payload())
        assert client.post("/affiliates/2/inventory", json=_item_payload()).status_code == 201

    def test_create_negative_price(self, client):
        response = client.post("/affiliates/1/inventory", json=_item_payload(unit_price="-1"))
        assert response.status_code == 400

    def test_list_and_low_stock_filter(self, client, test_engine):
        create_inventory_item_in_db(test_engine)
        create_inventory_item_in_db(test_engine, item_name="Cap", available_quantity=1)

        data = client.get("/affiliates/1/inventory").json()
        assert data["count"] == 2

        low = client.get("/affiliates/1/inventory", params={"low_stock": "true"}).json()
        assert [item["item_name"] for item in low["items"]] == ["Cap"]

    def test_search(self, client, test_engine):
        create_inventory_item_in_db(test_engine)
        create_inventory_item_in_db(test_engine, item_name="Cap")
        response = client.get("/affiliates/1/inventory/search", params={"q": "sh"})
        assert [i["item_name"] for i in response.json()["items"]] == ["Shirt"]
        assert client.get("/affiliates/1/inventory/search", params={"q": "s"}).json()["items"] == []

    def test_update(self, client, test_engine):
        item = create_inventory_item_in_db(test_engine)
        response = client.put(
            f"/affiliates/1/inventory/{item.id}",
            json={"unit_price": "450.50", "available_quantity": "4"},
        )
        assert response.status_code == 200
        updated = response.json()["item"]
        assert updated["unit_price"] == "450.50"
        assert updated["is_low_stock"] is True

    def test_update_other_affiliate(self, client, test_engine):
        item = create_inventory_item_in_db(test_engine, affiliate_id=2)
        response = client.put(f"/affiliates/1/inventory/{item.id}", json={"unit": "box"})
        assert response.status_code == 404

    def test_delete_with_stock_refused(self, client, test_engine):
        item = create_inventory_item_in_db(test_engine)
        response = client.delete(f"/affiliates/1/inventory/{item.id}")
        assert response.status_code == 400
        assert response.json()["code"] == "stock_remaining"

    def test_delete(self, client, test_engine):
        item = create_inventory_item_in_db(test_engine, available_quantity=0)
        assert client.delete(f"/affiliates/1/inventory/{item.id}").status_code == 200
        assert client.get("/affiliates/1/inventory").json()["count"] == 0
        assert client.delete(f"/affiliates/1/inventory/{item.id}").status_code == 404
