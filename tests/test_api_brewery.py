"""API tests for brewery inventory."""

import pytest

from saas_suite.models import User, UserRole
from saas_suite.models.brewery import Expense, InventoryItem, InventoryLedger


@pytest.fixture
def brewer(seed, auth):
    return auth(seed.brewer)


def create_item(client, headers, **overrides):
    payload = {
        "sku": "malt-pils",
        "name": "Pilsner Malt",
        "category": "RAW_MATERIAL",
        "unit": "kg",
        "reorder_point": 50,
        "cost_per_unit": 1.2,
        **overrides,
    }
    return client.post("/api/brewery/inventory", headers=headers, json=payload)


@pytest.fixture
def malt(client, brewer):
    response = create_item(client, brewer, quantity=100)
    assert response.status_code == 201
    return response.json()


class TestItems:
    def test_create_with_opening_stock(self, malt, db):
        assert malt["sku"] == "MALT-PILS"
        assert malt["ingredient_type"] == "MALT"
        assert malt["balance"] == 100
        assert malt["is_low_stock"] is False

        (entry,) = db.query(InventoryLedger).filter(InventoryLedger.item_id == malt["id"]).all()
        assert entry.type == "PURCHASE"
        assert entry.notes == "Opening stock"

    def test_create_without_stock_is_out_of_stock(self, client, brewer):
        response = create_item(client, brewer, sku="HOP-CIT", name="Citra")

        assert response.status_code == 201
        assert response.json()["ingredient_type"] == "HOPS"
        assert response.json()["is_out_of_stock"] is True

    def test_packaging_has_no_ingredient_type(self, client, brewer):
        response = create_item(client, brewer, sku="CAN-440", name="440ml can", category="PACKAGING", unit="unit")
        assert response.json()["ingredient_type"] is None

    def test_duplicate_sku(self, client, brewer, malt):
        response = create_item(client, brewer, sku="MALT-PILS")

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_SKU"

    def test_get_item_of_other_tenant_is_404(self, client, malt, seed, auth):
        response = client.get(f"/api/brewery/inventory/{malt['id']}", headers=auth(seed.owner_a))
        assert response.status_code == 404

    def test_list_filters(self, client, brewer, malt):
        create_item(client, brewer, sku="HOP-CIT", name="Citra", quantity=2, reorder_point=5)
        create_item(client, brewer, sku="CAN-440", name="440ml can", category="PACKAGING", unit="unit")

        def skus(**params):
            response = client.get("/api/brewery/inventory", headers=brewer, params=params)
            return sorted(item["sku"] for item in response.json()["items"])

        assert skus() == ["CAN-440", "HOP-CIT", "MALT-PILS"]
        assert skus(category="hops") == ["HOP-CIT"]
        assert skus(category="PACKAGING") == ["CAN-440"]
        assert skus(search="pils") == ["MALT-PILS"]
        assert skus(low_stock="true") == ["HOP-CIT"]

    def test_unknown_category(self, client, brewer):
        response = client.get("/api/brewery/inventory", headers=brewer, params={"category": "BARRELS"})
        assert response.status_code == 400


class TestPurchases:
    def test_purchase_updates_balance_and_books_expense(self, client, brewer, malt, db):
        response = client.post("/api/brewery/inventory/purchase", headers=brewer, json={
            "item_id": malt["id"],
            "quantity": 25,
            "unit_price": 1.5,
            "supplier": "Weyermann",
            "invoice_number": "INV-77",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["new_balance"] == 125
        assert body["total_amount"] == pytest.approx(37.5)

        expense = db.get(Expense, body["expense_id"])
        assert expense.category == "INGREDIENTS"
        assert float(expense.amount) == pytest.approx(37.5)
        assert expense.invoice_number == "INV-77"

        item = client.get(f"/api/brewery/inventory/{malt['id']}", headers=brewer).json()
        assert item["cost_per_unit"] == pytest.approx(1.5)
        assert item["supplier"] == "Weyermann"

    def test_purchase_without_expense(self, client, brewer, malt, db):
        response = client.post("/api/brewery/inventory/purchase", headers=brewer, json={
            "item_id": malt["id"], "quantity": 10, "create_expense": False,
        })

        assert response.json()["expense_id"] is None
        assert db.query(Expense).count() == 0

    def test_purchase_falls_back_to_item_cost(self, client, brewer, malt):
        response = client.post("/api/brewery/inventory/purchase", headers=brewer, json={
            "item_id": malt["id"], "quantity": 10,
        })
        assert response.json()["total_amount"] == pytest.approx(12.0)

    def test_zero_quantity_is_rejected(self, client, brewer, malt):
        response = client.post("/api/brewery/inventory/purchase", headers=brewer, json={
            "item_id": malt["id"], "quantity": 0,
        })
        assert response.status_code == 400


class TestAdjustments:
    def test_consumption_always_removes_stock(self, client, brewer, malt):
        response = client.post(f"/api/brewery/inventory/{malt['id']}/adjust", headers=brewer, json={
            "quantity": 30, "type": "CONSUMPTION", "notes": "Brew #12",
        })

        assert response.status_code == 200
        assert response.json()["balance"] == 70

    def test_cannot_go_below_zero(self, client, brewer, malt):
        response = client.post(f"/api/brewery/inventory/{malt['id']}/adjust", headers=brewer, json={
            "quantity": -101,
        })

        assert response.status_code == 400
        item = client.get(f"/api/brewery/inventory/{malt['id']}", headers=brewer).json()
        assert item["balance"] == 100

    def test_movements_by_sku(self, client, brewer, malt):
        client.post(f"/api/brewery/inventory/{malt['id']}/adjust", headers=brewer, json={
            "quantity": 5, "type": "WASTE",
        })

        response = client.get("/api/brewery/inventory/malt-pils/movements", headers=brewer)

        assert response.status_code == 200
        body = response.json()
        assert body["item_id"] == malt["id"]
        assert body["balance"] == 95
        assert sorted((m["type"], m["quantity"]) for m in body["movements"]) == [
            ("PURCHASE", 100), ("WASTE", -5),
        ]

    def test_viewer_cannot_adjust(self, client, malt, db, seed, auth):
        viewer = User(
            tenant_id=seed.brewery.id, email="taproom@copperkettle.com",
            hashed_password="x", role=UserRole.VIEWER.value,
        )
        db.add(viewer)
        db.commit()

        response = client.post(f"/api/brewery/inventory/{malt['id']}/adjust", headers=auth(viewer), json={
            "quantity": -1,
        })
        assert response.status_code == 403

    def test_inactive_item_has_no_movements(self, client, brewer, malt, db):
        item = db.get(InventoryItem, malt["id"])
        item.is_active = False
        db.commit()

        assert client.get("/api/brewery/inventory/MALT-PILS/movements", headers=brewer).status_code == 404
        assert client.get(f"/api/brewery/inventory/{malt['id']}/movements", headers=brewer).status_code == 404
