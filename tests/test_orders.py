# OPSBOARD/tests/test_orders.py : commandes, kanban et mouvements de stock

from helpers import ApiTestCase, client


class TestOrders(ApiTestCase):

    def setup_method(self):
        super().setup_method()
        self.headers = self.owner()
        self.flour = self.create_item(self.headers, name="Farine", quantity=100, unit_cost=1.50)
        self.sugar = self.create_item(self.headers, name="Sucre", quantity=100, unit_cost=0.50)
        self.product = self.create_product(self.headers, name="Gâteau", quantity_available=10, components=[
            {"inventory_item_id": self.flour["id"], "quantity": 3},
            {"inventory_item_id": self.sugar["id"], "quantity": 2},
        ])

    def _item(self, item_id):
        return client.get(f"/inventory/{item_id}", headers=self.headers).json()

    def _product(self):
        return client.get(f"/products/{self.product['id']}", headers=self.headers).json()

    # ========== CRÉATION / ÉDITION ==========

    def test_create_order(self):
        order = self.create_order(self.headers, self.product["id"], quantity=3)
        assert order["status"] == "New Inquiry"
        assert order["product_name"] == "Gâteau"
        assert order["sale_price"] == 19.8
        assert order["inventory_deducted"] is False

    def test_outstanding_orders_cannot_exceed_product_stock(self):
        self.create_order(self.headers, self.product["id"], quantity=6)
        response = client.post("/orders/", json={
            "client_name": "Client 2",
            "product_id": self.product["id"],
            "quantity": 5
        }, headers=self.headers)
        assert response.status_code == 400
        assert "Stock insuffisant" in response.json()["detail"]
        self.create_order(self.headers, self.product["id"], quantity=4)

    def test_cancelled_orders_free_capacity(self):
        order = self.create_order(self.headers, self.product["id"], quantity=10)
        assert self.set_status(self.headers, order["id"], "Cancelled").status_code == 200
        self.create_order(self.headers, self.product["id"], quantity=10)

    def test_reopening_cancelled_order_checks_capacity(self):
        first = self.create_order(self.headers, self.product["id"], quantity=10)
        self.set_status(self.headers, first["id"], "Cancelled")
        self.create_order(self.headers, self.product["id"], quantity=10)
        response = self.set_status(self.headers, first["id"], "In Progress")
        assert response.status_code == 400

    def test_unknown_product(self):
        response = client.post("/orders/", json={
            "client_name": "X", "product_id": 9999, "quantity": 1
        }, headers=self.headers)
        assert response.status_code == 404

    def test_quantity_limits(self):
        for quantity in (0, 10001):
            response = client.post("/orders/", json={
                "client_name": "X", "product_id": self.product["id"], "quantity": quantity
            }, headers=self.headers)
            assert response.status_code == 422

    def test_edit_order_rescales_price(self):
        order = self.create_order(self.headers, self.product["id"], quantity=2)
        response = client.put(f"/orders/{order['id']}", json={
            "client_name": "Awa Diop",
            "client_contact": "awa@test.com",
            "quantity": 5
        }, headers=self.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["quantity"] == 5
        assert data["sale_price"] == 33.0
        assert data["client_contact"] == "awa@test.com"

    def test_edit_quantity_checks_capacity(self):
        order = self.create_order(self.headers, self.product["id"], quantity=2)
        self.create_order(self.headers, self.product["id"], quantity=7)
        response = client.put(f"/orders/{order['id']}", json={
            "client_name": "Awa Diop", "quantity": 4
        }, headers=self.headers)
        assert response.status_code == 400
        response = client.put(f"/orders/{order['id']}", json={
            "client_name": "Awa Diop", "quantity": 3
        }, headers=self.headers)
        assert response.status_code == 200

    def test_closed_orders_cannot_be_edited(self):
        order = self.create_order(self.headers, self.product["id"])
        self.set_status(self.headers, order["id"], "Completed")
        response = client.put(f"/orders/{order['id']}", json={
            "client_name": "Autre", "quantity": 1
        }, headers=self.headers)
        assert response.status_code == 409

    # ========== STATUTS ET STOCK ==========

    def test_completion_deducts_inventory_once(self):
        order = self.create_order(self.headers, self.product["id"], quantity=2)
        response = self.set_status(self.headers, order["id"], "Completed")
        assert response.status_code == 200
        assert response.json()["inventory_deducted"] is True

        assert self._item(self.flour["id"])["quantity"] == 94
        assert self._item(self.sugar["id"])["quantity"] == 96
        assert self._product()["quantity_available"] == 8

        # Re-poser le même statut ne consomme rien de plus
        self.set_status(self.headers, order["id"], "Completed")
        assert self._item(self.flour["id"])["quantity"] == 94

    def test_cancelling_completed_order_restores_inventory(self):
        order = self.create_order(self.headers, self.product["id"], quantity=2)
        self.set_status(self.headers, order["id"], "Completed")
        response = self.set_status(self.headers, order["id"], "Cancelled")
        assert response.status_code == 200
        assert response.json()["inventory_deducted"] is False

        assert self._item(self.flour["id"])["quantity"] == 100
        assert self._item(self.sugar["id"])["quantity"] == 100
        assert self._product()["quantity_available"] == 10

    def test_moving_back_from_completed_restores_inventory(self):
        order = self.create_order(self.headers, self.product["id"], quantity=1)
        self.set_status(self.headers, order["id"], "Completed")
        self.set_status(self.headers, order["id"], "In Progress")
        assert self._item(self.flour["id"])["quantity"] == 100
        self.set_status(self.headers, order["id"], "Completed")
        assert self._item(self.flour["id"])["quantity"] == 97

    def test_completion_never_drives_stock_negative(self):
        order = self.create_order(self.headers, self.product["id"], quantity=5)
        # Inventaire corrigé à la main: 10 farines pour 15 nécessaires
        client.put(f"/inventory/{self.flour['id']}", json={
            "name": "Farine", "quantity": 10, "unit_cost": 1.5
        }, headers=self.headers)

        response = self.set_status(self.headers, order["id"], "Completed")
        assert response.status_code == 400
        assert "Farine" in response.json()["detail"]

        # Rien n'a bougé
        assert self._item(self.flour["id"])["quantity"] == 10
        assert self._item(self.sugar["id"])["quantity"] == 100
        assert self._product()["quantity_available"] == 10
        assert client.get(f"/orders/{order['id']}", headers=self.headers).json()["status"] == "New Inquiry"

    def test_repeated_component_counted_once_per_item(self):
        """Deux lignes de 3 farines: 12 farines pour 2 gâteaux, 10 en stock"""
        double = self.create_product(self.headers, name="Double", quantity_available=2, components=[
            {"inventory_item_id": self.flour["id"], "quantity": 3},
            {"inventory_item_id": self.flour["id"], "quantity": 3},
        ])
        order = self.create_order(self.headers, double["id"], quantity=2)
        client.put(f"/inventory/{self.flour['id']}", json={
            "name": "Farine", "quantity": 10, "unit_cost": 1.5
        }, headers=self.headers)

        response = self.set_status(self.headers, order["id"], "Completed")
        assert response.status_code == 400
        assert "requis 12" in response.json()["detail"]
        assert self._item(self.flour["id"])["quantity"] == 10

        client.put(f"/inventory/{self.flour['id']}", json={
            "name": "Farine", "quantity": 12, "unit_cost": 1.5
        }, headers=self.headers)
        assert self.set_status(self.headers, order["id"], "Completed").status_code == 200
        assert self._item(self.flour["id"])["quantity"] == 0

    def test_ready_for_delivery_issues_token(self):
        order = self.create_order(self.headers, self.product["id"])
        response = self.set_status(self.headers, order["id"], "Ready for Delivery")
        data = response.json()
        assert data["delivery_token"]
        assert data["delivery_link"].endswith(f"/delivery/{data['delivery_token']}")

        # Le jeton est stable
        self.set_status(self.headers, order["id"], "In Progress")
        again = self.set_status(self.headers, order["id"], "Ready for Delivery").json()
        assert again["delivery_token"] == data["delivery_token"]

    def test_invalid_status(self):
        order = self.create_order(self.headers, self.product["id"])
        response = self.set_status(self.headers, order["id"], "Shipped")
        assert response.status_code == 422

    def test_delete_completed_order_restores_inventory(self):
        order = self.create_order(self.headers, self.product["id"], quantity=2)
        self.set_status(self.headers, order["id"], "Completed")
        response = client.delete(f"/orders/{order['id']}", headers=self.headers)
        assert response.status_code == 200
        assert self._item(self.flour["id"])["quantity"] == 100
        assert self._product()["quantity_available"] == 10
        assert client.get(f"/orders/{order['id']}", headers=self.headers).status_code == 404

    # ========== LECTURE ==========

    def test_kanban(self):
        first = self.create_order(self.headers, self.product["id"])
        self.create_order(self.headers, self.product["id"])
        self.set_status(self.headers, first["id"], "In Progress")

        columns = client.get("/orders/kanban", headers=self.headers).json()
        assert [c["status"] for c in columns] == [
            "New Inquiry", "In Progress", "Deposit Received",
            "Ready for Delivery", "Completed", "Cancelled"
        ]
        counts = {c["status"]: c["count"] for c in columns}
        assert counts["New Inquiry"] == 1
        assert counts["In Progress"] == 1
        assert counts["Completed"] == 0

    def test_list_filters(self):
        first = self.create_order(self.headers, self.product["id"], client_name="Awa Diop")
        self.create_order(self.headers, self.product["id"], client_name="Moussa Ba")
        self.set_status(self.headers, first["id"], "Deposit Received")

        data = client.get("/orders/", params={"search": "moussa"}, headers=self.headers).json()
        assert [o["client_name"] for o in data] == ["Moussa Ba"]

        data = client.get("/orders/", params=[("status", "Deposit Received"), ("status", "Cancelled")], headers=self.headers).json()
        assert [o["client_name"] for o in data] == ["Awa Diop"]

        data = client.get("/orders/", params={"date_from": "2000-01-01", "date_to": "2000-12-31"}, headers=self.headers).json()
        assert data == []

        data = client.get("/orders/", headers=self.headers).json()
        assert [o["client_name"] for o in data] == ["Moussa Ba", "Awa Diop"]

    def test_unknown_status_filter(self):
        response = client.get("/orders/", params={"status": "Shipped"}, headers=self.headers)
        assert response.status_code == 400

    # ========== LIVREURS ==========

    def test_assign_driver(self):
        invite, _ = self.member(self.headers, "driver@test.com")
        order = self.create_order(self.headers, self.product["id"])
        response = client.patch(f"/orders/{order['id']}/driver", json={"driver_id": invite["member"]["user_id"]}, headers=self.headers)
        assert response.status_code == 200
        assert response.json()["assigned_driver_id"] == invite["member"]["user_id"]

        response = client.patch(f"/orders/{order['id']}/driver", json={"driver_id": None}, headers=self.headers)
        assert response.json()["assigned_driver_id"] is None

    def test_assign_non_driver_rejected(self):
        invite, _ = self.member(self.headers, "admin@test.com", role="admin")
        order = self.create_order(self.headers, self.product["id"])
        response = client.patch(f"/orders/{order['id']}/driver", json={"driver_id": invite["member"]["user_id"]}, headers=self.headers)
        assert response.status_code == 400
