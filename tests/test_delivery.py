# OPSBOARD/tests/test_delivery.py : espace livreur et confirmation par lien

from helpers import ApiTestCase, client, PNG_BYTES


class TestDelivery(ApiTestCase):

    def setup_method(self):
        super().setup_method()
        self.headers = self.owner()
        self.invite, self.driver_headers = self.member(self.headers, "driver@test.com")
        self.driver_id = self.invite["member"]["user_id"]
        item = self.create_item(self.headers, name="Farine", quantity=100, unit_cost=1)
        self.item_id = item["id"]
        self.product = self.create_product(self.headers, quantity_available=10, components=[
            {"inventory_item_id": item["id"], "quantity": 2}
        ])

    def _ready_order(self, quantity=1):
        order = self.create_order(self.headers, self.product["id"], quantity=quantity)
        client.patch(f"/orders/{order['id']}/driver", json={"driver_id": self.driver_id}, headers=self.headers)
        return self.set_status(self.headers, order["id"], "Ready for Delivery").json()

    def _confirm(self, token, data=PNG_BYTES, content_type="image/png", notes=None):
        form = {"notes": notes} if notes else {}
        return client.post(
            f"/delivery/{token}/confirm",
            files={"photo": ("proof.png", data, content_type)},
            data=form
        )

    def test_public_delivery_page(self):
        order = self._ready_order()
        response = client.get(f"/delivery/{order['delivery_token']}")
        assert response.status_code == 200
        data = response.json()
        assert data["is_confirmed"] is False
        assert data["order"]["client_name"] == "Awa Diop"

    def test_unknown_token(self):
        response = client.get("/delivery/inconnu")
        assert response.status_code == 404
        assert "invalide ou expiré" in response.json()["detail"]

    def test_confirm_delivery_completes_order(self):
        order = self._ready_order(quantity=2)
        response = self._confirm(order["delivery_token"], notes="Laissé au gardien")
        assert response.status_code == 200
        data = response.json()
        assert data["is_confirmed"] is True
        assert data["driver_notes"] == "Laissé au gardien"
        assert data["delivery_photo_url"].startswith("/uploads/delivery-photos/")
        assert data["order"]["status"] == "Completed"

        order = client.get(f"/orders/{order['id']}", headers=self.headers).json()
        assert order["inventory_deducted"] is True
        item = client.get(f"/inventory/{self.item_id}", headers=self.headers).json()
        assert item["quantity"] == 96

    def test_confirm_twice_conflicts(self):
        order = self._ready_order()
        assert self._confirm(order["delivery_token"]).status_code == 200
        assert self._confirm(order["delivery_token"]).status_code == 409

    def test_photo_is_required(self):
        order = self._ready_order()
        response = client.post(f"/delivery/{order['delivery_token']}/confirm", data={"notes": "ok"})
        assert response.status_code == 400

    def test_photo_must_be_an_image(self):
        order = self._ready_order()
        response = self._confirm(order["delivery_token"], data=b"%PDF-1.4", content_type="application/pdf")
        assert response.status_code == 400
        page = client.get(f"/delivery/{order['delivery_token']}").json()
        assert page["is_confirmed"] is False
        assert page["order"]["status"] == "Ready for Delivery"

    def test_photo_size_limit(self):
        order = self._ready_order()
        big = b"\x00" * (5 * 1024 * 1024 + 1)
        response = self._confirm(order["delivery_token"], data=big)
        assert response.status_code == 400

    def test_cancelled_order_cannot_be_confirmed(self):
        order = self._ready_order()
        self.set_status(self.headers, order["id"], "Cancelled")
        assert self._confirm(order["delivery_token"]).status_code == 409

    def test_driver_deliveries(self):
        pending = self._ready_order()
        done = self._ready_order()
        self._confirm(done["delivery_token"])
        # Commande non assignée: invisible pour le livreur
        self.create_order(self.headers, self.product["id"])

        response = client.get("/driver/deliveries", headers=self.driver_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["pending_count"] == 1
        assert data["completed_count"] == 1
        assert data["completed_today"] == 1
        assert data["pending"][0]["id"] == pending["id"]
        assert data["pending"][0]["delivery_link"].endswith(pending["delivery_token"])

    def test_owner_is_not_a_driver(self):
        response = client.get("/driver/deliveries", headers=self.headers)
        assert response.status_code == 403
