# OPSBOARD/tests/test_business.py : onboarding, paramètres et budget

from helpers import ApiTestCase, client


class TestBusiness(ApiTestCase):

    def test_list_currencies(self):
        response = client.get("/businesses/currencies")
        assert response.status_code == 200
        codes = {c["code"]: c["symbol"] for c in response.json()}
        assert len(codes) == 8
        assert codes["EUR"] == "€"
        assert codes["BRL"] == "R$"

    def test_onboarding(self):
        """L'onboarding crée l'entreprise, le rôle owner et un budget à zéro"""
        self.register("owner@test.com")
        headers = self.login("owner@test.com")

        response = client.post("/businesses/", json={"name": "Ma Boutique", "currency": "EUR"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ma Boutique"
        assert data["currency"] == "EUR"
        assert data["currency_symbol"] == "€"

        me = self.me(headers)
        assert me["needs_onboarding"] is False
        assert me["roles"] == ["owner"]
        assert me["business"]["id"] == data["id"]

        budget = client.get("/budget/", headers=headers).json()
        assert budget["total_budget"] == 0
        assert budget["amount_spent"] == 0

    def test_onboarding_twice_conflicts(self):
        headers = self.owner()
        response = client.post("/businesses/", json={"name": "Deuxième", "currency": "USD"}, headers=headers)
        assert response.status_code == 409

    def test_onboarding_unknown_currency(self):
        self.register("owner@test.com")
        headers = self.login("owner@test.com")
        response = client.post("/businesses/", json={"name": "Boutique", "currency": "FCFA"}, headers=headers)
        assert response.status_code == 400
        assert self.me(headers)["needs_onboarding"] is True

    def test_get_current_business(self):
        headers = self.owner(business="Atelier")
        response = client.get("/businesses/current", headers=headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Atelier"

    def test_owner_updates_settings(self):
        headers = self.owner()
        response = client.patch("/businesses/current", json={"name": "Nouveau nom", "currency": "GBP"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Nouveau nom"
        assert data["currency_symbol"] == "£"

    def test_admin_cannot_update_settings(self):
        owner_headers = self.owner()
        _, admin_headers = self.member(owner_headers, "admin@test.com", role="admin")
        response = client.patch("/businesses/current", json={"name": "Piraté"}, headers=admin_headers)
        assert response.status_code == 403

    def test_update_budget(self):
        headers = self.owner()
        response = client.put("/budget/", json={"total_budget": 1000, "amount_spent": 1200}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["remaining"] == -200
        assert data["is_over_budget"] is True

    def test_negative_budget_rejected(self):
        headers = self.owner()
        response = client.put("/budget/", json={"total_budget": -5, "amount_spent": 0}, headers=headers)
        assert response.status_code == 422

    def test_tenants_are_isolated(self):
        """Un article d'une autre entreprise est introuvable"""
        headers_a = self.owner("a@test.com", business="A")
        headers_b = self.owner("b@test.com", business="B")
        item = self.create_item(headers_a)

        assert client.get(f"/inventory/{item['id']}", headers=headers_b).status_code == 404
        assert client.get("/inventory/", headers=headers_b).json()["total_count"] == 0
