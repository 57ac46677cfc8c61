# OPSBOARD/tests/helpers.py : base commune des tests d'API

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from opsboard.main import app
from opsboard.database import Base, get_db
from opsboard.models import models

# Base de données de test
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

client = TestClient(app)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class ApiTestCase:
    """Tables créées avant et supprimées après chaque test"""

    password = "Test123!"

    def setup_method(self):
        Base.metadata.create_all(bind=engine)

    def teardown_method(self):
        Base.metadata.drop_all(bind=engine)

    # ---------- Comptes ----------

    def register(self, email, password=None, full_name=None):
        response = client.post("/users/register", json={
            "email": email,
            "password": password or self.password,
            "full_name": full_name
        })
        assert response.status_code == 200, response.text
        return response.json()

    def login(self, email, password=None):
        response = client.post("/users/login", json={
            "email": email,
            "password": password or self.password
        })
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def owner(self, email="owner@test.com", business="Boutique Test", currency="USD"):
        """Inscrit un utilisateur, crée son entreprise et retourne ses en-têtes"""
        self.register(email)
        headers = self.login(email)
        response = client.post("/businesses/", json={"name": business, "currency": currency}, headers=headers)
        assert response.status_code == 200, response.text
        return headers

    def member(self, owner_headers, email, role="driver"):
        """Invite un membre, puis se connecte avec son mot de passe temporaire"""
        response = client.post("/team/invite", json={"email": email, "role": role}, headers=owner_headers)
        assert response.status_code == 200, response.text
        data = response.json()
        return data, self.login(email, data["temporary_password"])

    def me(self, headers):
        return client.get("/users/me", headers=headers).json()

    def make_platform_admin(self, user_id):
        db = TestingSessionLocal()
        try:
            db.add(models.PlatformAdmin(user_id=user_id))
            db.commit()
        finally:
            db.close()

    # ---------- Données métier ----------

    def create_item(self, headers, name="Farine", quantity=100, unit_cost=1.5, **fields):
        payload = {"name": name, "quantity": quantity, "unit_cost": unit_cost}
        payload.update(fields)
        response = client.post("/inventory/", json=payload, headers=headers)
        assert response.status_code == 200, response.text
        return response.json()

    def create_product(self, headers, name="Gâteau", quantity_available=10, components=None, profit_margin=20):
        response = client.post("/products/", json={
            "name": name,
            "quantity_available": quantity_available,
            "profit_margin": profit_margin,
            "components": components or []
        }, headers=headers)
        assert response.status_code == 200, response.text
        return response.json()

    def create_order(self, headers, product_id, quantity=1, client_name="Awa Diop"):
        response = client.post("/orders/", json={
            "client_name": client_name,
            "product_id": product_id,
            "quantity": quantity
        }, headers=headers)
        assert response.status_code == 200, response.text
        return response.json()

    def set_status(self, headers, order_id, status):
        return client.patch(f"/orders/{order_id}/status", json={"status": status}, headers=headers)
