# OPSBOARD/tests/test_auth.py : tests pour l'authentification et le profil

from helpers import ApiTestCase, client
import uuid


class TestAuth(ApiTestCase):
    test_email = "test@example.com"

    def test_register_user(self):
        """Test d'inscription utilisateur"""
        response = client.post("/users/register", json={
            "email": self.test_email,
            "password": self.password,
            "full_name": "Fatou Ndiaye"
        })
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == self.test_email
        assert "id" in data

    def test_register_lowercases_email(self):
        data = self.register("Mixed.Case@Example.com")
        assert data["email"] == "mixed.case@example.com"

    def test_register_duplicate_email(self):
        """Test d'inscription avec email déjà utilisé"""
        unique_email = f"test_{uuid.uuid4()}@test.com"
        self.register(unique_email)

        response = client.post("/users/register", json={
            "email": unique_email,
            "password": "password123"
        })
        assert response.status_code == 400
        assert "Email déjà utilisé" in response.json()["detail"]

    def test_register_short_password(self):
        """Test d'inscription avec mot de passe trop court"""
        response = client.post("/users/register", json={
            "email": "new@test.com",
            "password": "123"
        })
        assert response.status_code == 400

    def test_register_invalid_email(self):
        response = client.post("/users/register", json={
            "email": "invalid-email",
            "password": "password123"
        })
        assert response.status_code == 400

    def test_login_success(self):
        """Test de connexion réussie"""
        self.register(self.test_email)
        response = client.post("/users/login", json={
            "email": self.test_email,
            "password": self.password
        })
        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    def test_login_wrong_password(self):
        """Test de connexion avec mauvais mot de passe"""
        self.register(self.test_email)
        response = client.post("/users/login", json={
            "email": self.test_email,
            "password": "wrongpassword"
        })
        assert response.status_code == 400
        assert "Email ou mot de passe incorrect" in response.json()["detail"]

    def test_login_nonexistent_user(self):
        response = client.post("/users/login", json={
            "email": "nonexistent@test.com",
            "password": "password123"
        })
        assert response.status_code == 400

    def test_protected_route_without_token(self):
        """Test d'accès à une route protégée sans token"""
        response = client.get("/users/me")
        assert response.status_code == 401

    def test_protected_route_with_invalid_token(self):
        headers = {"Authorization": "Bearer invalid_token"}
        response = client.get("/users/me", headers=headers)
        assert response.status_code == 401

    def test_me_needs_onboarding(self):
        """Un compte sans entreprise doit passer par l'onboarding"""
        self.register(self.test_email, full_name="Fatou Ndiaye")
        headers = self.login(self.test_email)
        data = self.me(headers)
        assert data["needs_onboarding"] is True
        assert data["business"] is None
        assert data["roles"] == []
        assert data["profile"]["full_name"] == "Fatou Ndiaye"

    def test_business_routes_require_onboarding(self):
        self.register(self.test_email)
        headers = self.login(self.test_email)
        response = client.get("/inventory/", headers=headers)
        assert response.status_code == 409

    def test_update_profile(self):
        self.register(self.test_email)
        headers = self.login(self.test_email)
        response = client.patch("/users/me", json={
            "full_name": "  Moussa Ba  ",
            "phone_number": "+221 77 000 00 00"
        }, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["full_name"] == "Moussa Ba"
        assert data["phone_number"] == "+221 77 000 00 00"

    def test_change_password(self):
        self.register(self.test_email)
        headers = self.login(self.test_email)

        response = client.post("/users/me/password", json={
            "current_password": "mauvais",
            "new_password": "nouveau123"
        }, headers=headers)
        assert response.status_code == 400

        response = client.post("/users/me/password", json={
            "current_password": self.password,
            "new_password": "nouveau123"
        }, headers=headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        self.login(self.test_email, "nouveau123")
