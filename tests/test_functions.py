# OPSBOARD/tests/test_functions.py : fonctions privilégiées

from helpers import ApiTestCase, client


class TestAdminUpdateProfile(ApiTestCase):

    def setup_method(self):
        super().setup_method()
        admin = self.register("root@test.com")
        self.make_platform_admin(admin["id"])
        self.admin_headers = self.login("root@test.com")
        self.target = self.register("target@test.com", full_name="Ancien Nom")

    def test_requires_token(self):
        response = client.post("/functions/admin-update-profile", json={"target_user_id": self.target["id"]})
        assert response.status_code == 401
        assert "error" in response.json()

    def test_malformed_body_without_token(self):
        response = client.post(
            "/functions/admin-update-profile",
            content=b"{not json",
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_malformed_body(self):
        response = client.post("/functions/admin-update-profile", json={
            "target_user_id": "pas un id"
        }, headers=self.admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    def test_requires_platform_admin(self):
        headers = self.login("target@test.com")
        response = client.post("/functions/admin-update-profile", json={
            "target_user_id": self.target["id"], "full_name": "X"
        }, headers=headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Not a platform admin"}

    def test_target_required(self):
        response = client.post("/functions/admin-update-profile", json={"full_name": "X"}, headers=self.admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "target_user_id required"}

    def test_unknown_target(self):
        response = client.post("/functions/admin-update-profile", json={
            "target_user_id": 9999, "full_name": "X"
        }, headers=self.admin_headers)
        assert response.status_code == 404

    def test_update_name_and_email(self):
        response = client.post("/functions/admin-update-profile", json={
            "target_user_id": self.target["id"],
            "full_name": "Nouveau Nom",
            "email": "renamed@test.com"
        }, headers=self.admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        # Le compte suit le changement d'email
        headers = self.login("renamed@test.com")
        me = self.me(headers)
        assert me["profile"]["full_name"] == "Nouveau Nom"
        assert me["profile"]["email"] == "renamed@test.com"


class TestDeleteUser(ApiTestCase):

    def setup_method(self):
        super().setup_method()
        self.headers = self.owner()
        self.invite, _ = self.member(self.headers, "driver@test.com")
        self.driver_id = self.invite["member"]["user_id"]

    def test_user_id_required(self):
        response = client.post("/functions/delete-user", json={}, headers=self.headers)
        assert response.status_code == 400
        assert response.json() == {"error": "user_id is required"}

    def test_malformed_body_without_token(self):
        response = client.post("/functions/delete-user", json=["pas", "un", "objet"])
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_only_owners(self):
        _, admin_headers = self.member(self.headers, "admin@test.com", role="admin")
        response = client.post("/functions/delete-user", json={"user_id": self.driver_id}, headers=admin_headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Only business owners can delete users"}

    def test_user_outside_business(self):
        outsider = self.register("outsider@test.com")
        response = client.post("/functions/delete-user", json={"user_id": outsider["id"]}, headers=self.headers)
        assert response.status_code == 404
        assert response.json() == {"error": "User not found in your business"}

    def test_owner_cannot_be_deleted(self):
        owner_id = self.me(self.headers)["user"]["id"]
        response = client.post("/functions/delete-user", json={"user_id": owner_id}, headers=self.headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Cannot delete business owners"}

    def test_delete_member(self):
        response = client.post("/functions/delete-user", json={"user_id": self.driver_id}, headers=self.headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        members = client.get("/team/", headers=self.headers).json()
        assert [m["role"] for m in members] == ["owner"]

        response = client.post("/users/login", json={
            "email": "driver@test.com",
            "password": self.invite["temporary_password"]
        })
        assert response.status_code == 400
