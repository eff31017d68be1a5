"""Tests for authentication endpoints."""

from bson import ObjectId

from api.auth import create_access_token, decode_access_token, hash_password, verify_password


class TestPasswordsAndTokens:
    """Hashing and JWT helpers."""

    def test_password_hash_verifies(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_token_round_trip(self):
        token = create_access_token(user_id="abc123", email="a@jhonote.dev")

        payload = decode_access_token(token)

        assert payload["sub"] == "abc123"
        assert payload["email"] == "a@jhonote.dev"

    def test_tampered_token_rejected(self):
        token = create_access_token(user_id="abc123", email="a@jhonote.dev")

        header, payload, _signature = token.split(".")

        assert decode_access_token(f"{header}.{payload}.invalidsignature") is None


class TestAuthEndpoints:
    """Test authentication endpoints."""

    def test_register_user(self, api_client, sample_user_data, users_collection):
        response = api_client.post("/auth/register", json=sample_user_data)

        assert response.status_code == 201
        data = response.json()

        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == sample_user_data["email"]
        assert data["user"]["name"] == sample_user_data["name"]
        assert data["user"]["status"] == "active"
        assert "password" not in data["user"]

        stored = users_collection.docs[0]
        assert stored["password_hash"] != sample_user_data["password"]

    def test_login_user(self, api_client, sample_user_data):
        api_client.post("/auth/register", json=sample_user_data)

        response = api_client.post(
            "/auth/login",
            json={"email": sample_user_data["email"], "password": sample_user_data["password"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["user"]["email"] == sample_user_data["email"]

    def test_login_wrong_password(self, api_client, sample_user_data):
        api_client.post("/auth/register", json=sample_user_data)

        response = api_client.post(
            "/auth/login", json={"email": sample_user_data["email"], "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_nonexistent_user(self, api_client):
        response = api_client.post(
            "/auth/login", json={"email": "nonexistent@jhonote.dev", "password": "whatever"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_register_duplicate_email(self, api_client, sample_user_data):
        api_client.post("/auth/register", json=sample_user_data)

        response = api_client.post("/auth/register", json=sample_user_data)

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already registered"

    def test_register_invalid_email(self, api_client):
        response = api_client.post(
            "/auth/register", json={"email": "not-an-email", "password": "secret123"}
        )

        assert response.status_code == 422

    def test_me_returns_current_user(self, api_client, auth_headers, sample_user_data):
        response = api_client.get("/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["email"] == sample_user_data["email"]

    def test_me_without_token(self, api_client):
        response = api_client.get("/auth/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_token_for_unknown_user(self, api_client):
        token = create_access_token(user_id=str(ObjectId()), email="ghost@jhonote.dev")

        response = api_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "User not found"

    def test_disabled_account_forbidden(self, api_client, auth_headers, users_collection):
        users_collection.docs[0]["status"] = "disabled"

        response = api_client.get("/auth/me", headers=auth_headers)

        assert response.status_code == 403
