"""
Tests for the user registration and session API
"""
import pytest

from addressbook.core.auth import SESSION_COOKIE

CREDENTIALS = {"email": "user@mail.com", "password": "s3cret-pass"}


class TestRegister:
    """Tests for POST /api/users/register"""

    def test_register(self, client):
        response = client.post("/api/users/register", json=CREDENTIALS)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "user@mail.com"
        assert data["is_active"] is True
        assert data["last_login"] is None
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_duplicate(self, client):
        client.post("/api/users/register", json=CREDENTIALS)

        response = client.post("/api/users/register", json=CREDENTIALS)

        assert response.status_code == 409
        assert response.json() == {"message": "Email in use"}

    @pytest.mark.parametrize("body", [
        {"email": "user@mail.com", "password": "short"},
        {"email": "not-an-email", "password": "s3cret-pass"},
        {"password": "s3cret-pass"},
    ])
    def test_register_invalid_credentials(self, client, body):
        response = client.post("/api/users/register", json=body)

        assert response.status_code == 400
        assert "message" in response.json()

    def test_register_rejects_password_over_72_bytes(self, client):
        # 40 characters, 80 bytes in UTF-8
        response = client.post("/api/users/register", json={"email": "user@mail.com", "password": "\u00e9" * 40})

        assert response.status_code == 400
        assert response.json() == {"message": '"password" must be at most 72 bytes long'}

    def test_register_accepts_multibyte_password_within_72_bytes(self, client):
        password = "\u00e9" * 36

        assert client.post("/api/users/register", json={"email": "user@mail.com", "password": password}).status_code == 201
        assert client.post("/api/users/login", json={"email": "user@mail.com", "password": password}).status_code == 200


class TestLogin:
    """Tests for POST /api/users/login"""

    def test_login_returns_token_and_cookie(self, client):
        client.post("/api/users/register", json=CREDENTIALS)

        response = client.post("/api/users/login", json=CREDENTIALS)

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "user@mail.com"
        assert data["user"]["last_login"] is not None
        assert data["expires_at"]
        assert response.cookies.get(SESSION_COOKIE) == data["token"]

    @pytest.mark.parametrize("credentials", [
        {"email": "user@mail.com", "password": "wrong-pass"},
        {"email": "nobody@mail.com", "password": "s3cret-pass"},
    ])
    def test_login_rejected(self, client, credentials):
        client.post("/api/users/register", json=CREDENTIALS)

        response = client.post("/api/users/login", json=credentials)

        assert response.status_code == 401
        assert response.json() == {"message": "Email or password is wrong"}


class TestSession:
    """Tests for /api/users/current and /api/users/logout"""

    def test_current_user(self, client, login):
        headers = login("user@mail.com")

        response = client.get("/api/users/current", headers=headers)

        assert response.status_code == 200
        assert response.json()["email"] == "user@mail.com"

    def test_current_user_requires_token(self, client):
        response = client.get("/api/users/current")

        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized"}

    def test_logout(self, client, login):
        headers = login("user@mail.com")

        response = client.post("/api/users/logout", headers=headers)

        assert response.status_code == 204
        assert client.get("/api/users/current", headers=headers).status_code == 401

    def test_logout_requires_token(self, client):
        assert client.post("/api/users/logout").status_code == 401

    def test_sessions_are_independent(self, client, login):
        first = login("user@mail.com")
        second = login("user@mail.com")

        client.post("/api/users/logout", headers=first)

        assert client.get("/api/users/current", headers=second).status_code == 200
