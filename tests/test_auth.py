import pytest

from booking.core.security import create_access_token

# Test data
test_user_data = {
    "username": "alice",
    "password": "Senha123",
}

class TestAuthentication:

    def test_register_user(self, client):
        """Test user registration."""
        response = client.post("/api/auth/register", json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["username"] == test_user_data["username"]
        assert data["is_admin"] is False
        assert "password" not in data

    def test_register_admin_username(self, client):
        """Admin status follows the username."""
        response = client.post("/api/auth/register", json={"username": "admin", "password": "Senha123"})
        assert response.status_code == 201
        assert response.json()["is_admin"] is True

    def test_register_duplicate_username(self, client):
        """Test registration with duplicate username."""
        client.post("/api/auth/register", json=test_user_data)

        response = client.post("/api/auth/register", json=test_user_data)
        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    @pytest.mark.parametrize("payload", [
        {"username": "alice", "password": "123"},
        {"username": "al", "password": "Senha123"},
        {"username": "alice smith", "password": "Senha123"},
    ])
    def test_register_invalid(self, client, payload):
        """Test registration with invalid data."""
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 422

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/auth/register", json=test_user_data)

        response = client.post("/api/auth/login", json=test_user_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "alice"

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/auth/register", json=test_user_data)

        response = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "wrongpassword"}
        )
        assert response.status_code == 401

    def test_login_unknown_user(self, client):
        """Test login with invalid credentials."""
        response = client.post(
            "/api/auth/login",
            json={"username": "nobody", "password": "wrongpassword"}
        )
        assert response.status_code == 401

    def test_login_is_rate_limited(self, client):
        """Repeated attempts from one client are throttled."""
        statuses = [
            client.post("/api/auth/login", json={"username": "x", "password": "y"}).status_code
            for _ in range(11)
        ]
        assert statuses[:10] == [401] * 10
        assert statuses[10] == 429

    def test_get_current_user(self, client):
        """Test getting current user info."""
        client.post("/api/auth/register", json=test_user_data)
        login_response = client.post("/api/auth/login", json=test_user_data)

        token = login_response.json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["username"] == "alice"

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 401

    def test_refresh_token(self, client):
        """Test token refresh."""
        client.post("/api/auth/register", json=test_user_data)
        login_response = client.post("/api/auth/login", json=test_user_data)

        refresh_token = login_response.json()["refresh_token"]

        response = client.post(
            "/api/auth/refresh",
            json={"refresh_token": refresh_token}
        )
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data

    def test_refresh_rejects_access_token(self, client):
        """Access tokens cannot be used to refresh."""
        client.post("/api/auth/register", json=test_user_data)
        login_response = client.post("/api/auth/login", json=test_user_data)

        response = client.post(
            "/api/auth/refresh",
            json={"refresh_token": login_response.json()["access_token"]}
        )
        assert response.status_code == 401

    def test_refresh_token_cannot_authenticate(self, client):
        """Refresh tokens are not accepted as bearer tokens."""
        client.post("/api/auth/register", json=test_user_data)
        login_response = client.post("/api/auth/login", json=test_user_data)

        headers = {"Authorization": f"Bearer {login_response.json()['refresh_token']}"}
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_token_without_subject(self, client):
        """Tokens missing a user id are rejected."""
        token = create_access_token({"username": "alice"})
        headers = {"Authorization": f"Bearer {token}"}
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_token_enables_booking(self, client):
        """A freshly issued token works against the appointment routes."""
        client.post("/api/auth/register", json=test_user_data)
        token = client.post("/api/auth/login", json=test_user_data).json()["access_token"]

        response = client.get("/api/appointments", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json() == []

if __name__ == "__main__":
    pytest.main([__file__])
