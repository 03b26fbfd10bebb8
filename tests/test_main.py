import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from booking.core.config import Settings
from booking.main import app, configure_middleware
from booking.repositories.appointment_repository import AppointmentRepository


def ping_app(config):
    application = FastAPI()
    configure_middleware(application, config)

    @application.get("/ping")
    async def ping():
        return {"pong": True}

    return application


class TestTrustedHosts:

    def test_default_hosts_exclude_test_client_host(self):
        """The test client's host is never trusted by default."""
        assert "testserver" not in Settings().ALLOWED_HOSTS

    def test_unknown_host_rejected_outside_tests(self):
        """Host headers outside ALLOWED_HOSTS are refused."""
        client = TestClient(ping_app(Settings(TESTING=False)))
        assert client.get("/ping").status_code == 400

    def test_configured_host_accepted(self):
        """Hosts come from settings."""
        config = Settings(TESTING=False, ALLOWED_HOSTS=["booking.example.com"])
        client = TestClient(ping_app(config), base_url="http://booking.example.com")
        assert client.get("/ping").status_code == 200

    def test_host_check_skipped_when_testing(self):
        client = TestClient(ping_app(Settings(TESTING=True)))
        assert client.get("/ping").status_code == 200


class TestServerErrors:

    def test_unhandled_error_is_generic(self, client, auth_headers, monkeypatch):
        """Errors outside the store layer never leak their text."""
        def boom(*args, **kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(AppointmentRepository, "list_all", boom)
        headers = auth_headers("admin")

        response = TestClient(app, raise_server_exceptions=False).get(
            "/api/appointments", headers=headers
        )
        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
        }


if __name__ == "__main__":
    pytest.main([__file__])
