"""Tests for request logging helpers and security headers."""

import logging
from types import SimpleNamespace

import pytest

from rbac_admin.api.middleware.request_logging import (
    determine_level,
    get_client_ip,
    redact_sensitive,
)


def fake_request(headers=None, host="10.0.0.1"):
    return SimpleNamespace(
        headers=headers or {},
        client=SimpleNamespace(host=host) if host else None,
    )


class TestRedaction:
    def test_nested_fields_redacted(self):
        body = {
            "email": "a@example.com",
            "password": "hunter2",
            "nested": {"accessToken": "abc", "items": [{"secret": "x", "keep": 1}]},
        }
        redacted = redact_sensitive(body)
        assert redacted["email"] == "a@example.com"
        assert redacted["password"] == "[REDACTED]"
        assert redacted["nested"]["accessToken"] == "[REDACTED]"
        assert redacted["nested"]["items"][0] == {"secret": "[REDACTED]", "keep": 1}

    def test_scalars_untouched(self):
        assert redact_sensitive("password") == "password"
        assert redact_sensitive(3) == 3


class TestClientIp:
    def test_forwarded_for_wins(self):
        request = fake_request({"x-forwarded-for": "1.2.3.4, 10.0.0.2", "x-real-ip": "5.6.7.8"})
        assert get_client_ip(request) == "1.2.3.4"

    def test_real_ip(self):
        assert get_client_ip(fake_request({"x-real-ip": "5.6.7.8"})) == "5.6.7.8"

    def test_direct_client(self):
        assert get_client_ip(fake_request()) == "10.0.0.1"

    def test_unknown(self):
        assert get_client_ip(fake_request(host=None)) == "unknown"


@pytest.mark.parametrize("status_code,level", [
    (200, logging.INFO),
    (201, logging.INFO),
    (400, logging.INFO),
    (401, logging.WARNING),
    (403, logging.WARNING),
    (500, logging.ERROR),
    (503, logging.ERROR),
])
def test_determine_level(status_code, level):
    assert determine_level(status_code) == level


class TestSecurityHeaders:
    def test_headers_present(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Content-Security-Policy" in response.headers

    def test_hsts_outside_debug(self, client):
        response = client.get("/health")
        assert "Strict-Transport-Security" in response.headers


class TestRequestLogging:
    def test_api_request_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="rbac_admin.requests"):
            client.get("/api/auth/me")
        messages = [r.getMessage() for r in caplog.records if r.name == "rbac_admin.requests"]
        assert any("GET /api/auth/me -> 401" in m for m in messages)
        assert any(r.levelno == logging.WARNING for r in caplog.records if r.name == "rbac_admin.requests")

    def test_health_not_logged(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="rbac_admin.requests"):
            client.get("/health")
        assert not [r for r in caplog.records if r.name == "rbac_admin.requests"]

    def test_password_not_logged(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="rbac_admin.requests"):
            client.post("/api/auth/register", json={"email": "x@example.com", "password": "topsecret1"})
        text = "\n".join(r.getMessage() for r in caplog.records)
        assert "topsecret1" not in text
        assert "[REDACTED]" in text
