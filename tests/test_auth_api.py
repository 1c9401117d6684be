"""Tests for the /api/auth endpoints."""

from datetime import timedelta

from findash.domain.models import TokenClaims
from findash.domain.services.auth_service import create_access_token


def _register(client, email="jane@example.com", password="secret123", name="Jane"):
    return client.post(
        "/api/auth/register", json={"email": email, "password": password, "name": name}
    )


def test_register_returns_token_and_public_user(client) -> None:
    response = _register(client, email="  Jane@Example.COM ")

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["token"]
    assert body["user"]["email"] == "jane@example.com"
    assert body["user"]["name"] == "Jane"
    assert "password" not in body["user"]
    assert "hashed_password" not in body["user"]


def test_register_validation_failures_are_reported_together(client) -> None:
    response = _register(client, email="not-an-email", password="123", name="J")

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "Validation failed"
    assert {e["field"] for e in body["errors"]} == {"email", "password", "name"}


def test_register_duplicate_email_is_rejected(client) -> None:
    assert _register(client).status_code == 201

    response = _register(client, email="JANE@example.com")

    assert response.status_code == 400
    assert response.json() == {
        "status": "error",
        "message": "User with this email already exists",
    }


def test_register_missing_field_is_a_validation_error(client) -> None:
    response = client.post("/api/auth/register", json={"email": "a@b.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"


def test_login_succeeds_with_correct_credentials(client) -> None:
    _register(client)

    response = client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"
    assert response.json()["user"]["email"] == "jane@example.com"


def test_wrong_password_and_unknown_email_are_indistinguishable(client) -> None:
    _register(client)

    wrong_password = client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "nope-nope"}
    )
    unknown_email = client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
    )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Invalid email or password"


def test_login_with_malformed_email_is_a_validation_error(client) -> None:
    response = client.post(
        "/api/auth/login", json={"email": "nope", "password": "secret123"}
    )

    assert response.status_code == 400


def test_verify_returns_identity_claims(client) -> None:
    token = _register(client).json()["token"]

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["user"]["email"] == "jane@example.com"
    assert body["user"]["name"] == "Jane"
    assert body["user"]["userId"]


def test_verify_without_token_is_unauthorized(client) -> None:
    response = client.get("/api/auth/verify")

    assert response.status_code == 401
    assert response.json() == {"status": "error", "message": "Access token required"}


def test_verify_with_tampered_token_is_forbidden(client) -> None:
    token = _register(client).json()["token"]

    response = client.get(
        "/api/auth/verify", headers={"Authorization": f"Bearer {token}x"}
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or expired token"


def test_verify_with_expired_token_is_forbidden(client) -> None:
    expired = create_access_token(
        TokenClaims(user_id="1", email="jane@example.com", name="Jane"),
        expires_delta=timedelta(seconds=-10),
    )

    response = client.get(
        "/api/auth/verify", headers={"Authorization": f"Bearer {expired}"}
    )

    assert response.status_code == 403


def test_logout_requires_token_and_succeeds(client, auth_headers) -> None:
    assert client.post("/api/auth/logout").status_code == 401

    response = client.post("/api/auth/logout", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"
