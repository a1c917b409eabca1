from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi import status

from feedback_hub.core.exceptions import AuthenticationError
from feedback_hub.models.user import User
from feedback_hub.services.jwt_service import JwtService

VERIFY = "feedback_hub.services.google_oauth.id_token.verify_oauth2_token"


def test_google_login_creates_employee_and_sets_cookie(client, db_session):
    payload = {"sub": "g-42", "email": "new.hire@acme.io", "name": "New Hire", "picture": "https://pic"}
    with patch(VERIFY, return_value=payload):
        response = client.post("/api/v1/auth/google", json={"idToken": "google-token"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["user"]["email"] == "new.hire@acme.io"
    assert data["user"]["roles"] == ["employee"]
    assert data["user"]["isSuperAdmin"] is False
    assert "authToken" in response.cookies

    user = db_session.query(User).filter(User.email == "new.hire@acme.io").first()
    assert user.google_id == "g-42"


def test_google_login_keeps_existing_roles(client, admin_user):
    payload = {"sub": "g-admin", "email": admin_user.email, "name": "Ada Renamed"}
    with patch(VERIFY, return_value=payload):
        response = client.post("/api/v1/auth/google", json={"idToken": "google-token"})

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == admin_user.id
    assert user["roles"] == ["admin"]
    assert user["name"] == "Ada Renamed"


def test_google_login_with_invalid_token(client):
    with patch(VERIFY, side_effect=ValueError("Wrong audience")):
        response = client.post("/api/v1/auth/google", json={"idToken": "bad"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "AUTH_FAILED"


def test_me_with_bearer_token(client, employee, auth_headers):
    response = client.get("/api/v1/auth/me", headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["email"] == employee.email


def test_me_with_cookie(client, employee):
    client.cookies.set("authToken", JwtService().issue_for_user(employee))
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 200
    assert response.json()["id"] == employee.id


def test_me_requires_authentication(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_me_rejects_expired_token(client, employee):
    token = JwtService().issue_for_user(employee, expires_in=timedelta(seconds=-10))
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["errors"][0]["msg"] == "Token has expired"


def test_me_rejects_inactive_user(client, db_session, employee, auth_headers):
    headers = auth_headers(employee)
    employee.is_active = False
    db_session.commit()
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


def test_mock_login_in_testing(client):
    response = client.post(
        "/api/v1/auth/mock-login",
        json={"email": "qa@acme.io", "name": "QA", "roles": ["hr"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["roles"] == ["hr"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.json()["email"] == "qa@acme.io"


def test_logout_clears_cookie(client):
    response = client.post("/api/v1/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert "authToken=" in response.headers["set-cookie"]


def test_jwt_round_trip_claims(employee):
    service = JwtService()
    claims = service.verify(service.issue_for_user(employee))
    assert claims["sub"] == employee.id
    assert claims["email"] == employee.email
    assert claims["roles"] == ["employee"]
    assert claims["org_id"] == employee.organization_id


def test_jwt_rejects_foreign_signature(employee):
    token = JwtService(secret="another-secret").issue_for_user(employee)
    with pytest.raises(AuthenticationError):
        JwtService().verify(token)
