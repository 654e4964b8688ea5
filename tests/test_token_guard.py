"""
Tests for the guard when the caller's role comes from a verified bearer token
"""

from datetime import timedelta

import pytest

from user_api import crud
from user_api.auth import create_access_token, get_password_hash
from user_api.models.users import User, UserRole


@pytest.fixture
def token_client(client, app_settings):
    app_settings.ROLE_SOURCE = "token"
    return client


@pytest.fixture
def admin_user(db):
    return crud.insert_user(
        db, User(name="Root", email="root@x.com", password=get_password_hash("rootpw"), role=UserRole.ADMIN)
    )


@pytest.fixture
def plain_user(db):
    return crud.insert_user(
        db, User(name="Joe", email="joe@x.com", password=get_password_hash("joepw"))
    )


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def login_token(client, email, password):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["token"]


def test_store_defaults_role_to_user(plain_user):
    assert plain_user.role == UserRole.USER


def test_admin_token_can_create(token_client, admin_user):
    token = login_token(token_client, "root@x.com", "rootpw")
    response = token_client.post(
        "/create", json={"name": "Ann", "email": "a@x.com", "password": "pw1"}, headers=bearer(token)
    )
    assert response.status_code == 201
    assert response.json()["role"] == "user"


def test_body_role_is_ignored(token_client, plain_user):
    token = login_token(token_client, "joe@x.com", "joepw")
    response = token_client.post(
        "/create",
        json={"name": "Ann", "email": "a@x.com", "password": "pw1", "role": "admin"},
        headers=bearer(token),
    )
    assert response.status_code == 403
    assert response.text == "Access denied."


def test_missing_token(token_client, admin_payload):
    response = token_client.post("/create", json=admin_payload)
    assert response.status_code == 401
    assert response.text == "Not authenticated."


def test_expired_token(token_client, admin_user, app_settings):
    token = create_access_token(admin_user.id, "admin", app_settings, expires_delta=timedelta(minutes=-1))
    response = token_client.request("DELETE", f"/delete/{admin_user.id}", headers=bearer(token))
    assert response.status_code == 401
    assert response.text == "Token has expired."


def test_admin_token_can_update_and_delete(token_client, admin_user, plain_user):
    token = login_token(token_client, "root@x.com", "rootpw")

    response = token_client.put(f"/update/{plain_user.id}", json={"name": "Joseph"}, headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["name"] == "Joseph"
    assert response.json()["role"] == "user"

    response = token_client.request("DELETE", f"/delete/{plain_user.id}", headers=bearer(token))
    assert response.status_code == 200
    assert token_client.get(f"/byId/{plain_user.id}").status_code == 404
