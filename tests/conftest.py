"""
Global pytest configuration and fixtures for the user API tests
"""

import os
import tempfile

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ROLE_SOURCE"] = "body"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="user_api_logs_")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from user_api.config import get_settings, settings
from user_api.database import Base, get_db
from user_api.main import app


@pytest.fixture
def session_factory():
    """A fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app_settings():
    """Settings the app sees for this test; tweak fields on the copy"""
    return settings.model_copy()


@pytest.fixture
def client(session_factory, app_settings):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: app_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_payload():
    return {"name": "Ann", "email": "a@x.com", "password": "pw1", "role": "admin"}


@pytest.fixture
def created_user(client, admin_payload):
    response = client.post("/create", json=admin_payload)
    assert response.status_code == 201
    return response.json()
