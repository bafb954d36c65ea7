"""
Shared fixtures: an in-memory database wired into the app through
``dependency_overrides`` and helpers to register and log in users.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_platform.catalog_platform.catalog_service.main import app
from catalog_platform.catalog_platform.catalog_service.db import Base, get_db
from catalog_platform.catalog_platform.catalog_service import models  # noqa: F401

TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    # No context manager: the lifespan hook would initialise the real database
    return TestClient(app)


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    yield session
    session.close()


def register_user(client, name="Alice", email="alice@shop.io", password="secret1"):
    return client.post("/api/register", json={"name": name, "email": email, "password": password})


def login_user(client, email="alice@shop.io", password="secret1"):
    return client.post("/api/login", json={"email": email, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_headers(client):
    register_user(client)
    token = login_user(client).json()["token"]
    return bearer(token)


@pytest.fixture
def bob_headers(client):
    register_user(client, name="Bob", email="bob@shop.io", password="hunter22")
    token = login_user(client, email="bob@shop.io", password="hunter22").json()["token"]
    return bearer(token)
