"""
Pytest configuration and fixtures for the PhenoFarm API tests.
"""
import os

# Keep the application engine off the developer database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from phenofarm.main import app
from phenofarm.database import Base, get_db
from phenofarm.models import Batch, Dispensary, Grower, Product, Strain, User, UserRole
from phenofarm.utils.hashing import get_password_hash


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Test client with the database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _login(client, email):
    response = client.post("/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, f"Login failed: {response.json()}"
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def make_grower_user(db_session, email="grower@test.com", business_name="Green Mountain Farms"):
    user = User(
        email=email,
        password_hash=get_password_hash(PASSWORD),
        role=UserRole.GROWER.value,
        name="Test Grower",
        grower=Grower(business_name=business_name),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def seed_grower_user(db_session):
    return make_grower_user(db_session)


@pytest.fixture
def seed_other_grower_user(db_session):
    return make_grower_user(db_session, email="other@test.com", business_name="Hilltop Gardens")


@pytest.fixture
def seed_dispensary_user(db_session):
    user = User(
        email="dispensary@test.com",
        password_hash=get_password_hash(PASSWORD),
        role=UserRole.DISPENSARY.value,
        name="Test Buyer",
        dispensary=Dispensary(business_name="Green Vermont Dispensary"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def seed_admin_user(db_session):
    user = User(email="admin@test.com", password_hash=get_password_hash(PASSWORD),
                role=UserRole.ADMIN.value, name="Admin")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def grower_headers(client, seed_grower_user):
    return _login(client, seed_grower_user.email)


@pytest.fixture
def other_grower_headers(client, seed_other_grower_user):
    return _login(client, seed_other_grower_user.email)


@pytest.fixture
def dispensary_headers(client, seed_dispensary_user):
    return _login(client, seed_dispensary_user.email)


@pytest.fixture
def admin_headers(client, seed_admin_user):
    return _login(client, seed_admin_user.email)


@pytest.fixture
def make_product(db_session):
    """Factory for products of a given grower."""
    def _make(grower_id, name="Blue Dream 3.5g", price_cents=1000, inventory_qty=10,
              product_type="Flower", **kwargs):
        product = Product(
            grower_id=grower_id,
            name=name,
            product_type=product_type,
            price_cents=price_cents,
            inventory_qty=inventory_qty,
            images=[],
            **kwargs,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make


@pytest.fixture
def seed_strain_batch(db_session, seed_grower_user):
    """A strain with one lab-tested batch (THC 22.0)."""
    from datetime import date

    strain = Strain(grower_id=seed_grower_user.grower_id, name="Northern Lights", genetics="Indica")
    db_session.add(strain)
    db_session.flush()
    batch = Batch(grower_id=seed_grower_user.grower_id, strain_id=strain.id, batch_number="NL-001",
                  harvest_date=date(2024, 9, 1), thc=22.0, cbd=0.5)
    db_session.add(batch)
    db_session.commit()
    db_session.refresh(strain)
    db_session.refresh(batch)
    return strain, batch
