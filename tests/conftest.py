# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["CRM_DATABASE_URL"] = "sqlite:///./test.db"

from src.config import settings
from src.database import get_db
from src.main import app
from src.models import Country, Role, User
from src.models.base import Base
from src.services import rbac_service
from src.services.rbac_seed_service import seed_rbac_data

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def roles(db_session) -> dict[str, Role]:
    """Seed the default roles and return them by name."""
    seed_rbac_data(db_session)
    return {role.name: role for role in db_session.query(Role).all()}


@pytest.fixture
def bolivia(db_session) -> Country:
    country = Country(name="Bolivia", code="BO")
    db_session.add(country)
    db_session.commit()
    return country


@pytest.fixture
def peru(db_session) -> Country:
    country = Country(name="Peru", code="PE")
    db_session.add(country)
    db_session.commit()
    return country


@pytest.fixture
def make_user(db_session):
    """Factory creating persisted users."""

    def factory(
        name: str,
        role: Role | None = None,
        country: Country | None = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            email=f"{name}@example.com",
            name=name,
            is_active=is_active,
            role=role,
            country=country,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return factory


@pytest.fixture
def super_admin(make_user, roles, bolivia) -> User:
    return make_user("root", roles["Super Administrator"], bolivia)


@pytest.fixture
def sales_user(make_user, roles, bolivia) -> User:
    return make_user("seller", roles["Sales"], bolivia)


@pytest.fixture
def reload_user(db_session):
    """Reload a user with fresh role and override state."""

    def reload(user: User) -> User:
        db_session.expire_all()
        return rbac_service.get_user_by_id(db_session, user.id)

    return reload


@pytest.fixture
def auth_headers():
    """Build the headers the upstream auth provider sets for a user."""

    def build(user: User) -> dict[str, str]:
        return {settings.identity_header: str(user.id)}

    return build
