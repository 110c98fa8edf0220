"""
Shared fixtures.

The app reads its settings at import time, so the database URL and the
notification switch are set here before anything from the project is
imported. Every test gets freshly created tables in a temporary SQLite file.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

_db_dir = tempfile.mkdtemp(prefix="help-requests-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_db_dir) / 'test.db'}"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from db import engine  # noqa: E402
from main import app  # noqa: E402
from models import HelpKind, HelpRequest, Role, User  # noqa: E402
from security import create_session_token, hash_password  # noqa: E402
from services.visibility import CallerContext  # noqa: E402

PASSWORD = "correct horse"


@pytest.fixture(autouse=True)
def reset_database():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_user(session):
    """Insert a user directly. Approved volunteer unless told otherwise."""

    def _make_user(
        email: str,
        role: Role = Role.volunteer,
        accepted: bool = True,
        password: str = PASSWORD,
    ) -> User:
        user = User(
            email=email,
            password_hash=hash_password(password),
            role=role,
            accepted=accepted,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_help_request(session):
    def _make_help_request(**overrides) -> HelpRequest:
        fields = {
            "requester_name": "Maria Peeters",
            "kind": HelpKind.groceries,
            "message": "Could someone pick up my groceries on Friday?",
            "date": "2026-10-23",
            "time_slot": "10:00-12:00",
            "region": "Tienen",
            "street": "Grote Markt",
            "house_number": "12",
            "postal_code": "3300",
            "city": "Tienen",
            "phone": "0470 12 34 56",
        }
        fields.update(overrides)
        help_request = HelpRequest(**fields)
        session.add(help_request)
        session.commit()
        session.refresh(help_request)
        return help_request

    return _make_help_request


def caller_for(user: User) -> CallerContext:
    assert user.id is not None
    return CallerContext(user_id=user.id, email=user.email, role=user.role)


def auth_headers(user: User) -> dict:
    assert user.id is not None
    token = create_session_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def coordinator(make_user):
    return make_user("coord@x.com", role=Role.coordinator)


@pytest.fixture
def volunteer(make_user):
    return make_user("v1@x.com")


@pytest.fixture
def other_volunteer(make_user):
    return make_user("v2@x.com")
