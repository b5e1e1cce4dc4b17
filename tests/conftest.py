"""Shared fixtures: isolated data directories, a fresh schema per test, tokens."""

import os
import tempfile

# Setup environment before privo.config is imported
_TMP = tempfile.mkdtemp()
os.environ["PRIVO_DATA_DIR"] = os.path.join(_TMP, "data")
os.environ["PRIVO_UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["PRIVO_DB_PATH"] = os.path.join(_TMP, "data", "test.db")
os.environ["PRIVO_JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["PRIVO_ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from privo.database import engine, init_db
from privo.main import app
from privo.models.user import User
from privo.services import circle_service
from privo.utils.security import create_access_token


@pytest.fixture(autouse=True)
def fresh_db():
    SQLModel.metadata.drop_all(engine)
    init_db()
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def make_user(session):
    def _make(user_id: str, **fields) -> User:
        user = User(id=user_id, email=f"{user_id}@example.com", name=user_id.title(), **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def headers():
    return auth


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def circle(session, owner):
    return circle_service.create_circle(session, owner.id, "Family", "Our family circle")
