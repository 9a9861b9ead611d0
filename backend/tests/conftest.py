"""
Test configuration: in-memory SQLite, no Redis, no outgoing mail.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["RESEND_API_KEY"] = ""
os.environ["ENV"] = "test"
os.environ["DEBUG"] = "false"

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.core.database import Base, get_db  # noqa: E402
from app.core.rate_limit import limiter  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.routers.deps import get_current_user  # noqa: E402

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

limiter.enabled = False


@pytest.fixture
def db():
    """Fresh schema per test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(autouse=True)
def queued(monkeypatch):
    """Delayed expiry producer, replaced so no Redis is needed"""
    mock = MagicMock()
    monkeypatch.setattr("app.services.promotion_service.enqueue_expiry", mock)
    return mock


@pytest.fixture
def current_user():
    """Holder for the user the API client acts as; None means anonymous"""
    return {"user": None}


@pytest.fixture
def client(db, current_user):
    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_current_user] = lambda: current_user["user"]
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def login_as(current_user):
    def _login(user):
        current_user["user"] = user
        return user

    return _login
