"""
Pytest configuration and fixtures
"""
import os
import sys
from pathlib import Path

import pytest

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Settings are cached on first use, so the test environment must be in place before imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["APP_ENV"] = "test"

import bcrypt  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from addressbook.core.database import Base, build_engine, get_db, init_db  # noqa: E402
from addressbook.main import app  # noqa: E402
from addressbook.models.user import User  # noqa: E402
from addressbook.services.auth_service import AuthService  # noqa: E402

_real_gensalt = bcrypt.gensalt


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Cheap bcrypt work factor; hashing cost is irrelevant to behaviour under test"""
    monkeypatch.setattr(bcrypt, "gensalt", lambda rounds=4, prefix=b"2b": _real_gensalt(rounds=4, prefix=prefix))


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test"""
    test_engine = build_engine("sqlite://")
    init_db(test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Session:
    """Create a database session for testing"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """Create test client; every request gets its own session on the test database"""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_user(db):
    """Create a user directly through the auth service"""

    def _make_user(email: str = "owner@mail.com", password: str = "s3cret-pass") -> User:
        return AuthService(db).register_user(email=email, password=password)

    return _make_user


@pytest.fixture(scope="function")
def login(client):
    """Register (if needed) and log in through the API; returns auth headers"""

    def _login(email: str = "owner@mail.com", password: str = "s3cret-pass") -> dict:
        client.post("/api/users/register", json={"email": email, "password": password})
        response = client.post("/api/users/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        # The client keeps cookies between calls; tests authenticate with the header only
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture(scope="function")
def auth_headers(login):
    return login()


@pytest.fixture(scope="function")
def contact_payload():
    return {"name": "Alice", "email": "alice@mail.com", "phone": "5551234"}
