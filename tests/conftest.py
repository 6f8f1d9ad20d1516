"""Pytest configuration and fixtures."""

import os
import uuid
from unittest.mock import MagicMock

# Running locally - use SQLite unless a database is provided (e.g. PostgreSQL in Docker)
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

import src.services.status as status_module  # noqa: E402
from src.api.dependencies import get_record_store, manager_registry  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models.enums import UserRole  # noqa: E402
from src.services.auth import create_access_token, create_user  # noqa: E402
from src.services.collection_cache import CollectionCache  # noqa: E402
from src.services.errors import StoreError  # noqa: E402
from src.services.record_store import SqlRecordStore  # noqa: E402
from src.services.status import StatusReporter  # noqa: E402

SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"]
if "postgresql" in SQLALCHEMY_DATABASE_URL:
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("/newsdesk", "/newsdesk_test")

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class AuthHeaders(dict):
    """Dict subclass that also stores user info."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeRecordStore:
    """In-memory record store with failure injection."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {"categories": {}, "articles": {}}
        self.update_calls: list[tuple[str, dict]] = []
        self.fail_update_ids: set[str] = set()
        self.fail_list = False
        self.fail_query = False
        self.fail_insert = False
        self.fail_delete = False
        self.closed = False

    def add(self, collection: str, **fields) -> dict:
        self.collections.setdefault(collection, {})[fields["id"]] = dict(fields)
        return fields

    def sort_orders(self) -> dict[str, int]:
        return {key: row["sort_order"] for key, row in self.collections["categories"].items()}

    def list(self, collection, order_by=None):
        if self.fail_list:
            raise StoreError("connection reset")
        rows = [dict(row) for row in self.collections[collection].values()]
        if order_by:
            rows.sort(key=lambda row: row[order_by])
        return rows

    def get(self, collection, record_id):
        row = self.collections[collection].get(record_id)
        return dict(row) if row else None

    def insert(self, collection, fields):
        if self.fail_insert:
            raise StoreError("insert rejected")
        row = {"id": uuid.uuid4().hex, **fields}
        self.collections[collection][row["id"]] = row
        return dict(row)

    def update(self, collection, record_id, fields):
        self.update_calls.append((record_id, dict(fields)))
        if record_id in self.fail_update_ids:
            raise StoreError(f"update of {record_id} failed")
        if record_id not in self.collections[collection]:
            raise StoreError(f"{collection} record {record_id} not found")
        self.collections[collection][record_id].update(fields)

    def delete(self, collection, record_id):
        if self.fail_delete:
            raise StoreError("delete rejected")
        if self.collections[collection].pop(record_id, None) is None:
            raise StoreError(f"{collection} record {record_id} not found")

    def close(self):
        self.closed = True

    def query(self, collection, filters, limit=None):
        if self.fail_query:
            raise StoreError("query timed out")
        rows = [
            dict(row)
            for row in self.collections[collection].values()
            if all(row.get(key) == value for key, value in filters.items())
        ]
        return rows[:limit] if limit is not None else rows


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(autouse=True)
def mock_redis():
    """Replace the shared Redis client so notifications never leave the process."""
    mock_client = MagicMock()
    status_module._sync_redis = mock_client
    yield mock_client
    status_module._sync_redis = None


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database and record store overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_record_store] = lambda: SqlRecordStore(TestingSessionLocal)
    manager_registry.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    manager_registry.clear()


@pytest.fixture
def admin_headers(db):
    """Create an admin user and return auth headers with user info."""
    user = create_user(db, "admin@example.com", "adminpass123", "Admin", role=UserRole.ADMIN)
    token = create_access_token(user.id, user.email)
    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user.id, email=user.email)


@pytest.fixture
def user_headers(client):
    """Register a regular user and return auth headers."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "test@example.com", "password": "testpass123", "name": "Test User"},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=data["user"]["email"],
    )


@pytest.fixture
def fake_store():
    """Store seeded with five categories in order a..e and no articles."""
    store = FakeRecordStore()
    for sort_order, (record_id, name) in enumerate(
        [("a", "Politics"), ("b", "Sports"), ("c", "Business"), ("d", "Culture"), ("e", "Opinion")]
    ):
        store.add(
            "categories",
            id=record_id,
            name=name,
            slug=name.lower(),
            description=None,
            sort_order=sort_order,
            is_active=True,
        )
    return store


@pytest.fixture
def cache(fake_store):
    """Collection cache loaded from the fake store."""
    cache = CollectionCache(fake_store, "categories")
    cache.load()
    return cache


@pytest.fixture
def reporter():
    """Status reporter with its own mocked Redis client."""
    return StatusReporter("categories", redis_client=MagicMock())


@pytest.fixture
def session_factory():
    """Session factory bound to the test database."""
    return TestingSessionLocal
