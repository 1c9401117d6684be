"""Shared fixtures: a throwaway SQLite database and an authenticated API client."""

import os
import tempfile
from datetime import datetime

_DB_DIR = tempfile.mkdtemp(prefix="findash-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from findash.data.base import Base, SessionLocal, engine  # noqa: E402
from findash.data.repositories.transaction_repository import (  # noqa: E402
    add_transaction,
)
from findash.domain.models import (  # noqa: E402
    Transaction,
    TransactionCategory,
    TransactionStatus,
)
from findash.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _register(client: TestClient, email: str, name: str = "Test User") -> str:
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": "secret123", "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()["token"]


@pytest.fixture
def auth_headers(client) -> dict[str, str]:
    return {"Authorization": f"Bearer {_register(client, 'user@example.com')}"}


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    return {"Authorization": f"Bearer {_register(client, 'admin@example.com', 'Admin')}"}


@pytest.fixture
def make_transaction(db):
    def _make(
        amount: float,
        category: str = "Revenue",
        status: str = "Paid",
        date: datetime = datetime(2024, 3, 15, 12, 0),
        user_id: str = "user_001",
    ) -> Transaction:
        return add_transaction(
            db,
            Transaction(
                id=None,
                date=date,
                amount=amount,
                category=TransactionCategory(category),
                status=TransactionStatus(status),
                user_id=user_id,
            ),
        )

    return _make
