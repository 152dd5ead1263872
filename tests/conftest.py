"""Pytest configuration and fixtures"""
import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables before any core module reads settings
os.environ.setdefault("JWT_SECRET", "test-signing-secret-with-at-least-32-bytes")
os.environ.setdefault("PASSWORD_WORK_FACTOR", "4")  # bcrypt minimum, keeps tests fast
os.environ.setdefault("TOKEN_TTL_SECONDS", "3600")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("AUTH_RATE_LIMIT_PER_MINUTE", "10000")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="storefront-uploads-"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

from core.auth.passwords import PasswordHasher  # noqa: E402
from core.auth.tokens import TokenService  # noqa: E402
from core.cart import CartManager  # noqa: E402
from core.routers.deps import reset_services  # noqa: E402
from core.services.domains import AccountService  # noqa: E402
from core.services.repositories import InMemoryUserRepository  # noqa: E402

TEST_SECRET = os.environ["JWT_SECRET"]


class FakeClock:
    """Controllable UTC clock for token tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def fresh_services():
    """Every test starts with empty stores and freshly built singletons."""
    reset_services()
    yield
    reset_services()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def user_store():
    return InMemoryUserRepository()


@pytest.fixture
def hasher():
    return PasswordHasher(work_factor=4)


@pytest.fixture
def token_service(clock):
    return TokenService(TEST_SECRET, ttl_seconds=3600, clock=clock)


@pytest.fixture
def cart_manager(user_store):
    return CartManager(user_store)


@pytest.fixture
def account_service(user_store, hasher, token_service):
    return AccountService(user_store, hasher, token_service)


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client; set ``table_mock.execute.return_value.data``."""
    client = Mock()

    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.update.return_value = table_mock
    table_mock.delete.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.limit.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[]))

    client.table.return_value = table_mock
    return client


@pytest.fixture
def sample_user_row():
    """Row as stored in the Supabase users table"""
    return {
        "id": "5f0c1d2e3a4b",
        "name": "alice",
        "email": "a@x.com",
        "password_hash": "$2b$04$abcdefghijklmnopqrstuuJ0y0s7mBqCkW3l3JqHn7dQeDk1yq8aG",
        "cart_data": {"42": 2, "7": 0},
        "created_at": "2026-01-01T00:00:00+00:00",
    }


@pytest.fixture
def sample_product():
    """Sample product payload"""
    return {
        "name": "Striped Flutter Sleeve Blouse",
        "image": "http://testserver/images/product_1.png",
        "category": "women",
        "new_price": 50.0,
        "old_price": 80.5,
    }
