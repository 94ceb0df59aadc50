"""
Pytest configuration and shared fixtures for the order funnel tests.

Provides an in-memory SQLite session, a scripted fake for the remote
functions client, and HTTP clients wired to both.
"""
import pytest
from typing import Any, AsyncGenerator, Callable, Generator
from unittest.mock import AsyncMock

import httpx
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db
from config import settings
from domain.errors import RemoteFunctionError

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    import db_models  # noqa: F401  (register tables)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


# ── Remote Functions Fake ───────────────────────────────────────────


class FakeFunctions:
    """
    Stand-in for RemoteFunctionsClient.

    Register a handler per function name; a handler may return a value,
    raise, or be an AsyncMock. Unregistered names raise RemoteFunctionError.
    """

    def __init__(self):
        self.handlers: dict[str, Callable[[dict], Any]] = {}
        self.invoke = AsyncMock(side_effect=self._dispatch)

    def on(self, name: str, handler: Callable[[dict], Any]) -> "FakeFunctions":
        self.handlers[name] = handler
        return self

    def returns(self, name: str, value: Any) -> "FakeFunctions":
        return self.on(name, lambda body: value)

    def fails(self, name: str, message: str = "boom", status_code: int | None = 500) -> "FakeFunctions":
        def _raise(body):
            raise RemoteFunctionError(name, message, status_code=status_code)
        return self.on(name, _raise)

    async def _dispatch(self, name: str, body: dict | None = None):
        handler = self.handlers.get(name)
        if handler is None:
            raise RemoteFunctionError(name, f"No handler for {name}", status_code=404)
        result = handler(body or {})
        if hasattr(result, "__await__"):
            result = await result
        return result

    def calls_to(self, name: str) -> list[dict]:
        return [c.args[1] if len(c.args) > 1 else {} for c in self.invoke.call_args_list if c.args[0] == name]

    async def aclose(self) -> None:
        pass


@pytest.fixture
def fake_functions() -> FakeFunctions:
    return FakeFunctions()


@pytest.fixture(scope="function")
async def api_client(db_session: AsyncSession, fake_functions: FakeFunctions) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client bound to the app in-process, on the test's event loop.

    Overrides get_db to use the in-memory session and installs the fake
    remote functions client.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.functions = fake_functions

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()
    app.state.functions = None


@pytest.fixture(scope="function")
def test_client(fake_functions: FakeFunctions) -> Generator[TestClient, None, None]:
    """
    Synchronous FastAPI test client (runs the lifespan); used for WebSockets.
    """
    app.state.functions = fake_functions

    with TestClient(app) as client:
        yield client

    app.state.functions = None


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest.fixture
def valid_invoice_payload() -> dict:
    return {
        "amount": 1_250_000,
        "subscriptionYears": 2,
        "promoCode": "",
        "domain": "tokobaru.com",
        "templateId": "tpl-42",
        "templateName": "Fresh Store",
        "customerName": "Ana Putri",
        "customerEmail": "ana@example.com",
    }


@pytest.fixture
async def sample_catalog(db_session: AsyncSession):
    """Add-ons, subscription add-ons and durations for package `pkg-growth`."""
    from db_models import PackageAddOn, PackageDuration, SubscriptionAddOn

    db_session.add_all([
        PackageAddOn(id="ao-pages", package_id="pkg-growth", label="Extra pages",
                     price_per_unit=50_000, unit="page", sort_order=2),
        PackageAddOn(id="ao-email", package_id="pkg-growth", label="Email accounts",
                     price_per_unit=25_000, unit="account", sort_order=1),
        PackageAddOn(id="ao-old", package_id="pkg-growth", label="Retired",
                     price_per_unit=1, is_active=False, sort_order=0),
        PackageAddOn(id="ao-other", package_id="pkg-pro", label="Other package",
                     price_per_unit=99, sort_order=0),
        SubscriptionAddOn(id="sa-seo", package_id="pkg-growth", label="SEO",
                          price_idr=300_000, is_active=True, sort_order=2),
        SubscriptionAddOn(id="sa-backup", package_id="pkg-growth", label="Backup",
                          price_idr=100_000, is_active=None, sort_order=1),
        SubscriptionAddOn(id="sa-off", package_id="pkg-growth", label="Disabled",
                          price_idr=999, is_active=False, sort_order=0),
        PackageDuration(id="d-24", package_id="pkg-growth", duration_months=24,
                        discount_percent=15, sort_order=1),
        PackageDuration(id="d-12", package_id="pkg-growth", duration_months=12,
                        discount_percent=5, sort_order=1),
        PackageDuration(id="d-1", package_id="pkg-growth", duration_months=1, sort_order=0),
        PackageDuration(id="d-off", package_id="pkg-growth", duration_months=36,
                        is_active=False, sort_order=0),
    ])
    await db_session.commit()
