"""
Pytest configuration and shared fixtures for storefront tests.

Provides an in-memory SQLite session, an httpx client bound to the FastAPI
app, a fake payment gateway, and seeded users/catalog.
"""
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"

from main import app  # noqa: E402
from database import Base, get_db  # noqa: E402
from deps import get_payment_gateway  # noqa: E402
from domain.errors import GatewayError  # noqa: E402
from middleware.auth import issue_access_token  # noqa: E402
from middleware.rate_limit import limiter  # noqa: E402


# ── Fake Gateway ─────────────────────────────────────────────────────


class FakeGateway:
    """
    Stands in for services.payment_gateway.PaymentGateway.

    Records every call. Set `sale_error` / `void_error` to a GatewayError to
    make that call fail.
    """

    def __init__(self):
        self.token_calls = 0
        self.sales: list[dict] = []
        self.voids: list[str] = []
        self.token_error: GatewayError | None = None
        self.sale_error: GatewayError | None = None
        self.void_error: GatewayError | None = None

    async def generate_client_token(self) -> str:
        self.token_calls += 1
        if self.token_error:
            raise self.token_error
        return "fake-client-token"

    async def sale(self, *, amount: Decimal, nonce: str) -> dict:
        self.sales.append({"amount": amount, "nonce": nonce})
        if self.sale_error:
            raise self.sale_error
        return {
            "success": True,
            "transaction": {
                "id": f"tx{len(self.sales)}",
                "status": "submitted_for_settlement",
                "type": "sale",
                "amount": f"{amount:.2f}",
                "currencyIsoCode": "USD",
            },
        }

    async def void(self, transaction_id: str) -> dict:
        self.voids.append(transaction_id)
        if self.void_error:
            raise self.void_error
        return {"success": True, "transaction": {"id": transaction_id, "status": "voided"}}


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

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, gateway: FakeGateway) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the app with the test DB session and fake gateway.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    limiter.reset()


# ── Users ────────────────────────────────────────────────────────────


async def _make_user(db: AsyncSession, *, email: str, role: str = "user"):
    from services import auth_service

    user = await auth_service.register(
        db,
        name=email.split("@")[0].title(),
        email=email,
        password="secret123",
        phone="555-0100",
        address="1 Main St",
        answer="blue",
    )
    user.role = role
    await db.commit()
    return user


@pytest.fixture
async def shopper(db_session):
    return await _make_user(db_session, email="shopper@example.com")


@pytest.fixture
async def admin(db_session):
    return await _make_user(db_session, email="admin@example.com", role="admin")


@pytest.fixture
def shopper_headers(shopper) -> dict:
    return {"Authorization": f"Bearer {issue_access_token(user_id=shopper.id, role=shopper.role)}"}


@pytest.fixture
def admin_headers(admin) -> dict:
    return {"Authorization": f"Bearer {issue_access_token(user_id=admin.id, role=admin.role)}"}


# ── Catalog ──────────────────────────────────────────────────────────


@pytest.fixture
async def category(db_session):
    from db_models import Category

    c = Category(name="Books", slug="books")
    db_session.add(c)
    await db_session.commit()
    return c


@pytest.fixture
async def products(db_session, category):
    """Three products in `category`: novel (14.99), atlas (45.00), zine (3.50, 1 in stock)."""
    from db_models import Product

    items = [
        Product(name="Novel", slug="novel", description="A long story", price=Decimal("14.99"),
                category_id=category.id, quantity=10),
        Product(name="Atlas", slug="atlas", description="Maps of the world", price=Decimal("45.00"),
                category_id=category.id, quantity=5, shipping=True),
        Product(name="Zine", slug="zine", description="Small press", price=Decimal("3.50"),
                category_id=category.id, quantity=1),
    ]
    db_session.add_all(items)
    await db_session.commit()
    return {p.slug: p for p in items}
