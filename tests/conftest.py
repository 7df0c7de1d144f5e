"""Shared pytest fixtures for all tests."""
import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./pixbank_test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production-use-0123456789")
os.environ.setdefault("PIX_GATEWAY_TOKEN", "test_gateway_token")
os.environ.setdefault("PIX_GATEWAY_BASE_URL", "https://gateway.test/api")
os.environ.setdefault("PIX_WEBHOOK_SECRET", "test_webhook_secret")
os.environ.setdefault("LOG_DIR", "logs")

from decimal import Decimal

import httpx
import pytest
import respx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from pixbank.config import settings
from pixbank.core import middleware as middleware_module
from pixbank.core.constants import UserRole
from pixbank.core.security import create_access_token, get_password_hash
from pixbank.database import get_db
from pixbank.main import app
from pixbank.models import Base, User
from pixbank.services.pix_gateway import APPROVED_LABEL, PixGateway

# ===== DATABASE CONFIGURATION =====

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", settings.DATABASE_URL)

# NullPool: every test runs on its own event loop, so connections must not be reused
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


async def override_get_db():
    async with TestSessionLocal() as session:
        yield session


# Override get_db dependency and middleware's AsyncSessionLocal
app.dependency_overrides[get_db] = override_get_db
middleware_module.AsyncSessionLocal = TestSessionLocal

DEFAULT_PASSWORD = "TestPass123!"


# ===== FUNCTION-SCOPED SETUP / CLEANUP =====

@pytest.fixture(scope="function", autouse=True)
async def database():
    """Create all tables before each test and drop them afterwards."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ===== SHARED FIXTURES =====

@pytest.fixture
async def client():
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    """Get database session for direct DB access."""
    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@pytest.fixture
def session_factory():
    """Open extra sessions to interleave two callers on the same rows."""
    return TestSessionLocal


_cpf_counter =iter(range(10_000_000_000, 99_999_999_999))


async def create_user(
    email: str,
    balance: str = "0.00",
    role: UserRole = UserRole.USER,
    is_active: bool = True,
) -> User:
    """Insert an account directly, bypassing the API (test setup only)."""
    async with TestSessionLocal() as session:
        user = User(
            email=email,
            hashed_password=get_password_hash(DEFAULT_PASSWORD),
            full_name=email.split("@")[0].title(),
            cpf=str(next(_cpf_counter)),
            phone="11999990000",
            role=role.value,
            balance=Decimal(balance),
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


async def balance_of(user_id: int) -> Decimal:
    async with TestSessionLocal() as session:
        user = await session.get(User, user_id)
        return Decimal(str(user.balance)).quantize(Decimal("0.01"))


@pytest.fixture
def make_user():
    return create_user


@pytest.fixture
def get_balance():
    return balance_of


@pytest.fixture
async def user():
    return await create_user("customer@example.com")


@pytest.fixture
def auth_headers(user: User):
    return auth_headers_for(user)


@pytest.fixture
async def admin():
    return await create_user("admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin: User):
    return auth_headers_for(admin)


@pytest.fixture
def headers_for():
    return auth_headers_for


# ===== PIX GATEWAY =====

class GatewayStub:
    """Programs respx routes that imitate the PIX gateway."""

    def __init__(self, router: respx.Router):
        self.router = router

    def charge(self, pix_id: str = "PIX-0001", qr_code: str = "00020126580014BR.GOV.BCB.PIX"):
        return self.router.get("/create.php").mock(
            return_value=httpx.Response(
                200,
                json={"Status": "success", "IDPagamento": pix_id, "CopiaeCola": qr_code},
            )
        )

    def payment_status(self, label: str = APPROVED_LABEL):
        return self.router.get("/verificar.php").mock(
            return_value=httpx.Response(
                200, json={"status": "success", "payment_status": label}
            )
        )

    def check_response(self, response: httpx.Response | None = None, side_effect=None):
        route = self.router.get("/verificar.php")
        if side_effect is not None:
            return route.mock(side_effect=side_effect)
        return route.mock(return_value=response)

    def create_response(self, response: httpx.Response | None = None, side_effect=None):
        route = self.router.get("/create.php")
        if side_effect is not None:
            return route.mock(side_effect=side_effect)
        return route.mock(return_value=response)


@pytest.fixture
def gateway_stub():
    with respx.mock(base_url=settings.PIX_GATEWAY_BASE_URL, assert_all_called=False) as router:
        yield GatewayStub(router)


@pytest.fixture
def gateway():
    return PixGateway(base_url=settings.PIX_GATEWAY_BASE_URL, token="test_gateway_token")
