import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from milk_ledger.main import app
from milk_ledger.database import Base, get_db
from milk_ledger.models import Account
from milk_ledger.auth import get_password_hash

SQLALCHEMY_TEST_URL = "sqlite+aiosqlite:///:memory:"


# --- 1) Fresh in-memory SQLite per test, shared by every session ---
@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        SQLALCHEMY_TEST_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()

@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session

@pytest_asyncio.fixture
async def client(session_factory):
    # each request gets its own session, like get_db in production
    async def _get_db():
        async with session_factory() as session:
            yield session
    app.dependency_overrides[get_db] = _get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --- 2) Seed one buyer and two sellers before each test ---
@pytest_asyncio.fixture
async def accounts(db_session: AsyncSession):
    buyer = Account(
        name="Ramesh Dairy",
        role="buyer",
        username="buyer1",
        password=get_password_hash("buyerpass"),
    )
    other_buyer = Account(
        name="Gokul Dairy",
        role="buyer",
        username="buyer2",
        password=get_password_hash("buyerpass"),
    )
    seller = Account(
        name="Suresh",
        role="seller",
        username="seller1",
        password=get_password_hash("sellerpass"),
    )
    other_seller = Account(
        name="Mahesh",
        role="seller",
        username="seller2",
        password=get_password_hash("sellerpass"),
    )
    db_session.add_all([buyer, other_buyer, seller, other_seller])
    await db_session.commit()
    return {
        "buyer": buyer,
        "other_buyer": other_buyer,
        "seller": seller,
        "other_seller": other_seller,
    }


# --- 3) Helpers to grab JWT tokens ---
async def login(client: AsyncClient, username: str, password: str) -> str:
    r = await client.post("/login", json={"username": username, "password": password})
    assert r.status_code == 200
    return r.json()["token"]

def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}

@pytest_asyncio.fixture
async def buyer_token(client: AsyncClient, accounts):
    return await login(client, "buyer1", "buyerpass")

@pytest_asyncio.fixture
async def other_buyer_token(client: AsyncClient, accounts):
    return await login(client, "buyer2", "buyerpass")

@pytest_asyncio.fixture
async def seller_token(client: AsyncClient, accounts):
    return await login(client, "seller1", "sellerpass")

@pytest_asyncio.fixture
async def other_seller_token(client: AsyncClient, accounts):
    return await login(client, "seller2", "sellerpass")
