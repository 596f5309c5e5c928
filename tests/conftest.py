"""
Pytest fixtures - isolated in-memory DB, HTTP client, identities and stores.
Each test gets a fresh SQLite database and upload directory.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from marketplace.cache.redis_client import ProductCache, get_product_cache
from marketplace.core.dependencies import get_media_store
from marketplace.core.security import IdentityContext, create_identity_token
from marketplace.db.base import Base
from marketplace.db.models import Product, User  # noqa: F401 - register tables
from marketplace.db.repositories.product_repository import ProductRepository
from marketplace.db.repositories.user_repository import UserRepository
from marketplace.db.session import get_db
from marketplace.main import app
from marketplace.services.media_store import MediaStore
from marketplace.services.owner_directory import OwnerDirectory
from marketplace.services.product_service import ProductService

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeRedis:
    """Dict-backed stand-in for the three redis calls ProductCache makes."""

    def __init__(self):
        self.data: dict[str, str] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as s:
        yield s


@pytest.fixture
def cache() -> ProductCache:
    return ProductCache(FakeRedis(), ttl_seconds=60)


@pytest.fixture
def media_store(tmp_path) -> MediaStore:
    return MediaStore(tmp_path / "uploads", max_bytes=1024, max_files=5)


@pytest.fixture
def owners(session) -> OwnerDirectory:
    return OwnerDirectory(UserRepository(session))


@pytest.fixture
def service(session, owners, cache) -> ProductService:
    return ProductService(ProductRepository(session), owners, cache)


@pytest_asyncio.fixture
async def client(session: AsyncSession, cache: ProductCache, media_store: MediaStore):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_product_cache] = lambda: cache
    app.dependency_overrides[get_media_store] = lambda: media_store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def alice() -> IdentityContext:
    return IdentityContext(uid="uid-alice", email="alice@example.com")


@pytest.fixture
def bob() -> IdentityContext:
    return IdentityContext(uid="uid-bob", email="bob@example.com")


@pytest.fixture
def auth_headers(alice: IdentityContext) -> dict:
    return {"Authorization": f"Bearer {create_identity_token(alice.uid, alice.email)}"}


@pytest.fixture
def other_auth_headers(bob: IdentityContext) -> dict:
    return {"Authorization": f"Bearer {create_identity_token(bob.uid, bob.email)}"}


@pytest.fixture
def product_payload() -> dict:
    return {
        "title": "Basket of apples",
        "description": "Crisp honeycrisp apples from the backyard tree",
        "price": 5,
        "category": "produce",
        "location": {"coordinates": [-122.42, 37.77], "address": "SF"},
        "images": ["https://cdn.example.com/u1.jpg"],
        "quantity": 3,
    }
