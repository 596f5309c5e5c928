"""
Shared BDD steps. Each step runs one request in its own event loop against a
file-backed SQLite database, so state carries over between steps.
"""

import asyncio
from functools import partial

import pytest
from httpx import ASGITransport, AsyncClient, Response
from pytest_bdd import given, parsers, then, when
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.cache.redis_client import ProductCache, get_product_cache
from marketplace.core.dependencies import get_media_store
from marketplace.db.base import Base
from marketplace.db.models import Product, User  # noqa: F401 - register tables
from marketplace.db.session import get_db
from marketplace.main import app
from marketplace.services.media_store import MediaStore


@pytest.fixture
def world(tmp_path) -> dict:
    """Scenario state: database location, signed-in sellers, last response."""
    return {
        "db_url": f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        "uploads": tmp_path / "uploads",
        "headers": {},
        "response": None,
        "listing_id": None,
    }


def _send(world: dict, method: str, path: str, **kwargs) -> Response:
    async def run() -> Response:
        engine = create_async_engine(world["db_url"])
        session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async def override_get_db():
            async with session_maker() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_product_cache] = lambda: ProductCache(None)
        app.dependency_overrides[get_media_store] = lambda: MediaStore(world["uploads"])
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                return await client.request(method, path, **kwargs)
        finally:
            app.dependency_overrides.clear()
            await engine.dispose()

    response = asyncio.run(run())
    world["response"] = response
    return response


@pytest.fixture
def api(world):
    """Call the app once: api("GET", "/api/v1/products", params=...)."""
    return partial(_send, world)


@given("an empty catalog")
def empty_catalog(world):
    async def create_tables():
        engine = create_async_engine(world["db_url"])
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(create_tables())


@when(parsers.parse('I request "{method}" "{path}"'))
def request_path(world, method, path):
    _send(world, method, path)


@then(parsers.parse("the response status should be {status:d}"))
def response_status(world, status):
    assert world["response"].status_code == status, world["response"].text


@then(parsers.parse('the response body should have "{key}" equals "{value}"'))
def body_has(world, key, value):
    assert world["response"].json().get(key) == value
