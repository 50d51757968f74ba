"""Shared fixtures: an in-memory product store, an in-memory Redis and a stub asset host."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.dao.featured_products_cache_dao import FeaturedProductsCacheDAO
from app.models.product import Product  # noqa: F401  registers the table
from app.schemas.product_schemas import ProductCreateRequest
from app.services.product_service import ProductService


class FakeRedis:
    """The slice of ``redis.asyncio.Redis`` used by the featured cache."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.set_calls: list[tuple[str, Any]] = []

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.store[key] = value
        self.set_calls.append((key, ex))
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.store.pop(key, None) is not None)


class StubAssetHost:
    def __init__(self) -> None:
        self.uploads: list[tuple[str, str | None]] = []
        self.destroyed: list[str] = []
        self.fail_upload = False
        self.fail_destroy = False

    async def upload(self, file: str, folder: str | None = None) -> dict[str, Any]:
        if self.fail_upload:
            raise RuntimeError("upload rejected")
        self.uploads.append((file, folder))
        name = f"asset{len(self.uploads)}"
        return {
            "public_id": f"{folder}/{name}",
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/v1700000000/{folder}/{name}.png",
        }

    async def destroy(self, public_id: str) -> dict[str, Any]:
        if self.fail_destroy:
            raise RuntimeError("asset host unavailable")
        self.destroyed.append(public_id)
        return {"result": "ok"}


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker]:
    """Provide an in-memory SQLite session factory for store-backed tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def featured_cache(fake_redis: FakeRedis) -> FeaturedProductsCacheDAO:
    return FeaturedProductsCacheDAO(client=fake_redis, key="featured_products")


@pytest.fixture
def asset_host() -> StubAssetHost:
    return StubAssetHost()


@pytest.fixture
def product_service(session_factory, featured_cache, asset_host) -> ProductService:
    return ProductService(
        session_factory=session_factory,
        featured_cache=featured_cache,
        asset_host=asset_host,
        recommendation_size=3,
    )


def make_product_request(**overrides: Any) -> ProductCreateRequest:
    payload = {
        "name": "Leather Jacket",
        "description": "Black, slim fit",
        "price": 149.99,
        "category": "jackets",
    }
    payload.update(overrides)
    return ProductCreateRequest(**payload)
