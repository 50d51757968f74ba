"""Shallow FastAPI tests covering the product router wiring and error bodies."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.models.product import ProductRead, ProductRecommendation
from app.schemas.product_schemas import MessageResponse, ProductListResponse
from app.services.product_service import get_product_service

PREFIX = f"{settings.api_prefix}/products"


def _product(**overrides) -> ProductRead:
    data = {
        "id": "prod-1",
        "name": "Leather Jacket",
        "description": "Black, slim fit",
        "price": 149.99,
        "image": "",
        "category": "jackets",
        "isFeatured": False,
        "createdAt": datetime(2024, 1, 1),
        "updatedAt": datetime(2024, 1, 1),
    }
    data.update(overrides)
    return ProductRead(**data)


class StubProductService:
    def __init__(self) -> None:
        self.created = []
        self.fail_with: HTTPException | None = None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def get_all_products(self):
        self._maybe_fail()
        return ProductListResponse(products=[_product()])

    async def get_featured_products(self):
        self._maybe_fail()
        return [_product(isFeatured=True)]

    async def create_product(self, request):
        self._maybe_fail()
        self.created.append(request)
        return _product(name=request.name, category=request.category, price=request.price)

    async def get_recommended_products(self):
        return [ProductRecommendation(id="prod-1", name="Leather Jacket", description="Black", image="", price=149.99)]

    async def get_products_by_category(self, category):
        return ProductListResponse(products=[_product(category=category)])

    async def toggle_featured_product(self, product_id):
        self._maybe_fail()
        return _product(id=product_id, isFeatured=True)

    async def delete_product(self, product_id):
        self._maybe_fail()
        return MessageResponse(message="Product deleted successfully")


@pytest.fixture
def stub_service() -> StubProductService:
    return StubProductService()


@pytest.fixture
def client(stub_service) -> Iterator[TestClient]:
    app.dependency_overrides[get_product_service] = lambda: stub_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_list_all_wraps_products(client):
    response = client.get(f"{PREFIX}/")

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body["products"]] == ["prod-1"]
    assert "X-Request-ID" in response.headers


def test_featured_returns_plain_list(client):
    response = client.get(f"{PREFIX}/featured")

    assert response.status_code == 200
    assert response.json()[0]["isFeatured"] is True


def test_create_returns_201(client, stub_service):
    response = client.post(
        f"{PREFIX}/",
        json={"name": "Denim", "description": "Blue", "price": 59.5, "category": "jeans"},
    )

    assert response.status_code == 201
    assert response.json()["name"] == "Denim"
    assert stub_service.created[0].image is None


def test_create_rejects_negative_price(client):
    response = client.post(
        f"{PREFIX}/",
        json={"name": "Denim", "description": "Blue", "price": -1, "category": "jeans"},
    )

    assert response.status_code == 422


def test_recommendations_project_public_fields(client):
    response = client.get(f"{PREFIX}/recommendations")

    assert response.status_code == 200
    assert set(response.json()[0]) == {"id", "name", "description", "image", "price"}


def test_category_route(client):
    response = client.get(f"{PREFIX}/category/shoes")

    assert response.status_code == 200
    assert response.json()["products"][0]["category"] == "shoes"


def test_toggle_route(client):
    response = client.patch(f"{PREFIX}/prod-9")

    assert response.status_code == 200
    assert response.json()["id"] == "prod-9"


def test_delete_route(client):
    response = client.delete(f"{PREFIX}/prod-1")

    assert response.status_code == 200
    assert response.json() == {"message": "Product deleted successfully"}


def test_not_found_body(client, stub_service):
    stub_service.fail_with = HTTPException(status_code=404, detail="Product not found")

    response = client.patch(f"{PREFIX}/missing")

    assert response.status_code == 404
    assert response.json() == {"message": "Product not found", "success": False, "status_code": 404}


def test_internal_error_body_carries_original_message(client, stub_service):
    stub_service.fail_with = HTTPException(
        status_code=500, detail={"message": "Server error", "error": "connection refused"}
    )

    response = client.get(f"{PREFIX}/")

    assert response.status_code == 500
    assert response.json() == {
        "message": "Server error",
        "error": "connection refused",
        "success": False,
        "status_code": 500,
    }
