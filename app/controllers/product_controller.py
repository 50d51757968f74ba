from fastapi import APIRouter, Depends, status
from typing import List
from app.models.product import ProductRead, ProductRecommendation
from app.schemas.product_schemas import ProductCreateRequest, ProductListResponse, MessageResponse
from app.services.product_service import ProductService, get_product_service
import structlog

logger = structlog.get_logger()

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=ProductListResponse)
async def get_all_products(service: ProductService = Depends(get_product_service)):
    """List every product in the catalog"""
    return await service.get_all_products()


@router.get("/featured", response_model=List[ProductRead])
async def get_featured_products(service: ProductService = Depends(get_product_service)):
    """Featured products, served from the cache when present"""
    return await service.get_featured_products()


@router.post("/", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreateRequest,
    service: ProductService = Depends(get_product_service)
):
    """Create a product, uploading its image first when one is supplied"""
    return await service.create_product(product)


@router.get("/recommendations", response_model=List[ProductRecommendation])
async def get_recommended_products(service: ProductService = Depends(get_product_service)):
    return await service.get_recommended_products()


@router.get("/category/{category}", response_model=ProductListResponse)
async def get_products_by_category(
    category: str,
    service: ProductService = Depends(get_product_service)
):
    return await service.get_products_by_category(category)


@router.patch("/{product_id}", response_model=ProductRead)
async def toggle_featured_product(
    product_id: str,
    service: ProductService = Depends(get_product_service)
):
    """Flip the featured flag and rebuild the featured cache"""
    return await service.toggle_featured_product(product_id)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service)
):
    """Delete a product and, best effort, its uploaded image"""
    return await service.delete_product(product_id)
