from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from pydantic import ValidationError
from app.core.config import settings
from app.core.database import async_session_maker
from app.dao.product_dao import product_dao
from app.dao.featured_products_cache_dao import FeaturedProductsCacheDAO, featured_products_cache_dao
from app.models.product import ProductRead, ProductRecommendation
from app.sao.cloudinary_sao import CloudinarySAO, asset_public_id, cloudinary_sao
from app.schemas.product_schemas import ProductCreateRequest, ProductListResponse, MessageResponse
import structlog

logger = structlog.get_logger()


def _serialize(products: List[ProductRead]) -> List[Dict[str, Any]]:
    return [product.model_dump(mode="json") for product in products]


class ProductService:
    """Catalog operations over the product store, the featured cache and the asset host.

    Collaborators are shared by reference across requests; the service keeps no
    per-request state.
    """

    def __init__(
        self,
        session_factory=None,
        featured_cache: Optional[FeaturedProductsCacheDAO] = None,
        asset_host: Optional[CloudinarySAO] = None,
        recommendation_size: Optional[int] = None,
    ):
        self.product_dao = product_dao
        self.session_factory = session_factory if session_factory is not None else async_session_maker
        self.featured_cache = featured_cache if featured_cache is not None else featured_products_cache_dao
        self.asset_host = asset_host if asset_host is not None else cloudinary_sao
        self.recommendation_size = recommendation_size or settings.recommendation_sample_size

    def _server_error(self, operation: str, error: Exception) -> HTTPException:
        logger.error(f"Error in {operation}", error=str(error), error_type=type(error).__name__)
        detail = {"message": "Server error"}
        if settings.expose_error_details:
            detail["error"] = str(error)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail
        )

    async def get_all_products(self) -> ProductListResponse:
        try:
            async with self.session_factory() as db:
                products = await self.product_dao.get_all(db)
            logger.info("Retrieved products", count=len(products))
            return ProductListResponse(products=[ProductRead.model_validate(p) for p in products])
        except Exception as e:
            raise self._server_error("get_all_products", e)

    async def get_featured_products(self) -> List[ProductRead]:
        """Read-through: serve the cached snapshot, or build it from the store on a miss."""
        try:
            cached = await self.featured_cache.get()
            if cached is not None:
                try:
                    featured = [ProductRead.model_validate(p) for p in cached]
                    logger.debug("Featured products cache hit", count=len(featured))
                    return featured
                except ValidationError as e:
                    # Snapshot written with another product shape; rebuild it
                    logger.warning("Discarding unreadable featured products cache", error=str(e))
                    await self.featured_cache.delete()

            async with self.session_factory() as db:
                products = await self.product_dao.get_featured(db)

            if not products:
                logger.warning("No featured products found")
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="No featured products found"
                )

            featured = [ProductRead.model_validate(p) for p in products]
            await self.featured_cache.set(_serialize(featured))
            return featured
        except HTTPException:
            raise
        except Exception as e:
            raise self._server_error("get_featured_products", e)

    async def create_product(self, product_create: ProductCreateRequest) -> ProductRead:
        try:
            image_url = ""
            if product_create.image:
                uploaded = await self.asset_host.upload(product_create.image, folder=settings.asset_folder)
                image_url = uploaded.get("secure_url") or ""

            async with self.session_factory() as db:
                product = await self.product_dao.create(db, obj_in={
                    "name": product_create.name,
                    "description": product_create.description,
                    "price": product_create.price,
                    "image": image_url,
                    "category": product_create.category,
                })
            logger.info("Product created successfully", product_id=product.id, has_image=bool(image_url))
            return ProductRead.model_validate(product)
        except Exception as e:
            raise self._server_error("create_product", e)

    async def _delete_product_image(self, image_url: str) -> None:
        # Best effort: a dangling asset must never block removing the product
        try:
            public_id = asset_public_id(image_url, settings.asset_folder)
            await self.asset_host.destroy(public_id)
            logger.info("Deleted product image from asset host", public_id=public_id)
        except Exception as e:
            logger.error("Error deleting product image from asset host", image=image_url, error=str(e))

    async def delete_product(self, product_id: str) -> MessageResponse:
        try:
            async with self.session_factory() as db:
                product = await self.product_dao.get_by_id(db, product_id)
                if not product:
                    logger.warning("Product not found", product_id=product_id)
                    raise HTTPException(
                        status_code=status.HTTP_404_NOT_FOUND,
                        detail="Product not found"
                    )
                image_url = product.image

            # No connection is held while the asset host is called
            if image_url:
                await self._delete_product_image(image_url)

            async with self.session_factory() as db:
                await self.product_dao.delete(db, id=product_id)
            logger.info("Product deleted successfully", product_id=product_id)
            return MessageResponse(message="Product deleted successfully")
        except HTTPException:
            raise
        except Exception as e:
            raise self._server_error("delete_product", e)

    async def get_recommended_products(self) -> List[ProductRecommendation]:
        try:
            async with self.session_factory() as db:
                return await self.product_dao.sample(db, self.recommendation_size)
        except Exception as e:
            raise self._server_error("get_recommended_products", e)

    async def get_products_by_category(self, category: str) -> ProductListResponse:
        try:
            async with self.session_factory() as db:
                products = await self.product_dao.get_by_category(db, category)
            logger.info("Retrieved products by category", category=category, count=len(products))
            return ProductListResponse(products=[ProductRead.model_validate(p) for p in products])
        except Exception as e:
            raise self._server_error("get_products_by_category", e)

    async def toggle_featured_product(self, product_id: str) -> ProductRead:
        try:
            async with self.session_factory() as db:
                product = await self.product_dao.get_by_id(db, product_id)
                if not product:
                    logger.warning("Product not found", product_id=product_id)
                    raise HTTPException(
                        status_code=status.HTTP_404_NOT_FOUND,
                        detail="Product not found"
                    )

                updated = await self.product_dao.update(
                    db, db_obj=product, obj_in={"isFeatured": not product.isFeatured}
                )
                result = ProductRead.model_validate(updated)

            await self.update_featured_products_cache()
            logger.info("Toggled featured flag", product_id=product_id, is_featured=result.isFeatured)
            return result
        except HTTPException:
            raise
        except Exception as e:
            raise self._server_error("toggle_featured_product", e)

    async def update_featured_products_cache(self) -> None:
        """Rebuild the featured snapshot from the store. Failures are logged, not raised."""
        try:
            async with self.session_factory() as db:
                products = await self.product_dao.get_featured(db)

            if products:
                await self.featured_cache.set(_serialize([ProductRead.model_validate(p) for p in products]))
            else:
                # Keep the key absent so featured reads answer 404
                await self.featured_cache.delete()
        except Exception as e:
            logger.error("Error in update_featured_products_cache", error=str(e))
            try:
                await self.featured_cache.delete()
            except Exception as drop_error:
                logger.error("Failed to drop stale featured products cache", error=str(drop_error))


product_service = ProductService()


def get_product_service() -> ProductService:
    """FastAPI dependency returning the process-wide product service."""
    return product_service
