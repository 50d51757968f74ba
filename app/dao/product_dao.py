from typing import List
from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDAO
from app.models.product import Product, ProductRecommendation
import structlog

logger = structlog.get_logger()


class ProductDAO(BaseDAO[Product]):
    def __init__(self):
        super().__init__(Product)

    async def get_by_category(self, db: AsyncSession, category: str) -> List[Product]:
        try:
            result = await db.execute(
                select(Product).where(Product.category == category)
            )
            return result.scalars().all()
        except Exception as e:
            logger.error("Error getting products by category", category=category, error=str(e))
            raise

    async def get_featured(self, db: AsyncSession) -> List[Product]:
        try:
            result = await db.execute(
                select(Product).where(Product.isFeatured == True)  # noqa: E712
            )
            return result.scalars().all()
        except Exception as e:
            logger.error("Error getting featured products", error=str(e))
            raise

    async def sample(self, db: AsyncSession, size: int) -> List[ProductRecommendation]:
        """Random sample of at most ``size`` products, projected to public fields."""
        try:
            result = await db.execute(
                select(
                    Product.id,
                    Product.name,
                    Product.description,
                    Product.image,
                    Product.price,
                )
                .order_by(func.random())
                .limit(size)
            )
            return [ProductRecommendation(**row) for row in result.mappings().all()]
        except Exception as e:
            logger.error("Error sampling products", size=size, error=str(e))
            raise


product_dao = ProductDAO()
