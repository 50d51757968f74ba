# Export all DAO classes
from .base_dao import BaseDAO
from .product_dao import ProductDAO, product_dao
from .featured_products_cache_dao import FeaturedProductsCacheDAO, featured_products_cache_dao

__all__ = [
    "BaseDAO",
    "ProductDAO",
    "product_dao",
    "FeaturedProductsCacheDAO",
    "featured_products_cache_dao",
]
