from .product import Product, ProductBase, ProductRead, ProductRecommendation

__all__ = [
    "Product",
    "ProductBase",
    "ProductRead",
    "ProductRecommendation",
]
