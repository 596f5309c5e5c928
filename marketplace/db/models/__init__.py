from marketplace.db.models.product import Product, ProductStatus
from marketplace.db.models.user import User

__all__ = ["User", "Product", "ProductStatus"]
