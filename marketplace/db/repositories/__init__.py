# Repository pattern: data access kept out of services and routes

from marketplace.db.repositories.product_repository import ProductRepository
from marketplace.db.repositories.user_repository import UserRepository

__all__ = ["UserRepository", "ProductRepository"]
