"""
FastAPI dependencies - identity, services and store handles.
Store handles are built here and passed into services, never read from globals inside them.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from marketplace.cache.redis_client import ProductCache, get_product_cache
from marketplace.config import get_settings
from marketplace.core.errors import AuthenticationError
from marketplace.core.security import IdentityContext, decode_identity_token
from marketplace.db.repositories.product_repository import ProductRepository
from marketplace.db.repositories.user_repository import UserRepository
from marketplace.db.session import DbSession
from marketplace.services.media_store import MediaStore
from marketplace.services.owner_directory import OwnerDirectory
from marketplace.services.product_service import ProductService

security = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> IdentityContext:
    """Resolve the bearer token to an identity. Raises 401 if missing or invalid."""
    if not credentials:
        raise AuthenticationError("No token provided")
    identity = decode_identity_token(credentials.credentials)
    if identity is None:
        raise AuthenticationError("Invalid token")
    return identity


def get_owner_directory(session: DbSession) -> OwnerDirectory:
    return OwnerDirectory(UserRepository(session))


def get_product_service(
    session: DbSession,
    cache: Annotated[ProductCache, Depends(get_product_cache)],
) -> ProductService:
    """Factory for the catalog service with repository injection."""
    return ProductService(ProductRepository(session), OwnerDirectory(UserRepository(session)), cache)


_media_store: MediaStore | None = None


def get_media_store() -> MediaStore:
    """Process-wide media store rooted at settings.upload_dir. Overridden in tests."""
    global _media_store
    if _media_store is None:
        settings = get_settings()
        _media_store = MediaStore(
            settings.upload_dir,
            max_bytes=settings.max_upload_bytes,
            max_files=settings.max_upload_files,
        )
    return _media_store


CurrentIdentity = Annotated[IdentityContext, Depends(get_identity)]
Owners = Annotated[OwnerDirectory, Depends(get_owner_directory)]
Products = Annotated[ProductService, Depends(get_product_service)]
Media = Annotated[MediaStore, Depends(get_media_store)]
