"""
Product service - business logic for marketplace listings.
Challenge: Orchestrate owner resolution, ownership checks, catalog queries and cache.
Design: Service depends on injected repositories and cache; easy to test with an in-memory DB.
"""

import logging
import math
import uuid

from marketplace.cache.redis_client import ProductCache
from marketplace.core.errors import AuthorizationError, NotFoundError, ValidationError
from marketplace.core.security import IdentityContext
from marketplace.db.models.product import Product, ProductStatus, can_transition
from marketplace.db.models.user import utcnow
from marketplace.db.repositories.product_repository import ProductRepository
from marketplace.schemas.product import (
    PageInfo,
    ProductCreate,
    ProductDetailResponse,
    ProductFilters,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from marketplace.services.owner_directory import OwnerByExternalIdentity, OwnerDirectory, OwnerRef

logger = logging.getLogger(__name__)

# Plain fields copied as-is by update(); location and status have their own rules.
UPDATABLE_FIELDS = ("title", "description", "price", "category", "images", "quantity")


def _product_to_response(product: Product, detail: bool = False) -> ProductResponse:
    """Map model to API response with the seller expanded."""
    seller = {"id": product.seller.id, "name": product.seller.name}
    if detail:
        seller["email"] = product.seller.email
        seller["external_identity_id"] = product.seller.external_identity_id
    data = {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "price": product.price,
        "category": product.category,
        "location": {
            "type": "Point",
            "coordinates": (product.longitude, product.latitude),
            "address": product.address,
        },
        "images": list(product.images),
        "quantity": product.quantity,
        "status": product.status,
        "seller_id": seller,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }
    if detail:
        return ProductDetailResponse.model_validate(data)
    return ProductResponse.model_validate(data)


class ProductService:
    """Handles all listing use cases: create, browse, ownership-gated changes."""

    def __init__(self, product_repo: ProductRepository, owners: OwnerDirectory, cache: ProductCache):
        self.product_repo = product_repo
        self.owners = owners
        self.cache = cache

    async def create(self, identity: IdentityContext, data: ProductCreate) -> ProductResponse:
        resolution = await self.owners.resolve(identity)
        if not resolution.persisted:
            raise NotFoundError("User not found")
        lng, lat = data.location.coordinates
        product = Product(
            title=data.title,
            description=data.description,
            price=data.price,
            category=data.category,
            longitude=lng,
            latitude=lat,
            address=data.location.address,
            images=list(data.images),
            quantity=data.quantity,
            status=ProductStatus.ACTIVE.value,
            seller_id=resolution.owner.id,
        )
        product = await self.product_repo.add(product)
        logger.info("Product %s created by owner %s", product.id, resolution.owner.id)
        product = await self.product_repo.get_by_id_with_seller(product.id)
        return _product_to_response(product)

    async def list_products(self, filters: ProductFilters) -> ProductListResponse:
        """Active listings. A proximity search orders by distance and ignores `sort`."""
        if filters.min_price is not None and filters.max_price is not None and filters.min_price > filters.max_price:
            raise ValidationError.single("maxPrice", "Maximum price must not be below minimum price")

        skip = (filters.page - 1) * filters.limit
        if filters.is_proximity:
            pairs, total = await self.product_repo.search_nearby(
                lat=filters.lat,
                lng=filters.lng,
                radius_km=filters.distance,
                category=filters.category,
                min_price=filters.min_price,
                max_price=filters.max_price,
                skip=skip,
                limit=filters.limit,
            )
            products = [product for product, _ in pairs]
        else:
            products, total = await self.product_repo.search(
                category=filters.category,
                min_price=filters.min_price,
                max_price=filters.max_price,
                sort=filters.sort,
                skip=skip,
                limit=filters.limit,
            )
        return ProductListResponse(
            products=[_product_to_response(p) for p in products],
            pagination=PageInfo(
                total=total,
                page=filters.page,
                limit=filters.limit,
                pages=math.ceil(total / filters.limit),
            ),
        )

    async def get_by_id(self, product_id: uuid.UUID) -> ProductDetailResponse:
        """Any status is visible by id. Uses Redis cache to reduce DB load."""
        cached = await self.cache.get(product_id)
        if cached:
            return ProductDetailResponse.model_validate(cached)
        product = await self.product_repo.get_by_id_with_seller(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        resp = _product_to_response(product, detail=True)
        await self.cache.set(product_id, resp.model_dump(mode="json", by_alias=True))
        return resp

    async def _get_owned(self, identity: IdentityContext, product_id: uuid.UUID) -> Product:
        resolution = await self.owners.resolve(identity)
        product = await self.product_repo.get_by_id_with_seller(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        # An ephemeral owner was never written, so it cannot be anyone's seller.
        if not resolution.persisted or product.seller_id != resolution.owner.id:
            raise AuthorizationError()
        return product

    async def update(self, identity: IdentityContext, product_id: uuid.UUID, data: ProductUpdate) -> ProductResponse:
        product = await self._get_owned(identity, product_id)
        supplied = data.model_fields_set

        if "status" in supplied:
            current = ProductStatus(product.status)
            if not can_transition(current, data.status):
                raise ValidationError.single(
                    "status", f"Cannot change status from {current.value} to {data.status.value}"
                )
            product.status = data.status.value

        for field in UPDATABLE_FIELDS:
            if field in supplied:
                setattr(product, field, getattr(data, field))
        if "location" in supplied:
            location = data.location
            if "coordinates" in location.model_fields_set:
                product.longitude, product.latitude = location.coordinates
            if "address" in location.model_fields_set:
                product.address = location.address

        product.updated_at = utcnow()
        await self.product_repo.save(product)
        await self.cache.invalidate(product_id)
        logger.info("Product %s updated (%s)", product_id, ", ".join(sorted(supplied)) or "no fields")
        product = await self.product_repo.get_by_id_with_seller(product_id)
        return _product_to_response(product)

    async def deactivate(self, identity: IdentityContext, product_id: uuid.UUID) -> None:
        """Soft delete. Already-inactive listings are left untouched."""
        product = await self._get_owned(identity, product_id)
        if product.status == ProductStatus.INACTIVE.value:
            return
        product.status = ProductStatus.INACTIVE.value
        product.updated_at = utcnow()
        await self.product_repo.save(product)
        await self.cache.invalidate(product_id)
        logger.info("Product %s deactivated", product_id)

    async def list_by_owner(self, ref: OwnerRef) -> list[ProductResponse]:
        if isinstance(ref, OwnerByExternalIdentity):
            owner = await self.owners.find(ref)
            if owner is None:
                raise NotFoundError("User not found")
            seller_id = owner.id
        else:
            seller_id = ref.owner_id
        products = await self.product_repo.list_active_by_seller(seller_id)
        return [_product_to_response(p) for p in products]
