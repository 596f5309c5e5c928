"""
Product endpoints - listing CRUD, browse and proximity search.
Design: Thin controller; ProductService holds business logic and raises domain errors.
"""

import uuid

from fastapi import APIRouter, Query, status

from marketplace.config import get_settings
from marketplace.core.dependencies import CurrentIdentity, Products
from marketplace.schemas.common import MessageResponse
from marketplace.schemas.product import (
    ProductCreate,
    ProductDetailEnvelope,
    ProductEnvelope,
    ProductFilters,
    ProductListResponse,
    ProductsResponse,
    ProductUpdate,
    SortOption,
)
from marketplace.services.owner_directory import parse_owner_ref

router = APIRouter()
settings = get_settings()


@router.post("", response_model=ProductEnvelope, status_code=status.HTTP_201_CREATED)
async def create_product(svc: Products, identity: CurrentIdentity, data: ProductCreate):
    """Create a listing owned by the caller."""
    product = await svc.create(identity, data)
    return ProductEnvelope(message="Product created successfully", product=product)


@router.get("", response_model=ProductListResponse)
async def list_products(
    svc: Products,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    category: str | None = Query(None),
    min_price: float | None = Query(None, ge=0, alias="minPrice"),
    max_price: float | None = Query(None, ge=0, alias="maxPrice"),
    sort: SortOption = Query("date_desc"),
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    distance: int = Query(settings.default_search_radius_km, ge=1),
):
    """Browse active listings. GET /products?category=produce&lat=37.77&lng=-122.42&distance=5."""
    filters = ProductFilters(
        page=page,
        limit=limit,
        category=(category or "").strip() or None,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        lat=lat,
        lng=lng,
        distance=distance,
    )
    return await svc.list_products(filters)


@router.get("/user/{owner_ref}", response_model=ProductsResponse)
async def list_owner_products(svc: Products, owner_ref: str):
    """Active listings of one owner, by internal id or identity-provider id."""
    products = await svc.list_by_owner(parse_owner_ref(owner_ref))
    return ProductsResponse(products=products)


@router.get("/{product_id}", response_model=ProductDetailEnvelope)
async def get_product(svc: Products, product_id: uuid.UUID):
    """Single listing in any status. Uses Redis cache for performance."""
    product = await svc.get_by_id(product_id)
    return ProductDetailEnvelope(product=product)


@router.put("/{product_id}", response_model=ProductEnvelope)
async def update_product(svc: Products, identity: CurrentIdentity, product_id: uuid.UUID, data: ProductUpdate):
    """Partial update by the seller. Invalidates the cached detail."""
    product = await svc.update(identity, product_id, data)
    return ProductEnvelope(message="Product updated successfully", product=product)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(svc: Products, identity: CurrentIdentity, product_id: uuid.UUID):
    """Soft delete: the listing becomes inactive but stays retrievable by id."""
    await svc.deactivate(identity, product_id)
    return MessageResponse(message="Product deleted successfully")
