"""Product request/response schemas - REST API contract."""

import uuid
from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, field_validator

from marketplace.config import get_settings
from marketplace.db.models.product import ProductStatus
from marketplace.schemas.common import CamelModel

settings = get_settings()

Title = Annotated[str, Field(min_length=1, max_length=100)]
Description = Annotated[str, Field(min_length=1, max_length=1000)]
Price = Annotated[float, Field(ge=0, allow_inf_nan=False)]
Category = Annotated[str, Field(min_length=1, max_length=100)]
Address = Annotated[str, Field(min_length=1, max_length=255)]
Longitude = Annotated[float, Field(ge=-180, le=180)]
Latitude = Annotated[float, Field(ge=-90, le=90)]
# [longitude, latitude], GeoJSON order
Coordinates = tuple[Longitude, Latitude]
ImageUrls = Annotated[list[Annotated[str, Field(min_length=1)]], Field(min_length=1)]
Quantity = Annotated[int, Field(ge=1)]

SortOption = Literal["price_asc", "price_desc", "date_asc", "date_desc"]


class LocationIn(CamelModel):
    coordinates: Coordinates
    address: Address


class LocationPatch(CamelModel):
    coordinates: Coordinates | None = None
    address: Address | None = None

    @field_validator("coordinates", "address")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


class ProductCreate(CamelModel):
    title: Title
    description: Description
    price: Price
    category: Category
    location: LocationIn
    images: ImageUrls
    quantity: Quantity = 1


class ProductUpdate(CamelModel):
    """Partial update. Only fields listed here can change; sellerId and unknown keys are dropped."""

    title: Title | None = None
    description: Description | None = None
    price: Price | None = None
    category: Category | None = None
    location: LocationPatch | None = None
    images: ImageUrls | None = None
    quantity: Quantity | None = None
    status: ProductStatus | None = None

    @field_validator("title", "description", "price", "category", "location", "images", "quantity", "status")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


class ProductFilters(CamelModel):
    """Browse query. Bounds match the query parameters so the service can be called directly."""

    page: int = Field(1, ge=1)
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    category: str | None = None
    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)
    sort: SortOption = "date_desc"
    lat: Latitude | None = None
    lng: Longitude | None = None
    distance: int = Field(settings.default_search_radius_km, ge=1)

    @property
    def is_proximity(self) -> bool:
        return self.lat is not None and self.lng is not None


class LocationOut(CamelModel):
    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float]
    address: str


class SellerSummary(CamelModel):
    id: uuid.UUID
    name: str


class SellerDetail(SellerSummary):
    email: str
    external_identity_id: str


class ProductResponse(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    price: float
    category: str
    location: LocationOut
    images: list[str]
    quantity: int
    status: ProductStatus
    seller_id: SellerSummary
    created_at: datetime
    updated_at: datetime


class ProductDetailResponse(ProductResponse):
    seller_id: SellerDetail


class PageInfo(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class ProductListResponse(CamelModel):
    products: list[ProductResponse]
    pagination: PageInfo


class ProductsResponse(CamelModel):
    products: list[ProductResponse]


class ProductEnvelope(CamelModel):
    message: str
    product: ProductResponse


class ProductDetailEnvelope(CamelModel):
    product: ProductDetailResponse
