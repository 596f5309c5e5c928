"""
Product repository - the catalog store.
Challenge: filtered/sorted/paginated reads plus proximity search without a
spatial extension; avoid N+1 by eager-loading the seller.
"""

import uuid

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import selectinload

from marketplace.core.geo import bounding_box, haversine_km
from marketplace.db.models.product import Product, ProductStatus
from marketplace.db.repositories.base_repository import BaseRepository

SORT_ORDERS = {
    "price_asc": (Product.price.asc(), Product.created_at.desc()),
    "price_desc": (Product.price.desc(), Product.created_at.desc()),
    "date_asc": (Product.created_at.asc(),),
    "date_desc": (Product.created_at.desc(),),
}


class ProductRepository(BaseRepository[Product]):
    """Product-specific queries. Uses selectinload to avoid N+1 when loading the seller."""

    def __init__(self, session):
        super().__init__(session, Product)

    async def get_by_id_with_seller(self, id: uuid.UUID) -> Product | None:
        result = await self.session.execute(
            select(Product)
            .where(Product.id == id)
            .options(selectinload(Product.seller))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _active_filters(
        category: str | None, min_price: float | None, max_price: float | None
    ) -> list:
        clauses = [Product.status == ProductStatus.ACTIVE.value]
        if category is not None:
            clauses.append(Product.category == category)
        if min_price is not None:
            clauses.append(Product.price >= min_price)
        if max_price is not None:
            clauses.append(Product.price <= max_price)
        return clauses

    async def search(
        self,
        *,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        sort: str = "date_desc",
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Product], int]:
        """Active products matching the filters, one page at a time, plus the total count."""
        clauses = self._active_filters(category, min_price, max_price)
        total = await self.session.scalar(select(func.count()).select_from(Product).where(*clauses))
        result = await self.session.execute(
            select(Product)
            .where(*clauses)
            .options(selectinload(Product.seller))
            .order_by(*SORT_ORDERS[sort], Product.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def search_nearby(
        self,
        *,
        lat: float,
        lng: float,
        radius_km: float,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[Product, float]], int]:
        """
        Active products within radius_km of (lat, lng), nearest first.

        Returns one page of (product, distance_km) pairs and the total number
        of products inside the radius.
        """
        clauses = self._active_filters(category, min_price, max_price)
        min_lat, max_lat, lng_ranges = bounding_box(lat, lng, radius_km)
        clauses.append(Product.latitude.between(min_lat, max_lat))
        if lng_ranges is not None:
            clauses.append(or_(*(and_(Product.longitude >= lo, Product.longitude <= hi) for lo, hi in lng_ranges)))

        result = await self.session.execute(
            select(Product).where(*clauses).options(selectinload(Product.seller))
        )
        within = []
        for product in result.scalars().all():
            distance = haversine_km(lat, lng, product.latitude, product.longitude)
            if distance <= radius_km:
                within.append((product, distance))
        within.sort(key=lambda pair: pair[1])
        return within[skip : skip + limit], len(within)

    async def list_active_by_seller(self, seller_id: uuid.UUID) -> list[Product]:
        """Seller's active listings, newest first."""
        result = await self.session.execute(
            select(Product)
            .where(Product.seller_id == seller_id, Product.status == ProductStatus.ACTIVE.value)
            .options(selectinload(Product.seller))
            .order_by(Product.created_at.desc(), Product.id)
        )
        return list(result.scalars().all())
