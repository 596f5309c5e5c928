"""
Product model - a marketplace listing with a point location.
"""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Float, ForeignKey, Index, String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.db.base import Base
from marketplace.db.models.user import utcnow

if TYPE_CHECKING:
    from marketplace.db.models.user import User


class ProductStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    INACTIVE = "inactive"


# Listings are never deleted; "delete" is a transition to INACTIVE.
ALLOWED_TRANSITIONS: dict[ProductStatus, frozenset[ProductStatus]] = {
    ProductStatus.ACTIVE: frozenset({ProductStatus.INACTIVE, ProductStatus.SOLD}),
    ProductStatus.INACTIVE: frozenset({ProductStatus.ACTIVE}),
    ProductStatus.SOLD: frozenset({ProductStatus.INACTIVE}),
}


def can_transition(current: ProductStatus, target: ProductStatus) -> bool:
    return current == target or target in ALLOWED_TRANSITIONS[current]


class Product(Base):
    """Listing entity. Location is stored as separate longitude/latitude columns."""

    __tablename__ = "products"
    __table_args__ = (Index("ix_products_lat_lng", "latitude", "longitude"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False, default=1)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ProductStatus.ACTIVE.value, index=True)
    seller_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    seller: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, title={self.title})>"
