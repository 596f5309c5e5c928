"""ORM models - relationship loading and the listing status machine."""

import pytest

from marketplace.db.base import Base
from marketplace.db.models import Product, User
from marketplace.db.models.product import ProductStatus, can_transition


def test_relationships_use_supported_loader_strategies():
    lazies = {
        (mapper.class_.__name__, rel.key): rel.lazy
        for mapper in Base.registry.mappers
        for rel in mapper.relationships
    }
    assert "noload" not in lazies.values()
    assert ("Product", "seller") in lazies
    assert "products" not in User.__mapper__.relationships
    assert Product.__mapper__.relationships["seller"].mapper.class_ is User


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (ProductStatus.ACTIVE, ProductStatus.SOLD, True),
        (ProductStatus.ACTIVE, ProductStatus.INACTIVE, True),
        (ProductStatus.INACTIVE, ProductStatus.ACTIVE, True),
        (ProductStatus.SOLD, ProductStatus.INACTIVE, True),
        (ProductStatus.SOLD, ProductStatus.ACTIVE, False),
        (ProductStatus.INACTIVE, ProductStatus.SOLD, False),
        (ProductStatus.SOLD, ProductStatus.SOLD, True),
    ],
)
def test_status_transitions(current, target, allowed):
    assert can_transition(current, target) is allowed
