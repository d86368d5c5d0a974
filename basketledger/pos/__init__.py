"""Point-of-sale domain: products, baskets, positions and the basket engine."""

from .engine import POSITIONS_TAG, PRODUCT_TAG, BasketEngine, ListingMetrics, basket_total
from .models import (
    BASKET,
    POSITION,
    PRODUCT,
    Basket,
    BasketSummary,
    BasketView,
    Position,
    PositionView,
    Product,
    ProductView,
)

__all__ = [
    "BASKET",
    "POSITION",
    "PRODUCT",
    "POSITIONS_TAG",
    "PRODUCT_TAG",
    "Basket",
    "BasketEngine",
    "BasketSummary",
    "BasketView",
    "ListingMetrics",
    "Position",
    "PositionView",
    "Product",
    "ProductView",
    "basket_total",
]
