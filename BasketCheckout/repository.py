"""Repository module for product and promotion lookups.

The ``*Source`` protocols are the capabilities the calculation service depends
on. The in-memory repositories implement them over data handed to their
constructor, so every instance owns its own copy and tests share no state.
"""
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Set

from BasketCheckout.models import DiscountPromotion, PointsPromotion, Product, normalize_id


class ProductSource(Protocol):

    async def get_by_ids(self, product_ids: Set[str]) -> Mapping[str, Product]:
        """Return the products that could be resolved. Missing ids are absent."""
        ...


class DiscountPromotionSource(Protocol):

    async def get_active_on_date(self, on_date: date) -> List[DiscountPromotion]:
        ...


class PointsPromotionSource(Protocol):

    async def get_active_on_date(self, on_date: date) -> Optional[PointsPromotion]:
        """Return the active points promotion. At most one is active on any date."""
        ...


class ProductRepository:
    """In-memory product catalog keyed by normalized product id."""

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._products: Dict[str, Product] = {}
        for product in products or ():
            self._products[product.key] = product

    async def get_by_ids(self, product_ids: Set[str]) -> Dict[str, Product]:
        return {
            product_id: self._products[normalize_id(product_id)]
            for product_id in product_ids
            if normalize_id(product_id) in self._products
        }


class DiscountPromotionRepository:
    """In-memory store of discount promotions."""

    def __init__(self, promotions: Optional[Iterable[DiscountPromotion]] = None):
        self._promotions: List[DiscountPromotion] = list(promotions or ())

    async def get_active_on_date(self, on_date: date) -> List[DiscountPromotion]:
        return [promotion for promotion in self._promotions if promotion.is_active_on(on_date)]


class PointsPromotionRepository:
    """In-memory store of points promotions."""

    def __init__(self, promotions: Optional[Iterable[PointsPromotion]] = None):
        self._promotions: List[PointsPromotion] = list(promotions or ())

    async def get_active_on_date(self, on_date: date) -> Optional[PointsPromotion]:
        # Promotion data guarantees a single active points promotion per date
        return next(
            (promotion for promotion in self._promotions if promotion.is_active_on(on_date)),
            None,
        )
