from datetime import date
from decimal import Decimal

import pytest

from BasketCheckout.enums import ProductCategory
from BasketCheckout.fixtures import (
    default_discount_promotions,
    default_points_promotions,
    default_products,
)
from BasketCheckout.models import BasketLineItem, DiscountPromotion, PointsPromotion, Product
from BasketCheckout.repository import (
    DiscountPromotionRepository,
    PointsPromotionRepository,
    ProductRepository,
)
from BasketCheckout.service import BasketCalculationService

START = date(2020, 1, 1)
END = date(2020, 12, 31)


def make_product(product_id="PRD01", unit_price="1.20", category=ProductCategory.FUEL, name=None):
    return Product(
        id=product_id,
        name=name or f"Product {product_id}",
        category=category,
        unit_price=Decimal(unit_price),
    )


def make_discount(promotion_id="DP001", percentage="20", product_ids=("PRD01",),
                  start_date=START, end_date=END):
    return DiscountPromotion(
        id=promotion_id,
        name=f"Discount {promotion_id}",
        start_date=start_date,
        end_date=end_date,
        discount_percentage=Decimal(percentage),
        eligible_product_ids=frozenset(product_ids),
    )


def make_points(promotion_id="PP001", points_per_dollar=2, category=None,
                start_date=START, end_date=END):
    return PointsPromotion(
        id=promotion_id,
        name=f"Points {promotion_id}",
        start_date=start_date,
        end_date=end_date,
        category_filter=category,
        points_per_dollar=points_per_dollar,
    )


def line(product, quantity):
    return BasketLineItem(product.id, quantity), product


@pytest.fixture
def basket_service():
    return BasketCalculationService(
        product_source=ProductRepository(default_products()),
        discount_promotion_source=DiscountPromotionRepository(default_discount_promotions()),
        points_promotion_source=PointsPromotionRepository(default_points_promotions()),
    )
