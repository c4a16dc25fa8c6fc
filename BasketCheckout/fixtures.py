"""Seed catalog and promotion data.

Each function builds fresh objects so callers never share instances.
"""
from datetime import date
from decimal import Decimal
from typing import List

from BasketCheckout.enums import ProductCategory
from BasketCheckout.models import DiscountPromotion, PointsPromotion, Product


def default_products() -> List[Product]:
    return [
        Product(id="PRD01", name="Vortex 95", category=ProductCategory.FUEL, unit_price=Decimal("1.2")),
        Product(id="PRD02", name="Vortex 98", category=ProductCategory.FUEL, unit_price=Decimal("1.3")),
        Product(id="PRD03", name="Diesel", category=ProductCategory.FUEL, unit_price=Decimal("1.1")),
        Product(id="PRD04", name="Twix 55g", category=ProductCategory.SHOP, unit_price=Decimal("2.3")),
        Product(id="PRD05", name="Mars 72g", category=ProductCategory.SHOP, unit_price=Decimal("5.1")),
        Product(id="PRD06", name="SNICKERS 72G", category=ProductCategory.SHOP, unit_price=Decimal("3.4")),
        Product(id="PRD07", name="Bounty 3 63g", category=ProductCategory.SHOP, unit_price=Decimal("6.9")),
        Product(id="PRD08", name="Snickers 50g", category=ProductCategory.SHOP, unit_price=Decimal("4.0")),
    ]


def default_discount_promotions() -> List[DiscountPromotion]:
    return [
        DiscountPromotion(
            id="DP001", name="Fuel Discount Promo",
            start_date=date(2020, 1, 1), end_date=date(2020, 2, 15),
            discount_percentage=Decimal(20), eligible_product_ids=frozenset({"PRD02"})),
        # No eligible products: active, but discounts nothing
        DiscountPromotion(
            id="DP002", name="Happy Promo",
            start_date=date(2020, 3, 2), end_date=date(2020, 3, 20),
            discount_percentage=Decimal(15)),
    ]


def default_points_promotions() -> List[PointsPromotion]:
    return [
        PointsPromotion(
            id="PP001", name="New Year Promo",
            start_date=date(2020, 1, 1), end_date=date(2020, 1, 30),
            category_filter=None, points_per_dollar=2),
        PointsPromotion(
            id="PP002", name="Fuel Promo",
            start_date=date(2020, 2, 5), end_date=date(2020, 2, 15),
            category_filter=ProductCategory.FUEL, points_per_dollar=3),
        PointsPromotion(
            id="PP003", name="Shop Promo",
            start_date=date(2020, 3, 1), end_date=date(2020, 3, 20),
            category_filter=ProductCategory.SHOP, points_per_dollar=4),
    ]
