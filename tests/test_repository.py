"""Tests for the in-memory product and promotion repositories."""

from datetime import date

import pytest

from BasketCheckout.enums import ProductCategory
from BasketCheckout.fixtures import (
    default_discount_promotions,
    default_points_promotions,
    default_products,
)
from BasketCheckout.repository import (
    DiscountPromotionRepository,
    PointsPromotionRepository,
    ProductRepository,
)

from conftest import make_discount, make_points


class TestProductRepository:
    @pytest.mark.asyncio
    async def test_lookup_is_case_insensitive_and_keyed_by_requested_id(self):
        repository = ProductRepository(default_products())

        products = await repository.get_by_ids({"prd01", "PRD02"})

        assert set(products) == {"prd01", "PRD02"}
        assert products["prd01"].id == "PRD01"
        assert products["PRD02"].category == ProductCategory.FUEL

    @pytest.mark.asyncio
    async def test_unknown_ids_are_absent(self):
        repository = ProductRepository(default_products())

        products = await repository.get_by_ids({"PRD01", "PRD90"})

        assert set(products) == {"PRD01"}

    @pytest.mark.asyncio
    async def test_empty_repository(self):
        assert await ProductRepository().get_by_ids({"PRD01"}) == {}


class TestDiscountPromotionRepository:
    @pytest.mark.asyncio
    async def test_returns_promotions_active_on_date(self):
        repository = DiscountPromotionRepository([
            make_discount("DP001", start_date=date(2020, 1, 1), end_date=date(2020, 1, 31)),
            make_discount("DP002", start_date=date(2020, 2, 1), end_date=date(2020, 2, 29)),
        ])

        active = await repository.get_active_on_date(date(2020, 1, 31))

        assert [promotion.id for promotion in active] == ["DP001"]

    @pytest.mark.asyncio
    async def test_no_active_promotions(self):
        repository = DiscountPromotionRepository(default_discount_promotions())
        assert await repository.get_active_on_date(date(1999, 1, 1)) == []


class TestPointsPromotionRepository:
    @pytest.mark.asyncio
    async def test_returns_first_active_promotion(self):
        repository = PointsPromotionRepository([
            make_points("PP001", start_date=date(2020, 1, 1), end_date=date(2020, 1, 31)),
            make_points("PP002", start_date=date(2020, 1, 15), end_date=date(2020, 2, 15)),
        ])

        promotion = await repository.get_active_on_date(date(2020, 1, 20))

        assert promotion.id == "PP001"

    @pytest.mark.asyncio
    async def test_none_when_nothing_active(self):
        repository = PointsPromotionRepository(default_points_promotions())
        assert await repository.get_active_on_date(date(1999, 1, 1)) is None
