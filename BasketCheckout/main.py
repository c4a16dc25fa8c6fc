import asyncio
import uuid
from datetime import date
from typing import Optional

from BasketCheckout.calculator import BasketCalculator
from BasketCheckout.config import Settings, configure_logging, load_settings
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
from BasketCheckout.service import BasketCalculationService, BasketItem, CalculateBasketCommand


class BasketCheckoutFactory:

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()

    def setup(self) -> BasketCalculationService:

        # catalog and promotions
        product_repository = ProductRepository(default_products())
        discount_promotion_repository = DiscountPromotionRepository(default_discount_promotions())
        points_promotion_repository = PointsPromotionRepository(default_points_promotions())

        return BasketCalculationService(
            product_source=product_repository,
            discount_promotion_source=discount_promotion_repository,
            points_promotion_source=points_promotion_repository,
            calculator=BasketCalculator(),
            timeout=self.settings.request_timeout_seconds,
        )


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings)
    basket_service = BasketCheckoutFactory(settings=settings).setup()

    command = CalculateBasketCommand(
        customer_id=uuid.UUID("8e4e8991-aaee-495b-9f24-52d5d0e509c5"),
        loyalty_card="CTX0000001",
        transaction_date=date(2020, 1, 10),
        basket=[
            BasketItem(product_id="PRD01", quantity=3),
            BasketItem(product_id="PRD02", quantity=10),
        ],
    )

    result = asyncio.run(basket_service.calculate_basket(command))

    print(f"Total Amount: {result.total_amount}")
    print(f"Discount Applied: {result.discount_applied}")
    print(f"Grand Total: {result.grand_total}")
    print(f"Points Earned: {result.points_earned}")
