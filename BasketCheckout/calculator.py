"""Basket pricing and loyalty calculation.

``BasketCalculator`` is pure: it performs no I/O, holds no state and never
awaits, so a single instance can be shared across concurrent requests.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from BasketCheckout.exceptions import ArgumentError, DomainError
from BasketCheckout.models import (
    BasketCalculationResult,
    BasketLineItem,
    DiscountPromotion,
    PointsPromotion,
    Product,
)

logger = logging.getLogger(__name__)

LineItems = Sequence[Tuple[BasketLineItem, Product]]


class BasketCalculator:
    """Computes totals, discounts and points for a resolved basket."""

    def calculate(
            self,
            line_items: LineItems,
            active_discounts: Sequence[DiscountPromotion],
            active_points_promotion: Optional[PointsPromotion],
            has_loyalty_card: bool) -> BasketCalculationResult:
        """Calculate the basket result.

        Each line's discount is rounded to cents before it is added to the
        running discount; the totals themselves are rounded once, when the
        result is built. Points are earned on the post-discount amount of the
        lines whose category the points promotion covers.

        Args:
            line_items: Basket line items paired with their resolved products
            active_discounts: Discount promotions active on the transaction date
            active_points_promotion: Points promotion active on the date, if any
            has_loyalty_card: Whether the customer presented a loyalty card

        Returns:
            BasketCalculationResult: The rounded totals and points earned

        Raises:
            ArgumentError: If the basket is missing or empty
            DomainError: If a product is covered by more than one active discount
        """
        if line_items is None:
            raise ArgumentError("lineItems required", argument="line_items")
        if active_discounts is None:
            raise ArgumentError("activeDiscounts required", argument="active_discounts")
        if len(line_items) == 0:
            raise ArgumentError("Basket cannot be empty.", argument="line_items")

        applicable_discounts = self._validate_no_overlapping_discounts(line_items, active_discounts)

        total_amount = Decimal(0)
        total_discount = Decimal(0)
        points_qualifying_amount = Decimal(0)

        for line_item, product in line_items:
            line_total = product.calculate_line_total(line_item.quantity)
            total_amount += line_total

            discount = applicable_discounts[line_item.product_id]
            line_discount = discount.calculate_discount(line_total) if discount else Decimal(0)
            total_discount += line_discount

            if active_points_promotion is not None \
                    and active_points_promotion.applies_to_category(product.category):
                points_qualifying_amount += line_total - line_discount

            logger.debug(
                "Line %s x%s: total=%s discount=%s promotion=%s",
                product.id, line_item.quantity, line_total, line_discount,
                discount.id if discount else None)

        points_earned = 0
        if has_loyalty_card and active_points_promotion is not None:
            points_earned = active_points_promotion.calculate_points(points_qualifying_amount)

        return BasketCalculationResult(
            total_amount=total_amount,
            discount_applied=total_discount,
            points_earned=points_earned,
        )

    @staticmethod
    def _validate_no_overlapping_discounts(
            line_items: LineItems,
            active_discounts: Sequence[DiscountPromotion]) -> dict:
        """Map each line's product id to its single applicable discount (or None).

        Raises:
            DomainError: If more than one active promotion lists the same product
        """
        applicable = {}
        for line_item, _ in line_items:
            matches: List[DiscountPromotion] = [
                promotion for promotion in active_discounts
                if promotion.applies_to_product(line_item.product_id)
            ]
            if len(matches) > 1:
                raise DomainError(
                    product_id=line_item.product_id,
                    promotion_ids=[promotion.id for promotion in matches],
                )
            applicable[line_item.product_id] = matches[0] if matches else None
        return applicable
