"""Service layer for basket calculation.

This module turns a basket request into a calculation result: it validates
the request, resolves products and active promotions through the injected
sources and delegates the arithmetic to ``BasketCalculator``.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from BasketCheckout.calculator import BasketCalculator
from BasketCheckout.exceptions import NotFoundError, ValidationError
from BasketCheckout.models import BasketLineItem, Product, normalize_id
from BasketCheckout.repository import DiscountPromotionSource, PointsPromotionSource, ProductSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasketItem:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class CalculateBasketCommand:
    """A request to price a basket.

    Attributes:
        customer_id: Customer the basket belongs to
        loyalty_card: Loyalty card number, None or blank for guests
        transaction_date: Date promotions are evaluated on
        basket: Purchased items
    """
    customer_id: UUID
    loyalty_card: Optional[str]
    transaction_date: date
    basket: List[BasketItem]


@dataclass(frozen=True)
class CalculateBasketResult:
    customer_id: UUID
    loyalty_card: Optional[str]
    transaction_date: date
    total_amount: Decimal
    discount_applied: Decimal
    grand_total: Decimal
    points_earned: int


def has_loyalty_card(loyalty_card: Optional[str]) -> bool:
    return loyalty_card is not None and loyalty_card.strip() != ""


class BasketCalculationService:
    """Orchestrates product and promotion lookups for a basket calculation."""

    def __init__(self,
                 product_source: ProductSource,
                 discount_promotion_source: DiscountPromotionSource,
                 points_promotion_source: PointsPromotionSource,
                 calculator: Optional[BasketCalculator] = None,
                 timeout: Optional[float] = None):
        """Initialize the service with its data sources.

        Args:
            product_source: Resolves products by id
            discount_promotion_source: Lists discount promotions active on a date
            points_promotion_source: Finds the points promotion active on a date
            calculator: Pricing engine, a fresh ``BasketCalculator`` by default
            timeout: Default number of seconds allowed for the lookups
        """
        self._product_source = product_source
        self._discount_promotion_source = discount_promotion_source
        self._points_promotion_source = points_promotion_source
        self._calculator = calculator or BasketCalculator()
        self._timeout = timeout

    async def calculate_basket(
            self,
            command: CalculateBasketCommand,
            timeout: Optional[float] = None) -> CalculateBasketResult:
        """Calculate totals, discount and loyalty points for a basket.

        The three lookups run concurrently and must all succeed before the
        calculation runs; there is no partial result.

        Args:
            command: The basket request
            timeout: Seconds allowed for the lookups, overriding the default

        Returns:
            CalculateBasketResult: The totals echoed with the request's customer data

        Raises:
            ValidationError: If the request is malformed
            NotFoundError: If any product cannot be resolved, listing all of them
            DomainError: If a product is covered by overlapping discounts
            asyncio.TimeoutError: If the lookups do not finish in time
        """
        request_name = type(command).__name__
        logger.info("Handling %s", request_name)
        started = time.perf_counter()
        try:
            result = await self._handle(command, timeout if timeout is not None else self._timeout)
        except Exception:
            logger.error("Request %s failed after %dms", request_name, _elapsed_ms(started))
            raise
        logger.info("Handled %s in %dms", request_name, _elapsed_ms(started))
        return result

    async def _handle(self, command: CalculateBasketCommand,
                      timeout: Optional[float]) -> CalculateBasketResult:
        self._validate_command(command)

        product_ids = _distinct_ids(item.product_id for item in command.basket)

        products, active_discounts, active_points_promotion = await asyncio.wait_for(
            asyncio.gather(
                self._product_source.get_by_ids(set(product_ids)),
                self._discount_promotion_source.get_active_on_date(command.transaction_date),
                self._points_promotion_source.get_active_on_date(command.transaction_date),
            ),
            timeout=timeout,
        )

        products_by_key = {normalize_id(product_id): product for product_id, product in products.items()}
        missing_ids = [
            product_id for product_id in product_ids
            if normalize_id(product_id) not in products_by_key
        ]
        if missing_ids:
            raise NotFoundError("Product", missing_ids)

        line_items: List[Tuple[BasketLineItem, Product]] = [
            (BasketLineItem(item.product_id, item.quantity), products_by_key[normalize_id(item.product_id)])
            for item in command.basket
        ]

        result = self._calculator.calculate(
            line_items,
            active_discounts,
            active_points_promotion,
            has_loyalty_card(command.loyalty_card),
        )

        return CalculateBasketResult(
            customer_id=command.customer_id,
            loyalty_card=command.loyalty_card,
            transaction_date=command.transaction_date,
            total_amount=result.total_amount,
            discount_applied=result.discount_applied,
            grand_total=result.grand_total,
            points_earned=result.points_earned,
        )

    @staticmethod
    def _validate_command(command: CalculateBasketCommand) -> None:
        """Collect every problem with the request and raise them together.

        Raises:
            ValidationError: If any field is missing or invalid
        """
        errors: Dict[str, List[str]] = {}

        if command.customer_id is None or command.customer_id.int == 0:
            errors.setdefault("CustomerId", []).append("Customer ID is required.")
        if command.transaction_date is None:
            errors.setdefault("TransactionDate", []).append("Transaction date is required.")

        if command.basket is None:
            errors.setdefault("Basket", []).append("Basket is required.")
        elif len(command.basket) == 0:
            errors.setdefault("Basket", []).append("Basket cannot be empty.")
        else:
            for index, item in enumerate(command.basket):
                if item.product_id is None or not item.product_id.strip():
                    errors.setdefault(f"Basket[{index}].ProductId", []).append("Product ID is required.")
                if item.quantity is None or item.quantity <= 0:
                    errors.setdefault(f"Basket[{index}].Quantity", []).append(
                        "Quantity must be greater than zero.")

        if errors:
            raise ValidationError(errors)


def _distinct_ids(product_ids) -> List[str]:
    """De-duplicate ids case-insensitively, keeping the first spelling and order."""
    seen: Dict[str, str] = {}
    for product_id in product_ids:
        seen.setdefault(normalize_id(product_id), product_id)
    return list(seen.values())


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
