"""Data models for the basket checkout.

This module defines the catalog and promotion entities, the basket line item
value object and the calculation result. All of them validate on construction
and are immutable afterwards.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_EVEN
from typing import FrozenSet, Iterable, Optional, Union

from BasketCheckout.enums import ProductCategory
from BasketCheckout.exceptions import ArgumentError

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")


def normalize_id(value: str) -> str:
    """Return the lookup key for a case-insensitive identifier."""
    return value.lower()


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round a monetary value to 2 decimal places (banker's rounding)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_EVEN)


def to_date(value: Union[date, datetime]) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def _require_text(value: Optional[str], argument: str, message: str) -> None:
    if value is None or not value.strip():
        raise ArgumentError(message, argument=argument)


@dataclass(frozen=True)
class Product:
    """A product available for purchase.

    Attributes:
        id: Unique identifier, compared case-insensitively
        name: Display name
        category: Product category (Fuel or Shop)
        unit_price: Price of a single unit
    """
    id: str
    name: str
    category: ProductCategory
    unit_price: Decimal

    def __post_init__(self):
        _require_text(self.id, "id", "Product ID cannot be empty.")
        _require_text(self.name, "name", "Product name cannot be empty.")
        unit_price = to_decimal(self.unit_price)
        if unit_price < 0:
            raise ArgumentError("Unit price cannot be negative.", argument="unit_price")
        object.__setattr__(self, "unit_price", unit_price)
        object.__setattr__(self, "category", ProductCategory(self.category))

    @property
    def key(self) -> str:
        return normalize_id(self.id)

    def calculate_line_total(self, quantity: int) -> Decimal:
        if quantity < 0:
            raise ArgumentError("Quantity cannot be negative.", argument="quantity")
        return self.unit_price * quantity

    def belongs_to_category(self, category: ProductCategory) -> bool:
        return self.category == category


@dataclass(frozen=True)
class DiscountPromotion:
    """A time-bounded percentage discount on an explicit set of products.

    Dates are date-only; any time component passed in is discarded. An empty
    ``eligible_product_ids`` set means the promotion discounts nothing.

    Attributes:
        id: Promotion identifier
        name: Display name
        start_date: First day the promotion is active
        end_date: Last day the promotion is active (inclusive)
        discount_percentage: Percentage off the line total, 0-100
        eligible_product_ids: Normalized ids of the discounted products
    """
    id: str
    name: str
    start_date: date
    end_date: date
    discount_percentage: Decimal
    eligible_product_ids: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        _require_text(self.id, "id", "Promotion ID cannot be empty.")
        _require_text(self.name, "name", "Promotion name cannot be empty.")

        start_date, end_date = to_date(self.start_date), to_date(self.end_date)
        if end_date < start_date:
            raise ArgumentError("End date cannot be before start date.", argument="end_date")
        if isinstance(self.eligible_product_ids, str):
            raise ArgumentError(
                "Eligible product ids must be a collection, not a single string.",
                argument="eligible_product_ids",
            )

        percentage = to_decimal(self.discount_percentage)
        if percentage < 0 or percentage > 100:
            raise ArgumentError(
                "Discount percentage must be between 0 and 100.", argument="discount_percentage"
            )

        object.__setattr__(self, "start_date", start_date)
        object.__setattr__(self, "end_date", end_date)
        object.__setattr__(self, "discount_percentage", percentage)
        object.__setattr__(
            self, "eligible_product_ids", _normalize_ids(self.eligible_product_ids or ())
        )

    def is_active_on(self, on_date: Union[date, datetime]) -> bool:
        return self.start_date <= to_date(on_date) <= self.end_date

    def applies_to_product(self, product_id: str) -> bool:
        return normalize_id(product_id) in self.eligible_product_ids

    def calculate_discount(self, line_total: Decimal) -> Decimal:
        """Return the discount for a line, rounded to cents.

        Raises:
            ArgumentError: If the line total is negative
        """
        if line_total < 0:
            raise ArgumentError("Line total cannot be negative.", argument="line_total")
        return round_money(line_total * (self.discount_percentage / 100))


def _normalize_ids(product_ids: Iterable[str]) -> FrozenSet[str]:
    return frozenset(normalize_id(product_id) for product_id in product_ids)


@dataclass(frozen=True)
class PointsPromotion:
    """A time-bounded rule awarding loyalty points per dollar spent.

    Attributes:
        id: Promotion identifier
        name: Display name
        start_date: First day the promotion is active
        end_date: Last day the promotion is active (inclusive)
        category_filter: Category that earns points, None for any category
        points_per_dollar: Whole points awarded per currency unit
    """
    id: str
    name: str
    start_date: date
    end_date: date
    category_filter: Optional[ProductCategory]
    points_per_dollar: int

    def __post_init__(self):
        _require_text(self.id, "id", "Promotion ID cannot be empty.")
        _require_text(self.name, "name", "Promotion name cannot be empty.")

        start_date, end_date = to_date(self.start_date), to_date(self.end_date)
        if end_date < start_date:
            raise ArgumentError("End date cannot be before start date.", argument="end_date")
        if isinstance(self.points_per_dollar, bool) or not isinstance(self.points_per_dollar, int):
            raise ArgumentError("Points per dollar must be a whole number.", argument="points_per_dollar")
        if self.points_per_dollar < 0:
            raise ArgumentError("Points per dollar cannot be negative.", argument="points_per_dollar")

        object.__setattr__(self, "start_date", start_date)
        object.__setattr__(self, "end_date", end_date)
        if self.category_filter is not None:
            object.__setattr__(self, "category_filter", ProductCategory(self.category_filter))

    def is_active_on(self, on_date: Union[date, datetime]) -> bool:
        return self.start_date <= to_date(on_date) <= self.end_date

    def applies_to_category(self, category: ProductCategory) -> bool:
        # None means "Any"
        return self.category_filter is None or self.category_filter == category

    def calculate_points(self, amount: Decimal) -> int:
        """Return the points earned for a qualifying amount, floored.

        Raises:
            ArgumentError: If the amount is negative
        """
        if amount < 0:
            raise ArgumentError("Amount cannot be negative.", argument="amount")
        return math.floor(to_decimal(amount) * self.points_per_dollar)


@dataclass(frozen=True)
class BasketLineItem:
    """A product id and quantity in a basket."""
    product_id: str
    quantity: int

    def __post_init__(self):
        _require_text(self.product_id, "product_id", "Product ID cannot be empty.")
        if self.quantity <= 0:
            raise ArgumentError("Quantity must be greater than zero.", argument="quantity")


@dataclass(frozen=True)
class BasketCalculationResult:
    """Totals computed for a basket.

    Monetary values are rounded to cents when the result is built and the
    grand total is the difference of the rounded values.

    Attributes:
        total_amount: Total before any discounts
        discount_applied: Sum of the per-line discounts
        points_earned: Loyalty points earned (0 without a loyalty card)
        grand_total: ``total_amount - discount_applied``
    """
    total_amount: Decimal
    discount_applied: Decimal
    points_earned: int
    grand_total: Decimal = field(init=False)

    def __post_init__(self):
        total_amount = to_decimal(self.total_amount)
        discount_applied = to_decimal(self.discount_applied)

        if total_amount < 0:
            raise ArgumentError("Total amount cannot be negative.", argument="total_amount")
        if discount_applied < 0:
            raise ArgumentError("Discount applied cannot be negative.", argument="discount_applied")
        if self.points_earned < 0:
            raise ArgumentError("Points earned cannot be negative.", argument="points_earned")

        # Bound is checked on cent values
        total_amount, discount_applied = round_money(total_amount), round_money(discount_applied)
        if discount_applied > total_amount:
            raise ArgumentError("Discount cannot exceed total amount.", argument="discount_applied")
        object.__setattr__(self, "total_amount", total_amount)
        object.__setattr__(self, "discount_applied", discount_applied)
        object.__setattr__(self, "grand_total", total_amount - discount_applied)
