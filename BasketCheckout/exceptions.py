"""Error types raised by the basket checkout.

The set is closed: every error carries an ``ErrorKind`` tag and only the data
needed to report it. Callers at the boundary match on ``kind`` rather than on
the class hierarchy.
"""
from typing import Dict, List, Optional, Sequence

from BasketCheckout.enums import ErrorKind


class BasketCheckoutException(Exception):
    """Base exception class for all basket checkout errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BasketCheckoutException):
    """Raised when a request is malformed.

    Attributes:
        errors: Messages grouped by the offending field name
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__("One or more validation errors occurred.")
        self.errors: Dict[str, List[str]] = errors or {}

    @classmethod
    def for_field(cls, field_name: str, message: str) -> "ValidationError":
        return cls({field_name: [message]})


class NotFoundError(BasketCheckoutException):
    """Raised when referenced entities cannot be resolved.

    All unresolved keys are reported at once.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_name: str, keys: Sequence[str]):
        self.entity_name = entity_name
        self.keys: List[str] = list(keys)
        super().__init__(f"{entity_name} with key '{', '.join(self.keys)}' was not found.")


class DomainError(BasketCheckoutException):
    """Raised when a product is covered by more than one active discount promotion.

    This signals corrupt promotion data upstream and is never resolved
    automatically.
    """

    kind = ErrorKind.DOMAIN

    def __init__(self, product_id: str, promotion_ids: Sequence[str]):
        self.product_id = product_id
        self.promotion_ids: List[str] = list(promotion_ids)
        super().__init__(
            f"Product '{product_id}' is covered by multiple active discount promotions: "
            f"{', '.join(self.promotion_ids)}. "
            "Only one discount promotion should be active for a product at any given time."
        )


class ArgumentError(BasketCheckoutException, ValueError):
    """Raised when an entity or computation receives an invalid argument."""

    kind = ErrorKind.ARGUMENT

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message)
        self.argument = argument


class InternalError(BasketCheckoutException):
    """Wraps anything unanticipated. The detail stays server-side."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "An unexpected error occurred. Please try again later."):
        super().__init__(message)
