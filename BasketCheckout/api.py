"""HTTP surface for the basket calculation.

Exposes ``POST /api/basket/calculate``. Request and response bodies use the
PascalCase field names of the public contract; errors are returned as
``{"type", "message", "errors"}``.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from BasketCheckout.config import Settings, configure_logging, load_settings
from BasketCheckout.enums import ErrorKind
from BasketCheckout.exceptions import BasketCheckoutException, InternalError, ValidationError
from BasketCheckout.main import BasketCheckoutFactory
from BasketCheckout.service import (
    BasketCalculationService,
    BasketItem,
    CalculateBasketCommand,
    CalculateBasketResult,
)

logger = logging.getLogger(__name__)

DATE_FORMAT_DISPLAY = "dd-MMM-yyyy"
DATE_EXAMPLE = "10-Jan-2020"

Money = Annotated[Decimal, PlainSerializer(float, return_type=float)]


class BasketItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="ProductId")
    quantity: int = Field(alias="Quantity")


class CalculateBasketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: UUID = Field(alias="CustomerId")
    loyalty_card: Optional[str] = Field(default=None, alias="LoyaltyCard")
    transaction_date: str = Field(alias="TransactionDate")
    basket: List[BasketItemRequest] = Field(alias="Basket")


class CalculateBasketResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: UUID = Field(alias="CustomerId")
    loyalty_card: Optional[str] = Field(default=None, alias="LoyaltyCard")
    transaction_date: str = Field(alias="TransactionDate")
    total_amount: Money = Field(alias="TotalAmount")
    discount_applied: Money = Field(alias="DiscountApplied")
    grand_total: Money = Field(alias="GrandTotal")
    points_earned: int = Field(alias="PointsEarned")

    @classmethod
    def from_result(cls, result: CalculateBasketResult, date_format: str) -> "CalculateBasketResponse":
        return cls(
            customer_id=result.customer_id,
            loyalty_card=result.loyalty_card,
            transaction_date=result.transaction_date.strftime(date_format),
            total_amount=result.total_amount,
            discount_applied=result.discount_applied,
            grand_total=result.grand_total,
            points_earned=result.points_earned,
        )


class ErrorResponse(BaseModel):
    type: str
    message: str
    errors: Optional[Dict[str, List[str]]] = None


def error_response(error: BasketCheckoutException) -> Tuple[int, ErrorResponse]:
    """Map a checkout error to its HTTP status and body."""
    match error.kind:
        case ErrorKind.VALIDATION:
            return 400, ErrorResponse(type=error.kind.value, message=error.message, errors=error.errors)
        case ErrorKind.NOT_FOUND | ErrorKind.DOMAIN | ErrorKind.ARGUMENT:
            return 400, ErrorResponse(type=error.kind.value, message=error.message)
        case _:
            return 500, ErrorResponse(type=ErrorKind.INTERNAL.value, message=InternalError().message)


def _json_error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _describe_request_errors(exc: RequestValidationError) -> str:
    errors = exc.errors()
    missing = [str(error["loc"][-1]) for error in errors if error.get("type") == "missing"]
    if missing:
        return f"Missing required field(s): {', '.join(missing)}"
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Invalid request format: body is not valid JSON."
    return "Invalid value type in request. Please check the data types of your fields."


def parse_transaction_date(value: str, date_format: str):
    try:
        return datetime.strptime(value, date_format).date()
    except (TypeError, ValueError):
        raise ValidationError.for_field(
            "TransactionDate",
            f"Invalid date format. Expected format: {DATE_FORMAT_DISPLAY} (e.g., {DATE_EXAMPLE})",
        ) from None


def create_app(service: Optional[BasketCalculationService] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: Calculation service to use, built from the seed data when omitted
        settings: Settings to use, loaded from the environment when omitted
    """
    settings = settings or load_settings()
    configure_logging(settings)
    if service is None:
        service = BasketCheckoutFactory(settings=settings).setup()

    app = FastAPI(title="Basket Checkout")

    @app.exception_handler(BasketCheckoutException)
    async def handle_checkout_error(request: Request, exc: BasketCheckoutException) -> JSONResponse:
        status_code, body = error_response(exc)
        if status_code >= 500:
            logger.error("Unhandled exception occurred: %s", exc.message)
        else:
            logger.warning("Request failed with %d: %s", status_code, exc.message)
        return _json_error(status_code, body)

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        body = ErrorResponse(type="BadRequestError", message=_describe_request_errors(exc))
        logger.warning("Request failed with 400: %s", body.message)
        return _json_error(400, body)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/basket/calculate", response_model=CalculateBasketResponse, tags=["Basket"])
    async def calculate_basket(request: CalculateBasketRequest) -> CalculateBasketResponse:
        """Calculate basket totals including discounts and loyalty points."""
        command = CalculateBasketCommand(
            customer_id=request.customer_id,
            loyalty_card=request.loyalty_card,
            transaction_date=parse_transaction_date(request.transaction_date, settings.date_format),
            basket=[BasketItem(product_id=item.product_id, quantity=item.quantity)
                    for item in request.basket],
        )
        try:
            result = await service.calculate_basket(command, timeout=settings.request_timeout_seconds)
        except BasketCheckoutException:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure calculating basket for %s", request.customer_id)
            raise InternalError() from exc
        return CalculateBasketResponse.from_result(result, settings.date_format)

    return app
