"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from BasketCheckout.api import create_app, error_response
from BasketCheckout.config import Settings
from BasketCheckout.exceptions import (
    ArgumentError,
    DomainError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from BasketCheckout.main import BasketCheckoutFactory
from BasketCheckout.repository import (
    DiscountPromotionRepository,
    PointsPromotionRepository,
    ProductRepository,
)
from BasketCheckout.fixtures import default_products
from BasketCheckout.service import BasketCalculationService

from conftest import make_discount

CUSTOMER_ID = "8e4e8991-aaee-495b-9f24-52d5d0e509c5"


def _payload(**overrides):
    payload = {
        "CustomerId": CUSTOMER_ID,
        "LoyaltyCard": "CTX0000001",
        "TransactionDate": "10-Jan-2020",
        "Basket": [
            {"ProductId": "PRD01", "Quantity": 3},
            {"ProductId": "PRD02", "Quantity": 10},
        ],
    }
    payload.update(overrides)
    return payload


class BrokenProductSource:
    async def get_by_ids(self, product_ids):
        raise RuntimeError("catalog connection reset")


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def client(settings):
    app = create_app(service=BasketCheckoutFactory(settings=settings).setup(), settings=settings)
    return TestClient(app)


def test_calculate_sample_basket(client):
    response = client.post("/api/basket/calculate", json=_payload())

    assert response.status_code == 200
    assert response.json() == {
        "CustomerId": CUSTOMER_ID,
        "LoyaltyCard": "CTX0000001",
        "TransactionDate": "10-Jan-2020",
        "TotalAmount": 16.6,
        "DiscountApplied": 2.6,
        "GrandTotal": 14.0,
        "PointsEarned": 28,
    }


def test_guest_earns_no_points(client):
    response = client.post("/api/basket/calculate", json=_payload(LoyaltyCard=None))

    assert response.status_code == 200
    body = response.json()
    assert body["LoyaltyCard"] is None
    assert body["PointsEarned"] == 0


def test_invalid_date_format(client):
    response = client.post("/api/basket/calculate", json=_payload(TransactionDate="2020-01-10"))

    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "ValidationError"
    assert body["errors"] == {
        "TransactionDate": ["Invalid date format. Expected format: dd-MMM-yyyy (e.g., 10-Jan-2020)"]
    }


def test_unknown_products_listed(client):
    payload = _payload(Basket=[{"ProductId": "PRD90", "Quantity": 1}, {"ProductId": "PRD91", "Quantity": 1}])

    response = client.post("/api/basket/calculate", json=payload)

    assert response.status_code == 400
    assert response.json() == {
        "type": "NotFoundError",
        "message": "Product with key 'PRD90, PRD91' was not found.",
    }


def test_empty_basket(client):
    response = client.post("/api/basket/calculate", json=_payload(Basket=[]))

    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "ValidationError"
    assert body["errors"]["Basket"] == ["Basket cannot be empty."]


def test_missing_field(client):
    payload = _payload()
    del payload["Basket"][0]["ProductId"]

    response = client.post("/api/basket/calculate", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "BadRequestError"
    assert "ProductId" in body["message"]
    assert "errors" not in body


def test_overlapping_discounts(settings):
    service = BasketCalculationService(
        product_source=ProductRepository(default_products()),
        discount_promotion_source=DiscountPromotionRepository([
            make_discount("DP001", "20", ("PRD02",)),
            make_discount("DP003", "5", ("PRD02",)),
        ]),
        points_promotion_source=PointsPromotionRepository(),
    )
    client = TestClient(create_app(service=service, settings=settings))

    response = client.post("/api/basket/calculate", json=_payload())

    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "DomainError"
    assert "PRD02" in body["message"]


def test_unexpected_failure_hides_detail(settings):
    service = BasketCalculationService(
        product_source=BrokenProductSource(),
        discount_promotion_source=DiscountPromotionRepository(),
        points_promotion_source=PointsPromotionRepository(),
    )
    client = TestClient(create_app(service=service, settings=settings))

    response = client.post("/api/basket/calculate", json=_payload())

    assert response.status_code == 500
    assert response.json() == {
        "type": "InternalError",
        "message": "An unexpected error occurred. Please try again later.",
    }


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("error, status_code, error_type", [
    (ValidationError.for_field("Basket", "Basket is required."), 400, "ValidationError"),
    (NotFoundError("Product", ["PRD90"]), 400, "NotFoundError"),
    (DomainError("PRD01", ["DP001", "DP002"]), 400, "DomainError"),
    (ArgumentError("Quantity cannot be negative.", argument="quantity"), 400, "ArgumentError"),
    (InternalError(), 500, "InternalError"),
])
def test_error_response_mapping(error, status_code, error_type):
    status, body = error_response(error)

    assert status == status_code
    assert body.type == error_type
    if error_type == "ValidationError":
        assert body.errors == {"Basket": ["Basket is required."]}
    else:
        assert body.errors is None


def test_create_app_configures_logging_and_default_service(monkeypatch):
    configured = []
    monkeypatch.setattr("BasketCheckout.api.configure_logging", configured.append)
    settings = Settings(log_level="DEBUG")

    client = TestClient(create_app(settings=settings))
    response = client.post("/api/basket/calculate", json=_payload())

    assert configured == [settings]
    assert response.status_code == 200
    assert response.json()["GrandTotal"] == 14.0
