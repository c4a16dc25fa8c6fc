from enum import Enum


class ProductCategory(str, Enum):
    FUEL = "Fuel"
    SHOP = "Shop"


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFoundError"
    DOMAIN = "DomainError"
    ARGUMENT = "ArgumentError"
    INTERNAL = "InternalError"
