"""Storefront error taxonomy.

Every failure surfaced to a caller carries a machine-readable ``kind``, a
human-readable message and a ``retryable`` flag. Only store-level failures
(``StoreUnavailable``, ``StockConflict``) are worth retrying unchanged.
"""

from typing import Any


class StorefrontError(Exception):
    kind = "StorefrontError"
    status_code = 400
    retryable = False

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.kind,
            "message": self.message,
            "retryable": self.retryable,
            **self.details,
        }


class NotFound(StorefrontError):
    kind = "NotFound"
    status_code = 404


class InvalidInput(StorefrontError):
    kind = "InvalidInput"
    status_code = 400


class InsufficientStock(StorefrontError):
    """Requested quantity exceeds the product's remaining units.

    ``available_stock`` is always reported; ``current_cart_quantity`` is added
    when the check happens while adding to a cart.
    """

    kind = "InsufficientStock"
    status_code = 400

    def __init__(self, message: str, available_stock: int, **details: Any) -> None:
        super().__init__(message, available_stock=available_stock, **details)
        self.available_stock = available_stock


class InvalidTransition(StorefrontError):
    kind = "InvalidTransition"
    status_code = 409


class Unauthorized(StorefrontError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(Unauthorized):
    kind = "Forbidden"
    status_code = 403


class StoreUnavailable(StorefrontError):
    kind = "StoreUnavailable"
    status_code = 503
    retryable = True


class StockConflict(StorefrontError):
    """Stock changed between read and write; the caller may retry."""

    kind = "StockConflict"
    status_code = 409
    retryable = True
