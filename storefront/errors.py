"""
Cart error kinds and user-facing messages.

Messages are centralized to avoid string duplication between the store,
the CLI and the tests.
"""

from enum import Enum

# Operation-level messages
ERROR_ADD_PRODUCT = "Error adding product"
ERROR_REMOVE_PRODUCT = "Error removing product"
ERROR_UPDATE_AMOUNT = "Error updating product amount"

# Validation messages
ERROR_OUT_OF_STOCK = "Requested quantity out of stock"
ERROR_INVALID_AMOUNT = "Quantity must be positive"

# Infrastructure messages
ERROR_STORAGE_UNAVAILABLE = "Cart storage unavailable"


class CartErrorKind(str, Enum):
    """Why a cart mutation was rejected."""
    PRODUCT_NOT_FOUND = "product_not_found"
    STOCK_UNAVAILABLE = "stock_unavailable"  # available < 1
    STOCK_EXCEEDED = "stock_exceeded"  # requested > available
    PRODUCT_LOOKUP_FAILED = "product_lookup_failed"
    INVALID_AMOUNT = "invalid_amount"  # amount < 1
    ITEM_NOT_IN_CART = "item_not_in_cart"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class StoreApiError(Exception):
    """Raised by the store API client when a stock or product lookup fails."""

    def __init__(self, kind: CartErrorKind, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class CartStorageError(Exception):
    """Raised by a persistent cache backend when it cannot read or write."""


def message_for(kind: CartErrorKind, operation_message: str) -> str:
    """Pick the user-facing message for an error kind within an operation."""
    if kind in (CartErrorKind.STOCK_UNAVAILABLE, CartErrorKind.STOCK_EXCEEDED):
        return ERROR_OUT_OF_STOCK
    if kind == CartErrorKind.INVALID_AMOUNT:
        return ERROR_INVALID_AMOUNT
    if kind == CartErrorKind.STORAGE_UNAVAILABLE:
        return ERROR_STORAGE_UNAVAILABLE
    return operation_message
