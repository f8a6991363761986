"""
Purchase pipeline errors.

Routers translate these into HTTP status codes:
- InvalidRequestError -> 400
- SoldOutError        -> 400
- NotFoundError       -> 404
- MintFailedError     -> 500
"""

from __future__ import annotations


class PurchaseError(Exception):
    """Base class for errors surfaced to purchase callers."""


class InvalidRequestError(PurchaseError):
    """Raised when client input is missing or malformed."""


class NotFoundError(PurchaseError):
    """Raised when a referenced product does not exist."""
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class SoldOutError(PurchaseError):
    """Raised when a product's inventory limit has been reached."""
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product sold out - inventory limit reached")


class MintFailedError(PurchaseError):
    """
    Raised after a failed mint, once compensation has run.

    reason carries the minting collaborator's error message.
    """
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


__all__ = [
    "InvalidRequestError",
    "MintFailedError",
    "NotFoundError",
    "PurchaseError",
    "SoldOutError",
]
