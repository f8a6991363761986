"""
Record store interface (persistence contract).

The purchase pipeline depends only on this protocol. Two backends implement
it: `InMemoryRecordStore` (process-local, used for development and tests) and
`SupabaseRecordStore` (PostgreSQL via Supabase).

Atomicity contract:
- `reserve_product_unit` is a single conditional increment: it must never let
  two callers both observe `sales_count == inventory_limit - 1` and both
  succeed.
- `release_product_unit` is the matching decrement, floored at zero, and is
  persisted through the same path.

Every other operation is plain create/read/update by id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

from domain.nft import NFTRecord
from domain.product import Product
from domain.transaction import TransactionRecord

# Error codes returned by reserve_product_unit
RESERVATION_NOT_FOUND: str = "NOT_FOUND"
RESERVATION_SOLD_OUT: str = "SOLD_OUT"


@dataclass(frozen=True, slots=True)
class ReservationOutcome:
    """
    Result of an atomic reservation attempt.

    success: True if one unit was claimed
    sales_count: sales count after the increment (None on failure)
    error_code: RESERVATION_NOT_FOUND or RESERVATION_SOLD_OUT on failure
    """
    success: bool
    sales_count: Optional[int]
    error_code: Optional[str] = None


class DuplicateBarcodeError(RuntimeError):
    """Raised by create_transaction when unique_barcode_id is already taken."""

    def __init__(self, barcode_id: str):
        self.barcode_id = barcode_id
        super().__init__(f"Duplicate unique_barcode_id: {barcode_id}")


class RecordStore(Protocol):
    """Per-entity CRUD plus the atomic inventory counter."""

    # Products
    def create_product(self, product: Product) -> Product: ...

    def get_product(self, product_id: str) -> Optional[Product]: ...

    def list_products(self) -> List[Product]: ...

    def reserve_product_unit(self, product_id: str) -> ReservationOutcome: ...

    def release_product_unit(self, product_id: str) -> int: ...

    # Transactions
    # Raises DuplicateBarcodeError if unique_barcode_id is taken
    def create_transaction(self, transaction: TransactionRecord) -> TransactionRecord: ...

    def get_transaction(self, transaction_id: str) -> Optional[TransactionRecord]: ...

    def get_transaction_by_nft_id(self, nft_id: str) -> Optional[TransactionRecord]: ...

    def list_transactions(self) -> List[TransactionRecord]: ...

    def update_transaction(self, transaction: TransactionRecord) -> TransactionRecord: ...

    def barcode_exists(self, barcode_id: str) -> bool: ...

    # NFTs
    def create_nft(self, nft: NFTRecord) -> NFTRecord: ...

    def get_nft(self, nft_id: str) -> Optional[NFTRecord]: ...

    def get_nft_by_token_id(self, token_id: str) -> Optional[NFTRecord]: ...

    def update_nft(self, nft: NFTRecord) -> NFTRecord: ...


__all__ = [
    "RESERVATION_NOT_FOUND",
    "RESERVATION_SOLD_OUT",
    "DuplicateBarcodeError",
    "RecordStore",
    "ReservationOutcome",
]
