"""
In-memory record store.

Process-local dictionaries keyed by id. A single lock guards the product
counter so that reservation is one read-check-write critical section; the
entity maps are guarded by the same lock for consistency of reads.

Records are immutable, so handing them out of the store is safe.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from domain.nft import NFTRecord
from domain.product import Product
from domain.transaction import TransactionRecord
from repositories.record_store import (
    DuplicateBarcodeError,
    RESERVATION_NOT_FOUND,
    RESERVATION_SOLD_OUT,
    ReservationOutcome,
)


class InMemoryRecordStore:
    """RecordStore backed by dicts; safe across worker threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._products: Dict[str, Product] = {}
        self._transactions: Dict[str, TransactionRecord] = {}
        self._nfts: Dict[str, NFTRecord] = {}
        self._barcodes: set[str] = set()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def create_product(self, product: Product) -> Product:
        with self._lock:
            if product.product_id in self._products:
                raise RuntimeError(f"Product already exists: {product.product_id}")
            if any(p.barcode_id == product.barcode_id for p in self._products.values()):
                raise RuntimeError(f"Barcode already in use: {product.barcode_id}")
            self._products[product.product_id] = product
        return product

    def get_product(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._products.get(product_id)

    def list_products(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def reserve_product_unit(self, product_id: str) -> ReservationOutcome:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return ReservationOutcome(False, None, RESERVATION_NOT_FOUND)
            if not product.is_available:
                return ReservationOutcome(False, None, RESERVATION_SOLD_OUT)
            updated = product.with_one_more_sale()
            self._products[product_id] = updated
            return ReservationOutcome(True, updated.sales_count)

    def release_product_unit(self, product_id: str) -> int:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise RuntimeError(f"Failed to release unit: product not found: {product_id}")
            updated = product.with_one_less_sale()
            self._products[product_id] = updated
            return updated.sales_count

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def create_transaction(self, transaction: TransactionRecord) -> TransactionRecord:
        with self._lock:
            if transaction.unique_barcode_id in self._barcodes:
                raise DuplicateBarcodeError(transaction.unique_barcode_id)
            self._transactions[transaction.transaction_id] = transaction
            self._barcodes.add(transaction.unique_barcode_id)
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[TransactionRecord]:
        with self._lock:
            return self._transactions.get(transaction_id)

    def get_transaction_by_nft_id(self, nft_id: str) -> Optional[TransactionRecord]:
        with self._lock:
            for transaction in self._transactions.values():
                if transaction.nft_id == nft_id:
                    return transaction
        return None

    def list_transactions(self) -> List[TransactionRecord]:
        with self._lock:
            return list(self._transactions.values())

    def update_transaction(self, transaction: TransactionRecord) -> TransactionRecord:
        with self._lock:
            if transaction.transaction_id not in self._transactions:
                raise RuntimeError(
                    f"Failed to update transaction: not found: {transaction.transaction_id}"
                )
            self._transactions[transaction.transaction_id] = transaction
        return transaction

    def barcode_exists(self, barcode_id: str) -> bool:
        with self._lock:
            if barcode_id in self._barcodes:
                return True
            return any(p.barcode_id == barcode_id for p in self._products.values())

    # ------------------------------------------------------------------
    # NFTs
    # ------------------------------------------------------------------

    def create_nft(self, nft: NFTRecord) -> NFTRecord:
        with self._lock:
            self._nfts[nft.nft_id] = nft
        return nft

    def get_nft(self, nft_id: str) -> Optional[NFTRecord]:
        with self._lock:
            return self._nfts.get(nft_id)

    def get_nft_by_token_id(self, token_id: str) -> Optional[NFTRecord]:
        with self._lock:
            for nft in self._nfts.values():
                if nft.token_id == token_id:
                    return nft
        return None

    def update_nft(self, nft: NFTRecord) -> NFTRecord:
        with self._lock:
            if nft.nft_id not in self._nfts:
                raise RuntimeError(f"Failed to update NFT: not found: {nft.nft_id}")
            self._nfts[nft.nft_id] = nft
        return nft


__all__ = ["InMemoryRecordStore"]
