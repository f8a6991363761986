"""
Supabase record store (persistence).

This module provides *only* persistence for Product, TransactionRecord and
NFTRecord. It does not enforce business rules beyond what the database
functions guarantee; the inventory counter is changed exclusively through the
`reserve_product_unit()` / `release_product_unit()` PostgreSQL functions
(see sql/purchase_functions.sql), which lock the product row and perform the
conditional update in a single statement.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from postgrest.exceptions import APIError

from domain.nft import NFTRecord, NFTStatus
from domain.product import DEFAULT_INVENTORY_LIMIT, Product
from domain.time import require_utc_timestamp
from domain.transaction import TransactionRecord, TransactionStatus
from repositories.record_store import (
    DuplicateBarcodeError,
    RESERVATION_NOT_FOUND,
    RESERVATION_SOLD_OUT,
    ReservationOutcome,
)

logger = logging.getLogger(__name__)

# Supabase table names.
# Keep these aligned with your database schema.
_PRODUCTS_TABLE: str = "products"
_TRANSACTIONS_TABLE: str = "transactions"
_NFTS_TABLE: str = "nfts"

# PostgreSQL SQLSTATE for unique_violation
_UNIQUE_VIOLATION: str = "23505"


def _to_iso_utc(dt: Optional[datetime], *, name: str) -> Optional[str]:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    if dt is None:
        return None
    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_utc_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _rows(response: Any, action: str) -> List[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


def _row_to_product(row: Mapping[str, Any]) -> Product:
    return Product(
        product_id=str(row["product_id"]),
        name=str(row["name"]),
        price=Decimal(str(row["price"])),
        barcode_id=str(row["barcode_id"]),
        sales_count=int(row.get("sales_count") or 0),
        inventory_limit=int(row.get("inventory_limit") or DEFAULT_INVENTORY_LIMIT),
        nft_status=str(row.get("nft_status") or "available"),
        description=row.get("description"),
        image_url=row.get("image_url"),
        created_at=_parse_utc_datetime(row.get("created_at_utc")),
    )


def _row_to_transaction(row: Mapping[str, Any]) -> TransactionRecord:
    return TransactionRecord(
        transaction_id=str(row["transaction_id"]),
        product_id=str(row["product_id"]),
        buyer_wallet=str(row["buyer_wallet"]),
        amount=Decimal(str(row["amount"])),
        unique_barcode_id=str(row["unique_barcode_id"]),
        purchase_number=int(row["purchase_number"]),
        created_at=_parse_utc_datetime(row["created_at_utc"]),
        status=TransactionStatus(str(row["status"])),
        nft_id=row.get("nft_id"),
        tx_hash=row.get("tx_hash"),
        email_sent_at=_parse_utc_datetime(row.get("email_sent_at_utc")),
        fulfillment_order_id=row.get("fulfillment_order_id"),
        fulfillment_status=row.get("fulfillment_status"),
    )


def _transaction_payload(transaction: TransactionRecord) -> dict[str, Any]:
    return {
        "transaction_id": transaction.transaction_id,
        "product_id": transaction.product_id,
        "buyer_wallet": transaction.buyer_wallet,
        "amount": str(transaction.amount),
        "unique_barcode_id": transaction.unique_barcode_id,
        "purchase_number": transaction.purchase_number,
        "created_at_utc": _to_iso_utc(transaction.created_at, name="created_at"),
        "status": transaction.status.value,
        "nft_id": transaction.nft_id,
        "tx_hash": transaction.tx_hash,
        "email_sent_at_utc": _to_iso_utc(transaction.email_sent_at, name="email_sent_at"),
        "fulfillment_order_id": transaction.fulfillment_order_id,
        "fulfillment_status": transaction.fulfillment_status,
    }


def _row_to_nft(row: Mapping[str, Any]) -> NFTRecord:
    return NFTRecord(
        nft_id=str(row["nft_id"]),
        product_id=str(row["product_id"]),
        status=NFTStatus(str(row["status"])),
        token_id=row.get("token_id"),
        owner_wallet=row.get("owner_wallet"),
        transaction_hash=row.get("transaction_hash"),
        minted_at=_parse_utc_datetime(row.get("minted_at_utc")),
    )


def _nft_payload(nft: NFTRecord) -> dict[str, Any]:
    return {
        "nft_id": nft.nft_id,
        "product_id": nft.product_id,
        "status": nft.status.value,
        "token_id": nft.token_id,
        "owner_wallet": nft.owner_wallet,
        "transaction_hash": nft.transaction_hash,
        "minted_at_utc": _to_iso_utc(nft.minted_at, name="minted_at"),
    }


def _is_unique_barcode_violation(error: APIError) -> bool:
    """True for a 23505 unique violation on transactions.unique_barcode_id."""

    if getattr(error, "code", None) != _UNIQUE_VIOLATION:
        return False
    text = f"{getattr(error, 'message', '') or ''} {getattr(error, 'details', '') or ''}"
    return "unique_barcode_id" in text


def _call_counter_rpc(client: Any, function: str, product_id: str) -> Mapping[str, Any]:
    """
    Invoke a product counter function and return its JSON result.

    Supabase-py raises APIError when a PostgreSQL function returns a JSON
    object, for both success and error payloads, so the body is recovered
    from the exception.
    """

    try:
        response = client.rpc(function, {"p_product_id": product_id}).execute()
    except APIError as e:
        try:
            error_data = e.json() if callable(getattr(e, "json", None)) else {}
        except (TypeError, ValueError):
            error_data = {}
        if "success" in error_data:
            return error_data
        raise RuntimeError(f"{function} failed: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"{function} failed: {error}")
    return response.data or {}


class SupabaseRecordStore:
    """RecordStore backed by Supabase tables and PostgreSQL functions."""

    def __init__(self, client: Any) -> None:
        self._client = client

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def create_product(self, product: Product) -> Product:
        payload: dict[str, Any] = {
            "product_id": product.product_id,
            "name": product.name,
            "description": product.description,
            "price": str(product.price),
            "image_url": product.image_url,
            "barcode_id": product.barcode_id,
            "sales_count": product.sales_count,
            "inventory_limit": product.inventory_limit,
            "nft_status": product.nft_status,
            "created_at_utc": _to_iso_utc(product.created_at, name="created_at"),
        }
        response = self._client.table(_PRODUCTS_TABLE).insert(payload).execute()
        _rows(response, "create product")
        return product

    def get_product(self, product_id: str) -> Optional[Product]:
        response = (
            self._client.table(_PRODUCTS_TABLE)
            .select("*")
            .eq("product_id", product_id)
            .limit(1)
            .execute()
        )
        rows = _rows(response, "get product")
        if not rows:
            return None
        return _row_to_product(rows[0])

    def list_products(self) -> List[Product]:
        response = self._client.table(_PRODUCTS_TABLE).select("*").execute()
        return [_row_to_product(row) for row in _rows(response, "list products")]

    def reserve_product_unit(self, product_id: str) -> ReservationOutcome:
        result = _call_counter_rpc(self._client, "reserve_product_unit", product_id)

        if result.get("success"):
            return ReservationOutcome(True, int(result["sales_count"]))

        error_code = result.get("error")
        if error_code not in (RESERVATION_NOT_FOUND, RESERVATION_SOLD_OUT):
            raise RuntimeError(f"reserve_product_unit returned unexpected result: {result}")
        return ReservationOutcome(False, None, error_code)

    def release_product_unit(self, product_id: str) -> int:
        result = _call_counter_rpc(self._client, "release_product_unit", product_id)

        if not result.get("success"):
            raise RuntimeError(
                f"Failed to release unit for product {product_id}: {result.get('error')}"
            )
        return int(result["sales_count"])

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def create_transaction(self, transaction: TransactionRecord) -> TransactionRecord:
        try:
            response = (
                self._client.table(_TRANSACTIONS_TABLE)
                .insert(_transaction_payload(transaction))
                .execute()
            )
        except APIError as e:
            if _is_unique_barcode_violation(e):
                raise DuplicateBarcodeError(transaction.unique_barcode_id) from e
            raise
        _rows(response, "create transaction")
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[TransactionRecord]:
        response = (
            self._client.table(_TRANSACTIONS_TABLE)
            .select("*")
            .eq("transaction_id", transaction_id)
            .limit(1)
            .execute()
        )
        rows = _rows(response, "get transaction")
        if not rows:
            return None
        return _row_to_transaction(rows[0])

    def get_transaction_by_nft_id(self, nft_id: str) -> Optional[TransactionRecord]:
        response = (
            self._client.table(_TRANSACTIONS_TABLE)
            .select("*")
            .eq("nft_id", nft_id)
            .limit(1)
            .execute()
        )
        rows = _rows(response, "get transaction")
        if not rows:
            return None
        return _row_to_transaction(rows[0])

    def list_transactions(self) -> List[TransactionRecord]:
        response = (
            self._client.table(_TRANSACTIONS_TABLE)
            .select("*")
            .order("created_at_utc", desc=True)
            .execute()
        )
        return [_row_to_transaction(row) for row in _rows(response, "list transactions")]

    def update_transaction(self, transaction: TransactionRecord) -> TransactionRecord:
        payload = _transaction_payload(transaction)
        del payload["transaction_id"]
        response = (
            self._client.table(_TRANSACTIONS_TABLE)
            .update(payload)
            .eq("transaction_id", transaction.transaction_id)
            .execute()
        )
        _rows(response, "update transaction")
        return transaction

    def barcode_exists(self, barcode_id: str) -> bool:
        response = (
            self._client.table(_TRANSACTIONS_TABLE)
            .select("transaction_id")
            .eq("unique_barcode_id", barcode_id)
            .limit(1)
            .execute()
        )
        if _rows(response, "check barcode"):
            return True

        response = (
            self._client.table(_PRODUCTS_TABLE)
            .select("product_id")
            .eq("barcode_id", barcode_id)
            .limit(1)
            .execute()
        )
        return bool(_rows(response, "check barcode"))

    # ------------------------------------------------------------------
    # NFTs
    # ------------------------------------------------------------------

    def create_nft(self, nft: NFTRecord) -> NFTRecord:
        response = self._client.table(_NFTS_TABLE).insert(_nft_payload(nft)).execute()
        _rows(response, "create NFT")
        return nft

    def get_nft(self, nft_id: str) -> Optional[NFTRecord]:
        response = (
            self._client.table(_NFTS_TABLE)
            .select("*")
            .eq("nft_id", nft_id)
            .limit(1)
            .execute()
        )
        rows = _rows(response, "get NFT")
        if not rows:
            return None
        return _row_to_nft(rows[0])

    def get_nft_by_token_id(self, token_id: str) -> Optional[NFTRecord]:
        response = (
            self._client.table(_NFTS_TABLE)
            .select("*")
            .eq("token_id", token_id)
            .limit(1)
            .execute()
        )
        rows = _rows(response, "get NFT")
        if not rows:
            return None
        return _row_to_nft(rows[0])

    def update_nft(self, nft: NFTRecord) -> NFTRecord:
        payload = _nft_payload(nft)
        del payload["nft_id"]
        response = (
            self._client.table(_NFTS_TABLE)
            .update(payload)
            .eq("nft_id", nft.nft_id)
            .execute()
        )
        _rows(response, "update NFT")
        logger.debug("Updated NFT %s to %s", nft.nft_id, nft.status.value)
        return nft


__all__ = ["SupabaseRecordStore"]
