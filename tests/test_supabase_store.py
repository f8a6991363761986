"""
Tests for `repositories/supabase_store.py`.

Covers contract rules:
- Rows map to domain records with UTC timestamps and Decimal amounts.
- Reservation results from the PostgreSQL functions map to outcomes,
  including bodies that supabase-py surfaces as APIError.
- Unexpected function results and response errors raise RuntimeError.
- Unique violations on the unit barcode raise DuplicateBarcodeError.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from domain.nft import NFTRecord, NFTStatus
from domain.transaction import TransactionRecord, TransactionStatus
from repositories.record_store import DuplicateBarcodeError, RESERVATION_SOLD_OUT
from repositories.supabase_store import SupabaseRecordStore

PRODUCT_ROW = {
    "product_id": "p-1",
    "name": "Genesis Hoodie",
    "description": None,
    "price": "120.00",
    "image_url": None,
    "barcode_id": "GENESIS-001",
    "sales_count": 4,
    "inventory_limit": 10,
    "nft_status": "available",
    "created_at_utc": "2025-01-01T12:00:00Z",
}

TRANSACTION_ROW = {
    "transaction_id": "t-1",
    "product_id": "p-1",
    "buyer_wallet": "rBuyer",
    "amount": "120.00",
    "unique_barcode_id": "K3ZP0Q7M2A",
    "purchase_number": 5,
    "created_at_utc": "2025-01-01T12:00:00+00:00",
    "status": "completed",
    "nft_id": "n-1",
    "tx_hash": "HASH",
}


class FakeQuery:
    def __init__(self, client, table, rows):
        self.client = client
        self.table = table
        self.rows = rows
        self.calls = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return record

    def execute(self):
        self.client.executed.append((self.table, self.calls))
        if self.client.insert_error is not None and self.calls[0][0] == "insert":
            raise self.client.insert_error
        return SimpleNamespace(data=self.rows, error=None)


class FakeClient:
    """Chainable stand-in for the supabase-py client."""

    def __init__(self, rows=None, rpc_result=None, rpc_error=None, insert_error=None):
        self.insert_error = insert_error
        self.rows = rows or {}
        self.rpc_result = rpc_result
        self.rpc_error = rpc_error
        self.executed = []
        self.rpc_calls = []

    def table(self, name):
        return FakeQuery(self, name, self.rows.get(name, []))

    def rpc(self, function, params):
        self.rpc_calls.append((function, params))
        client = self

        class _Rpc:
            def execute(self):
                if client.rpc_error is not None:
                    raise client.rpc_error
                return SimpleNamespace(data=client.rpc_result, error=None)

        return _Rpc()


def test_get_product_maps_row() -> None:
    """Verify a product row becomes a Product with UTC created_at."""

    store = SupabaseRecordStore(FakeClient(rows={"products": [PRODUCT_ROW]}))

    product = store.get_product("p-1")

    assert product.price == Decimal("120.00")
    assert product.sales_count == 4
    assert product.remaining == 6
    assert product.created_at == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_get_missing_product_returns_none() -> None:
    assert SupabaseRecordStore(FakeClient()).get_product("missing") is None


def test_transaction_row_mapping() -> None:
    """Verify transaction rows map status and linking fields."""

    store = SupabaseRecordStore(FakeClient(rows={"transactions": [TRANSACTION_ROW]}))

    transaction = store.get_transaction_by_nft_id("n-1")

    assert transaction.status == TransactionStatus.COMPLETED
    assert transaction.purchase_number == 5
    assert transaction.created_at.tzinfo == timezone.utc
    assert transaction.email_sent_at is None


def test_update_nft_sends_serialized_payload() -> None:
    """Verify NFT updates filter by id and serialize minted_at as UTC ISO."""

    client = FakeClient(rows={"nfts": [{}]})
    store = SupabaseRecordStore(client)
    minted = NFTRecord(nft_id="n-1", product_id="p-1").minted(
        token_id="TOKEN",
        owner_wallet="rBuyer",
        transaction_hash="HASH",
        minted_at=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
    )

    store.update_nft(minted)

    [(table, calls)] = client.executed
    assert table == "nfts"
    (_, (payload,), _), (_, eq_args, _) = calls
    assert "nft_id" not in payload
    assert payload["status"] == NFTStatus.MINTED.value
    assert payload["minted_at_utc"] == "2025-01-01T12:00:00+00:00"
    assert eq_args == ("nft_id", "n-1")


def test_reserve_success() -> None:
    client = FakeClient(rpc_result={"success": True, "sales_count": 5})

    outcome = SupabaseRecordStore(client).reserve_product_unit("p-1")

    assert outcome.success is True
    assert outcome.sales_count == 5
    assert client.rpc_calls == [("reserve_product_unit", {"p_product_id": "p-1"})]


def test_reserve_result_surfaced_as_api_error() -> None:
    """Verify a JSON function result raised as APIError is still read."""

    client = FakeClient(rpc_error=APIError({"success": True, "sales_count": 3}))

    outcome = SupabaseRecordStore(client).reserve_product_unit("p-1")

    assert outcome.success is True
    assert outcome.sales_count == 3


def test_reserve_sold_out() -> None:
    client = FakeClient(rpc_result={"success": False, "error": RESERVATION_SOLD_OUT})

    outcome = SupabaseRecordStore(client).reserve_product_unit("p-1")

    assert outcome.success is False
    assert outcome.error_code == RESERVATION_SOLD_OUT


def test_reserve_unexpected_result_raises() -> None:
    client = FakeClient(rpc_result={"success": False, "error": "DEADLOCK"})

    with pytest.raises(RuntimeError):
        SupabaseRecordStore(client).reserve_product_unit("p-1")


def test_rpc_api_error_without_body_raises() -> None:
    """Verify a genuine database error is not mistaken for a result."""

    client = FakeClient(rpc_error=APIError({"message": "permission denied", "code": "42501"}))

    with pytest.raises(RuntimeError):
        SupabaseRecordStore(client).release_product_unit("p-1")


def test_release_returns_new_count() -> None:
    client = FakeClient(rpc_result={"success": True, "sales_count": 2})

    assert SupabaseRecordStore(client).release_product_unit("p-1") == 2


def _pending_transaction() -> TransactionRecord:
    return TransactionRecord(
        transaction_id="t-2",
        product_id="p-1",
        buyer_wallet="rBuyer",
        amount=Decimal("120.00"),
        unique_barcode_id="K3ZP0Q7M2A",
        purchase_number=6,
        created_at=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


def test_duplicate_barcode_insert_is_reported() -> None:
    """Verify the barcode unique violation maps to DuplicateBarcodeError."""

    client = FakeClient(insert_error=APIError({
        "code": "23505",
        "message": 'duplicate key value violates unique constraint "transactions_unique_barcode_id_key"',
    }))

    with pytest.raises(DuplicateBarcodeError) as exc_info:
        SupabaseRecordStore(client).create_transaction(_pending_transaction())

    assert exc_info.value.barcode_id == "K3ZP0Q7M2A"


def test_other_insert_errors_propagate() -> None:
    """Verify other unique violations are not mistaken for barcode collisions."""

    client = FakeClient(insert_error=APIError({
        "code": "23505",
        "message": 'duplicate key value violates unique constraint "transactions_pkey"',
    }))

    with pytest.raises(APIError):
        SupabaseRecordStore(client).create_transaction(_pending_transaction())
