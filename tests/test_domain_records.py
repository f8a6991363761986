"""
Tests for `domain/product.py`, `domain/transaction.py` and `domain/nft.py`.

Covers contract rules:
- Product availability is TRUE iff sales_count < inventory_limit.
- sales_count never exceeds the limit and never drops below zero.
- Transactions and NFTs transition exactly once out of `pending`.
- Records are immutable; transitions return new instances.
- Timestamps must be UTC.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.nft import NFTRecord, NFTStatus
from domain.product import Product
from domain.transaction import TransactionRecord, TransactionStatus

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _product(**overrides) -> Product:
    fields = dict(
        product_id="p-1",
        name="Genesis Hoodie",
        price=Decimal("120.00"),
        barcode_id="GENESIS-001",
        sales_count=0,
        inventory_limit=2,
    )
    fields.update(overrides)
    return Product(**fields)


def _transaction(**overrides) -> TransactionRecord:
    fields = dict(
        transaction_id="t-1",
        product_id="p-1",
        buyer_wallet="rBuyer",
        amount=Decimal("120.00"),
        unique_barcode_id="ABCDE12345",
        purchase_number=1,
        created_at=NOW,
    )
    fields.update(overrides)
    return TransactionRecord(**fields)


def test_product_available_until_limit_reached() -> None:
    """Verify availability flips exactly when sales_count reaches the limit."""

    product = _product()
    assert product.is_available is True
    assert product.remaining == 2

    once = product.with_one_more_sale()
    twice = once.with_one_more_sale()

    assert once.sales_count == 1
    assert twice.sales_count == 2
    assert twice.is_available is False
    assert twice.remaining == 0
    assert product.sales_count == 0


def test_product_cannot_sell_past_limit() -> None:
    """Verify a sold-out product refuses another sale."""

    sold_out = _product(sales_count=2)

    with pytest.raises(ValueError):
        sold_out.with_one_more_sale()


def test_product_release_is_floored_at_zero() -> None:
    """Verify removing a sale never makes sales_count negative."""

    assert _product(sales_count=1).with_one_less_sale().sales_count == 0
    assert _product(sales_count=0).with_one_less_sale().sales_count == 0


def test_product_rejects_inconsistent_counts() -> None:
    """Verify construction validates the sales/limit invariant."""

    with pytest.raises(ValueError):
        _product(sales_count=3, inventory_limit=2)

    with pytest.raises(ValueError):
        _product(sales_count=-1)

    with pytest.raises(ValueError):
        _product(barcode_id="")


def test_transaction_completes_once() -> None:
    """Verify a pending transaction completes and cannot transition again."""

    pending = _transaction()
    completed = pending.completed(nft_id="n-1", tx_hash="HASH")

    assert pending.status == TransactionStatus.PENDING
    assert completed.status == TransactionStatus.COMPLETED
    assert completed.nft_id == "n-1"
    assert completed.tx_hash == "HASH"

    with pytest.raises(ValueError):
        completed.failed()

    with pytest.raises(ValueError):
        completed.completed(nft_id="n-2", tx_hash="OTHER")


def test_failed_transaction_is_terminal() -> None:
    """Verify a failed transaction cannot later complete."""

    failed = _transaction().failed(nft_id="n-1")
    assert failed.status == TransactionStatus.FAILED
    assert failed.nft_id == "n-1"

    with pytest.raises(ValueError):
        failed.completed(nft_id="n-1", tx_hash="HASH")


def test_fulfillment_fields_can_be_set_after_completion() -> None:
    """Verify auxiliary fulfillment data is allowed on terminal transactions."""

    completed = _transaction().completed(nft_id="n-1", tx_hash="HASH")
    fulfilled = completed.with_fulfillment(order_id="PF-1", status="draft", email_sent_at=NOW)

    assert fulfilled.status == TransactionStatus.COMPLETED
    assert fulfilled.fulfillment_order_id == "PF-1"
    assert fulfilled.email_sent_at == NOW


def test_transaction_validates_inputs() -> None:
    """Verify created_at must be UTC and purchase_number 1-indexed."""

    with pytest.raises(ValueError):
        _transaction(created_at=datetime(2025, 1, 1, 12, 0, 0))

    with pytest.raises(ValueError):
        _transaction(created_at=datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=2))))

    with pytest.raises(ValueError):
        _transaction(purchase_number=0)

    with pytest.raises(ValueError):
        _transaction(buyer_wallet="")


def test_nft_minted_once() -> None:
    """Verify NFT minting sets ledger fields and is a one-time transition."""

    pending = NFTRecord(nft_id="n-1", product_id="p-1")
    minted = pending.minted(
        token_id="TOKEN",
        owner_wallet="rBuyer",
        transaction_hash="HASH",
        minted_at=NOW,
    )

    assert pending.status == NFTStatus.PENDING
    assert minted.status == NFTStatus.MINTED
    assert minted.owner_wallet == "rBuyer"
    assert minted.minted_at == NOW

    with pytest.raises(ValueError):
        minted.failed()


def test_nft_minted_at_must_be_utc() -> None:
    """Verify minted_at enforces a UTC timestamp."""

    with pytest.raises(ValueError):
        NFTRecord(nft_id="n-1", product_id="p-1").minted(
            token_id="TOKEN",
            owner_wallet="rBuyer",
            transaction_hash="HASH",
            minted_at=datetime(2025, 1, 1),
        )


def test_records_are_immutable() -> None:
    """Verify records cannot be mutated in place."""

    with pytest.raises(FrozenInstanceError):
        _product().sales_count = 5  # type: ignore[misc]

    with pytest.raises(FrozenInstanceError):
        _transaction().status = TransactionStatus.COMPLETED  # type: ignore[misc]
