"""
Tests for `services/barcode_service.py`.

Covers contract rules:
- Barcodes are 10 uppercase letters/digits.
- Candidates already used by a transaction or product are rejected and retried.
- Generation gives up with RuntimeError after max_attempts collisions.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from domain.transaction import TransactionRecord
from services.barcode_service import BarcodeGenerator, UniqueBarcodeGenerator


def _scripted(*tokens: str):
    remaining = list(tokens)
    return lambda: remaining.pop(0)


def _store_transaction(store, product_id: str, barcode: str) -> None:
    store.create_transaction(TransactionRecord(
        transaction_id=f"t-{barcode}",
        product_id=product_id,
        buyer_wallet="rBuyer",
        amount=Decimal("10.00"),
        unique_barcode_id=barcode,
        purchase_number=1,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    ))


def test_generated_barcode_format() -> None:
    """Verify the default generator produces 10 uppercase alphanumerics."""

    generator = BarcodeGenerator()
    barcodes = {generator.generate() for _ in range(200)}

    assert all(re.fullmatch(r"[A-Z0-9]{10}", b) for b in barcodes)
    assert len(barcodes) == 200


def test_generator_rejects_malformed_tokens() -> None:
    """Verify a token source producing bad tokens is rejected."""

    with pytest.raises(ValueError):
        BarcodeGenerator(_scripted("short")).generate()

    with pytest.raises(ValueError):
        BarcodeGenerator(_scripted("lowercase1")).generate()


def test_unique_generator_retries_on_collision(store, make_product) -> None:
    """Verify collisions with transaction and product barcodes are skipped."""

    product = make_product(barcode_id="PRODUCT001")
    _store_transaction(store, product.product_id, "TAKEN00001")

    generator = UniqueBarcodeGenerator(
        store,
        BarcodeGenerator(_scripted("TAKEN00001", "PRODUCT001", "FRESH00001")),
    )

    assert generator.generate() == "FRESH00001"


def test_unique_generator_gives_up(store, make_product) -> None:
    """Verify generation fails after max_attempts collisions."""

    product = make_product()
    _store_transaction(store, product.product_id, "TAKEN00001")

    generator = UniqueBarcodeGenerator(
        store,
        BarcodeGenerator(lambda: "TAKEN00001"),
        max_attempts=3,
    )

    with pytest.raises(RuntimeError):
        generator.generate()
