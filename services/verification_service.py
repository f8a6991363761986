"""
NFT verification.

The QR code printed on each garment encodes a verification URL built from
the NFT token id. Scanning it lands on the verify page, which resolves the
token back to the local NFT, product and transaction records.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from domain.nft import NFTRecord
from domain.product import Product
from domain.transaction import TransactionRecord
from repositories.record_store import RecordStore

DEFAULT_PUBLIC_URL: str = "http://localhost:5001"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Local records behind a token id."""
    nft: NFTRecord
    product: Optional[Product]
    transaction: Optional[TransactionRecord]
    verification_url: str


def verification_url(token_id: str, public_url: Optional[str] = None) -> str:
    """
    Build the URL encoded in the printed QR code.

    public_url defaults to the PUBLIC_URL environment variable.
    """

    base = public_url or os.getenv("PUBLIC_URL") or DEFAULT_PUBLIC_URL
    return f"{base.rstrip('/')}/verify/{token_id}"


def verify_token(
    store: RecordStore,
    token_id: str,
    public_url: Optional[str] = None,
) -> Optional[VerificationResult]:
    """
    Resolve a token id to its NFT, product and purchase transaction.

    Returns:
        VerificationResult, or None if no NFT carries this token id
    """

    nft = store.get_nft_by_token_id(token_id)
    if nft is None:
        return None

    return VerificationResult(
        nft=nft,
        product=store.get_product(nft.product_id),
        transaction=store.get_transaction_by_nft_id(nft.nft_id),
        verification_url=verification_url(token_id, public_url),
    )


__all__ = ["VerificationResult", "verification_url", "verify_token"]
