"""
Domain: NFT records.

One NFT record exists per purchase attempt. It is created `pending` before the
ledger is contacted and moves exactly once to `minted` or `failed`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp


class NFTStatus(str, Enum):
    PENDING = "pending"
    MINTED = "minted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class NFTRecord:
    """
    Immutable record of a minted (or attempted) asset for a product.

    Transitions return new instances; the record store persists them.
    """

    nft_id: str
    product_id: str
    status: NFTStatus = NFTStatus.PENDING
    token_id: Optional[str] = None
    owner_wallet: Optional[str] = None
    transaction_hash: Optional[str] = None
    minted_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.minted_at is not None:
            require_utc_timestamp("minted_at", self.minted_at)

    @property
    def is_pending(self) -> bool:
        return self.status == NFTStatus.PENDING

    def minted(
        self,
        *,
        token_id: str,
        owner_wallet: str,
        transaction_hash: str,
        minted_at: datetime,
    ) -> "NFTRecord":
        """Return a new NFTRecord marked as minted on the ledger."""

        require_utc_timestamp("minted_at", minted_at)
        if not self.is_pending:
            raise ValueError(f"NFT {self.nft_id} is already {self.status.value}")
        return replace(
            self,
            status=NFTStatus.MINTED,
            token_id=token_id,
            owner_wallet=owner_wallet,
            transaction_hash=transaction_hash,
            minted_at=minted_at,
        )

    def failed(self) -> "NFTRecord":
        """Return a new NFTRecord marked as failed."""

        if not self.is_pending:
            raise ValueError(f"NFT {self.nft_id} is already {self.status.value}")
        return replace(self, status=NFTStatus.FAILED)
