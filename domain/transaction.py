"""
Domain: Purchase transactions.

Rules implemented here:
- A transaction starts `pending` and transitions exactly once to
  `completed` or `failed`.
- unique_barcode_id identifies the purchased unit; it is distinct from the
  product's base barcode and unique across all transactions.
- purchase_number is the product's sales count right after reservation
  (1-indexed).

Fulfillment and email fields are auxiliary: they may be set after the
transaction is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """
    Immutable record of one purchase attempt.

    All timestamps must be passed explicitly.
    """

    transaction_id: str
    product_id: str
    buyer_wallet: str
    amount: Decimal
    unique_barcode_id: str
    purchase_number: int
    created_at: datetime
    status: TransactionStatus = TransactionStatus.PENDING
    nft_id: Optional[str] = None
    tx_hash: Optional[str] = None

    # Set by fulfillment / notification collaborators
    email_sent_at: Optional[datetime] = None
    fulfillment_order_id: Optional[str] = None
    fulfillment_status: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        if self.email_sent_at is not None:
            require_utc_timestamp("email_sent_at", self.email_sent_at)
        if not self.buyer_wallet:
            raise ValueError("buyer_wallet is required")
        if self.purchase_number < 1:
            raise ValueError("purchase_number must be >= 1")

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    def completed(self, *, nft_id: str, tx_hash: str) -> "TransactionRecord":
        """Return a new TransactionRecord marked as completed."""

        if not self.is_pending:
            raise ValueError(
                f"Transaction {self.transaction_id} is already {self.status.value}"
            )
        return replace(
            self,
            status=TransactionStatus.COMPLETED,
            nft_id=nft_id,
            tx_hash=tx_hash,
        )

    def failed(self, *, nft_id: Optional[str] = None) -> "TransactionRecord":
        """
        Return a new TransactionRecord marked as failed.

        nft_id links the failed NFT record, when one was created.
        """

        if not self.is_pending:
            raise ValueError(
                f"Transaction {self.transaction_id} is already {self.status.value}"
            )
        return replace(self, status=TransactionStatus.FAILED, nft_id=nft_id or self.nft_id)

    def with_fulfillment(
        self,
        *,
        order_id: str,
        status: Optional[str] = None,
        email_sent_at: Optional[datetime] = None,
    ) -> "TransactionRecord":
        """Attach fulfillment details; allowed in any status."""

        return replace(
            self,
            fulfillment_order_id=order_id,
            fulfillment_status=status,
            email_sent_at=email_sent_at if email_sent_at is not None else self.email_sent_at,
        )
