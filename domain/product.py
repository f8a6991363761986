"""
Domain: Products (limited-edition designs).

A Product is one sellable design with a fixed inventory cap. Each purchase
consumes one unit; the running total lives in `sales_count`.

Rules implemented here:
- sales_count is never negative and never exceeds inventory_limit.
- A unit is available iff sales_count < inventory_limit.
- nft_status is a display-only aggregate and carries no authority.

Sales count changes happen only through the inventory ledger; this module
only describes the record and its arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .time import require_utc_timestamp

DEFAULT_INVENTORY_LIMIT: int = 500


@dataclass(frozen=True, slots=True)
class Product:
    """
    Immutable snapshot of a product as read from the record store.
    """

    product_id: str
    name: str
    price: Decimal
    barcode_id: str  # base barcode, unique per product
    sales_count: int = 0
    inventory_limit: int = DEFAULT_INVENTORY_LIMIT
    nft_status: str = "available"
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.barcode_id:
            raise ValueError("barcode_id is required")
        if self.price < 0:
            raise ValueError("price must be >= 0")
        if self.inventory_limit < 0:
            raise ValueError("inventory_limit must be >= 0")
        if self.sales_count < 0:
            raise ValueError("sales_count must be >= 0")
        if self.sales_count > self.inventory_limit:
            raise ValueError("sales_count cannot exceed inventory_limit")
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)

    @property
    def is_available(self) -> bool:
        return self.sales_count < self.inventory_limit

    @property
    def remaining(self) -> int:
        return self.inventory_limit - self.sales_count

    def with_one_more_sale(self) -> "Product":
        """
        Return a new Product with one additional sale.

        Raises ValueError when the product is sold out.
        """

        if not self.is_available:
            raise ValueError("Product is sold out")
        return replace(self, sales_count=self.sales_count + 1)

    def with_one_less_sale(self) -> "Product":
        """Return a new Product with one sale removed, floored at zero."""

        return replace(self, sales_count=max(0, self.sales_count - 1))
