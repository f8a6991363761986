"""
Inventory ledger for limited-edition products.

Tracks per-product sales against a fixed cap. This is the only component that
changes Product.sales_count.

Key Features:
- Atomic reservation (the store's conditional increment decides admission)
- Compensating release for reservations whose purchase later failed
- Distinguishable NotFoundError / SoldOutError for callers
"""

from __future__ import annotations

import logging

from repositories.record_store import (
    RESERVATION_NOT_FOUND,
    RecordStore,
)
from services.errors import NotFoundError, SoldOutError

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Per-product sales counter bounded by the inventory limit."""

    def __init__(self, store: RecordStore):
        self._store = store

    def is_available(self, product_id: str) -> bool:
        """
        Check whether at least one unit can still be sold.

        This is advisory only: a concurrent purchase may claim the last unit
        before `reserve_one` runs.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self._store.get_product(product_id)
        if product is None:
            raise NotFoundError(product_id)
        return product.is_available

    def reserve_one(self, product_id: str) -> int:
        """
        Claim one unit and return its purchase number.

        The increment and the limit check happen in one atomic store
        operation, so a stale `is_available` answer cannot oversell.

        Returns:
            The new sales count, which is the 1-indexed purchase number

        Raises:
            NotFoundError: If the product does not exist
            SoldOutError: If the inventory limit has been reached
        """
        outcome = self._store.reserve_product_unit(product_id)

        if outcome.success:
            logger.info(
                "Reserved unit #%s of product %s", outcome.sales_count, product_id
            )
            return int(outcome.sales_count)

        if outcome.error_code == RESERVATION_NOT_FOUND:
            raise NotFoundError(product_id)
        raise SoldOutError(product_id)

    def release_one(self, product_id: str) -> int:
        """
        Undo a reservation after a later purchase step failed.

        Decrements through the same store path used for reservation; the
        count never goes below zero.

        Returns:
            The sales count after the release
        """
        sales_count = self._store.release_product_unit(product_id)
        logger.warning(
            "Released reserved unit of product %s (sales_count now %s)",
            product_id,
            sales_count,
        )
        return sales_count


__all__ = ["InventoryLedger"]
