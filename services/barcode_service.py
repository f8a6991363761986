"""
Per-unit barcode generation.

Each purchased unit gets its own barcode, printed on the garment and stored
on the Transaction as unique_barcode_id. Barcodes are 10 characters of
uppercase letters and digits and do not encode the product or transaction.
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import Callable, Optional

from repositories.record_store import RecordStore

logger = logging.getLogger(__name__)

BARCODE_LENGTH: int = 10
BARCODE_ALPHABET: str = string.ascii_uppercase + string.digits
DEFAULT_MAX_ATTEMPTS: int = 8


def _random_token() -> str:
    return "".join(secrets.choice(BARCODE_ALPHABET) for _ in range(BARCODE_LENGTH))


class BarcodeGenerator:
    """Random barcode source with no knowledge of existing barcodes."""

    def __init__(self, token_source: Optional[Callable[[], str]] = None):
        self._token_source = token_source or _random_token

    def generate(self) -> str:
        token = self._token_source()
        if len(token) != BARCODE_LENGTH or any(c not in BARCODE_ALPHABET for c in token):
            raise ValueError(f"Invalid barcode token: {token!r}")
        return token


class UniqueBarcodeGenerator:
    """
    Barcode generator that rejects candidates already known to the store.

    Candidates colliding with an existing transaction barcode or a product's
    base barcode are discarded and regenerated, up to `max_attempts` times.
    """

    def __init__(
        self,
        store: RecordStore,
        generator: Optional[BarcodeGenerator] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._store = store
        self._generator = generator or BarcodeGenerator()
        self._max_attempts = max_attempts

    def generate(self) -> str:
        """
        Return a barcode not used by any transaction or product.

        Raises:
            RuntimeError: If every attempt collided
        """
        for attempt in range(1, self._max_attempts + 1):
            candidate = self._generator.generate()
            if not self._store.barcode_exists(candidate):
                return candidate
            logger.warning(
                "Barcode collision on attempt %d/%d: %s",
                attempt,
                self._max_attempts,
                candidate,
            )

        raise RuntimeError(
            f"Could not generate a unique barcode after {self._max_attempts} attempts"
        )


__all__ = [
    "BARCODE_ALPHABET",
    "BARCODE_LENGTH",
    "DEFAULT_MAX_ATTEMPTS",
    "BarcodeGenerator",
    "UniqueBarcodeGenerator",
]
