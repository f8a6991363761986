"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so tests can import domain,
repositories, services and api, and provides an in-memory record store plus
a scriptable minting collaborator.
"""

import sys
import threading
from decimal import Decimal
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.product import Product  # noqa: E402
from repositories.memory_store import InMemoryRecordStore  # noqa: E402
from services.minting_service import MintRequest, MintResult  # noqa: E402


class ScriptedMinter:
    """
    Minting collaborator for tests.

    Succeeds with sequential token ids unless `error` is set, in which case
    every mint fails with that message. `raise_with` makes mint raise instead.
    """

    def __init__(self, error: Optional[str] = None, raise_with: Optional[Exception] = None):
        self.error = error
        self.raise_with = raise_with
        self.requests: List[MintRequest] = []
        self._lock = threading.Lock()

    def mint(self, request: MintRequest) -> MintResult:
        with self._lock:
            self.requests.append(request)
            count = len(self.requests)
        if self.raise_with is not None:
            raise self.raise_with
        if self.error is not None:
            return MintResult(success=False, error=self.error)
        return MintResult(
            success=True,
            token_id=f"TOKEN{count:04d}",
            transaction_hash=f"HASH{count:04d}",
        )

    def check_connection(self) -> bool:
        return self.error is None


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def make_product(store):
    """Create and store a product; keyword arguments override defaults."""

    def _make(**overrides) -> Product:
        fields = {
            "product_id": str(uuid4()),
            "name": "Test Tee",
            "price": Decimal("120.00"),
            "barcode_id": f"BASE-{uuid4().hex[:8].upper()}",
            "description": "Limited edition",
            "image_url": "https://example.com/tee.jpg",
        }
        fields.update(overrides)
        return store.create_product(Product(**fields))

    return _make


@pytest.fixture
def minter() -> ScriptedMinter:
    return ScriptedMinter()
