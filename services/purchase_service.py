"""
Purchase service for buying a product and minting its NFT.

Handles:
- Validation of the buyer wallet and product
- Atomic inventory reservation through the InventoryLedger
- Pending Transaction + NFT records written before the ledger is contacted
- Minting through the injected MintingCollaborator
- Compensation (records marked failed, reserved unit released) when any step
  after the reservation fails

There is no cross-entity transaction in the record store, so the failure
path is an explicit compensating action that always runs once a unit has
been reserved and the purchase did not complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from domain.nft import NFTRecord
from domain.product import Product
from domain.time import utc_now
from domain.transaction import TransactionRecord
from repositories.record_store import DuplicateBarcodeError, RecordStore
from services.barcode_service import DEFAULT_MAX_ATTEMPTS, UniqueBarcodeGenerator
from services.errors import InvalidRequestError, MintFailedError, NotFoundError, SoldOutError
from services.inventory_ledger import InventoryLedger
from services.minting_service import (
    DEFAULT_COLLECTION_NAME,
    MintingCollaborator,
    MintRequest,
    MintResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PurchaseResult:
    """
    Result of a completed purchase.

    transaction: the completed TransactionRecord
    nft: the minted NFTRecord (transaction.nft_id == nft.nft_id)
    unique_barcode_id: per-unit barcode printed on the product
    purchase_number: sales count right after this purchase's reservation
    """
    transaction: TransactionRecord
    nft: NFTRecord
    unique_barcode_id: str
    purchase_number: int


def _new_id() -> str:
    return str(uuid4())


class PurchaseOrchestrator:
    """
    Runs one purchase attempt through
    Validating -> Reserving -> Recording -> Minting -> Finalizing.

    This is the only writer of Transaction and NFT status. Product state is
    touched only through the InventoryLedger.
    """

    def __init__(
        self,
        store: RecordStore,
        minter: MintingCollaborator,
        barcode_generator: Optional[UniqueBarcodeGenerator] = None,
        ledger: Optional[InventoryLedger] = None,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        clock: Callable[[], datetime] = utc_now,
        max_barcode_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._store = store
        self._minter = minter
        self._barcodes = barcode_generator or UniqueBarcodeGenerator(store)
        self._ledger = ledger or InventoryLedger(store)
        self._collection_name = collection_name
        self._clock = clock
        self._max_barcode_attempts = max_barcode_attempts

    def purchase(self, product_id: str, buyer_wallet: Optional[str]) -> PurchaseResult:
        """
        Execute a purchase and mint its NFT.

        Process:
        1. Validate buyer wallet and product (no side effects on failure)
        2. Reserve one unit (check availability, then atomic increment)
        3. Record pending Transaction and NFT
        4. Mint through the collaborator
        5. On success mark NFT minted and Transaction completed
        6. On failure mark both failed and release the reserved unit

        Args:
            product_id: Product to buy
            buyer_wallet: Wallet address (or other buyer identifier)

        Returns:
            PurchaseResult with the completed transaction and minted NFT

        Raises:
            InvalidRequestError: buyer_wallet missing, blank or not a string
            NotFoundError: product does not exist
            SoldOutError: inventory limit reached
            MintFailedError: the collaborator failed; compensation has run

        Example:
            orchestrator = PurchaseOrchestrator(store, SimulatedMinter())
            result = orchestrator.purchase(product.product_id, "rBuyerWallet")
            print(f"Unit #{result.purchase_number}: {result.unique_barcode_id}")
        """
        # 1. Validate
        if buyer_wallet is None or (isinstance(buyer_wallet, str) and not buyer_wallet.strip()):
            raise InvalidRequestError("Buyer wallet address required")
        if not isinstance(buyer_wallet, str):
            raise InvalidRequestError("Buyer wallet address must be a string")
        buyer_wallet = buyer_wallet.strip()

        product = self._store.get_product(product_id)
        if product is None:
            raise NotFoundError(product_id)

        # 2. Reserve
        if not self._ledger.is_available(product_id):
            raise SoldOutError(product_id)
        purchase_number = self._ledger.reserve_one(product_id)

        transaction: Optional[TransactionRecord] = None
        nft: Optional[NFTRecord] = None
        completed = False

        try:
            # 3. Record
            transaction = self._record_transaction(product, buyer_wallet, purchase_number)
            unique_barcode_id = transaction.unique_barcode_id
            nft = self._store.create_nft(NFTRecord(nft_id=_new_id(), product_id=product_id))

            # 4. Mint
            mint_result = self._mint(product, unique_barcode_id, purchase_number, buyer_wallet)

            if not mint_result.success:
                raise MintFailedError(mint_result.error or "NFT minting failed")

            # 5. Finalize
            nft = self._store.update_nft(nft.minted(
                token_id=mint_result.token_id,
                owner_wallet=buyer_wallet,
                transaction_hash=mint_result.transaction_hash,
                minted_at=self._clock(),
            ))
            transaction = self._store.update_transaction(transaction.completed(
                nft_id=nft.nft_id,
                tx_hash=mint_result.transaction_hash,
            ))
            completed = True

        finally:
            if not completed:
                self._compensate(product_id, transaction, nft)

        logger.info(
            "Purchase completed: product=%s unit=#%d barcode=%s token=%s",
            product_id,
            purchase_number,
            unique_barcode_id,
            nft.token_id,
        )

        return PurchaseResult(
            transaction=transaction,
            nft=nft,
            unique_barcode_id=unique_barcode_id,
            purchase_number=purchase_number,
        )

    def _record_transaction(
        self,
        product: Product,
        buyer_wallet: str,
        purchase_number: int,
    ) -> TransactionRecord:
        """
        Create the pending transaction under a fresh unit barcode.

        A barcode can pass the existence check and still be taken by a
        concurrent purchase before the insert; the store then raises
        DuplicateBarcodeError and a new barcode is drawn.
        """

        for attempt in range(1, self._max_barcode_attempts + 1):
            candidate = TransactionRecord(
                transaction_id=_new_id(),
                product_id=product.product_id,
                buyer_wallet=buyer_wallet,
                amount=product.price,
                unique_barcode_id=self._barcodes.generate(),
                purchase_number=purchase_number,
                created_at=self._clock(),
            )
            try:
                return self._store.create_transaction(candidate)
            except DuplicateBarcodeError as e:
                logger.warning(
                    "Barcode %s taken at insert (attempt %d/%d)",
                    e.barcode_id,
                    attempt,
                    self._max_barcode_attempts,
                )

        raise RuntimeError(
            f"Could not record a unique barcode after {self._max_barcode_attempts} attempts"
        )

    def _mint(
        self,
        product: Product,
        unique_barcode_id: str,
        purchase_number: int,
        buyer_wallet: str,
    ) -> MintResult:
        """Call the collaborator; any exception counts as a failed mint."""

        request = MintRequest(
            barcode_id=unique_barcode_id,
            product_name=product.name,
            product_id=product.product_id,
            purchase_number=purchase_number,
            buyer_wallet=buyer_wallet,
            collection_name=self._collection_name,
        )

        try:
            return self._minter.mint(request)
        except Exception as e:
            logger.error("Minting collaborator raised for barcode %s: %s", unique_barcode_id, e)
            return MintResult(success=False, error=str(e) or "NFT minting failed")

    def _compensate(
        self,
        product_id: str,
        transaction: Optional[TransactionRecord],
        nft: Optional[NFTRecord],
    ) -> None:
        """
        Mark any pending records failed and release the reserved unit.

        The release runs even if marking the records fails.
        """

        logger.warning(
            "Purchase of product %s failed; compensating (transaction=%s, nft=%s)",
            product_id,
            transaction.transaction_id if transaction else None,
            nft.nft_id if nft else None,
        )

        try:
            if nft is not None and nft.is_pending:
                self._store.update_nft(nft.failed())
            if transaction is not None and transaction.is_pending:
                self._store.update_transaction(
                    transaction.failed(nft_id=nft.nft_id if nft is not None else None)
                )
        finally:
            self._ledger.release_one(product_id)


__all__ = [
    "PurchaseOrchestrator",
    "PurchaseResult",
]
