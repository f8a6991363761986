"""
NFT minting collaborators.

Handles:
- The MintRequest / MintResult data exchanged with the purchase pipeline
- XRP Ledger minting (NFTokenMint) through xrpl-py
- A simulated minter for local development

Collaborators never raise for ledger problems: every failure (network, ledger
rejection, timeout) is reported as MintResult(success=False, error=...).
"""

from __future__ import annotations

import json
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

from xrpl.clients import JsonRpcClient
from xrpl.models.requests import ServerInfo
from xrpl.models.transactions import NFTokenMint, NFTokenMintFlag
from xrpl.transaction import submit_and_wait
from xrpl.utils import str_to_hex
from xrpl.wallet import Wallet, generate_faucet_wallet

from domain.time import utc_now

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME: str = "NFT Streetwear Collection"
XRPL_TESTNET_URL: str = "https://s.altnet.rippletest.net:51234/"

# NFTokenMint URI limit, in bytes before hex encoding
MAX_URI_BYTES: int = 256

# Dropped in this order until the metadata fits the URI
_OPTIONAL_METADATA_KEYS = (
    "network",
    "issuer",
    "collection_name",
    "product_name",
    "minted_at",
    "original_wallet",
)


@dataclass(frozen=True, slots=True)
class MintRequest:
    """
    Data sent to the ledger for one purchased unit.

    barcode_id: per-unit barcode (Transaction.unique_barcode_id)
    purchase_number: 1-indexed sale number for the product
    """
    barcode_id: str
    product_name: str
    product_id: str
    purchase_number: int
    buyer_wallet: Optional[str] = None
    collection_name: str = DEFAULT_COLLECTION_NAME


@dataclass(frozen=True, slots=True)
class MintResult:
    """Result of a mint attempt."""
    success: bool
    token_id: Optional[str] = None
    transaction_hash: Optional[str] = None
    error: Optional[str] = None


class MintingCollaborator(Protocol):
    def mint(self, request: MintRequest) -> MintResult: ...

    def check_connection(self) -> bool: ...


def build_token_metadata(request: MintRequest, issuer: str, network: str) -> dict:
    """Metadata stored (hex-encoded) in the NFToken URI field."""

    return {
        "product_name": request.product_name,
        "product_id": request.product_id,
        "sale_number": request.purchase_number,
        "collection_name": request.collection_name,
        "barcode": request.barcode_id,
        "original_wallet": request.buyer_wallet or "Unclaimed",
        "minted_at": utc_now().isoformat(),
        "issuer": issuer,
        "network": network,
    }


def encode_token_uri(metadata: dict) -> str:
    """
    Hex-encode metadata as compact JSON for the NFToken URI.

    Optional keys are dropped until the payload fits MAX_URI_BYTES; barcode,
    product id and sale number are always kept.
    """

    fields = dict(metadata)
    for key in (None,) + _OPTIONAL_METADATA_KEYS:
        if key is not None:
            fields.pop(key, None)
        encoded = json.dumps(fields, separators=(",", ":"))
        if len(encoded.encode("utf-8")) <= MAX_URI_BYTES:
            return str_to_hex(encoded)

    raise ValueError("NFT metadata does not fit in the URI field")


class XrplMinter:
    """
    Mints one transferable NFToken per purchase on the XRP Ledger.

    The issuer wallet is built from `seed` when given; otherwise a faucet
    wallet is funded on first use (testnet only).
    """

    def __init__(
        self,
        rpc_url: str = XRPL_TESTNET_URL,
        seed: Optional[str] = None,
        network_name: str = "XRP Ledger Testnet",
    ):
        self._client = JsonRpcClient(rpc_url)
        self._seed = seed
        self._network_name = network_name
        self._wallet: Optional[Wallet] = None
        self._wallet_lock = threading.Lock()

    def _issuer_wallet(self) -> Wallet:
        with self._wallet_lock:
            if self._wallet is None:
                if self._seed:
                    self._wallet = Wallet.from_seed(self._seed)
                else:
                    logger.info("No XRPL seed configured; funding a faucet wallet")
                    self._wallet = generate_faucet_wallet(self._client)
            return self._wallet

    def mint(self, request: MintRequest) -> MintResult:
        try:
            wallet = self._issuer_wallet()
            metadata = build_token_metadata(request, wallet.address, self._network_name)

            mint_tx = NFTokenMint(
                account=wallet.address,
                nftoken_taxon=0,
                flags=NFTokenMintFlag.TF_TRANSFERABLE,
                uri=encode_token_uri(metadata),
            )
            response = submit_and_wait(mint_tx, self._client, wallet)
        except Exception as e:
            logger.error("NFT minting error for barcode %s: %s", request.barcode_id, e)
            return MintResult(success=False, error=str(e) or "NFT minting failed - network error")

        result = response.result
        meta = result.get("meta")
        if not isinstance(meta, dict):
            return MintResult(success=False, error="NFT minting failed - no token ID returned")

        engine_result = meta.get("TransactionResult")
        if engine_result and engine_result != "tesSUCCESS":
            return MintResult(success=False, error=f"NFT minting rejected: {engine_result}")

        token_id = meta.get("nftoken_id") or meta.get("NFTokenID")
        if not token_id:
            return MintResult(success=False, error="NFT minting failed - no token ID returned")

        return MintResult(
            success=True,
            token_id=token_id,
            transaction_hash=result.get("hash"),
        )

    def check_connection(self) -> bool:
        try:
            return self._client.request(ServerInfo()).is_successful()
        except Exception as e:
            logger.warning("XRPL network check failed: %s", e)
            return False


class SimulatedMinter:
    """
    Local stand-in for the ledger.

    Token ids and hashes are random 64-character hex strings. Set `fail_with`
    to make every mint fail with that message.
    """

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with

    def mint(self, request: MintRequest) -> MintResult:
        if self.fail_with:
            return MintResult(success=False, error=self.fail_with)
        return MintResult(
            success=True,
            token_id=secrets.token_hex(32).upper(),
            transaction_hash=secrets.token_hex(32).upper(),
        )

    def check_connection(self) -> bool:
        return True


__all__ = [
    "DEFAULT_COLLECTION_NAME",
    "MintRequest",
    "MintResult",
    "MintingCollaborator",
    "SimulatedMinter",
    "XrplMinter",
    "build_token_metadata",
    "encode_token_uri",
]
