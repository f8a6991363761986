"""
Collaborator wiring for the API.

The record store and minter are built once per process from environment
variables; the orchestrator is assembled per request from them. Tests swap
any of these with `app.dependency_overrides`.

Environment variables:
- RECORD_STORE: "memory" (default) or "supabase"
- MINTER: "simulated" (default) or "xrpl"
- XRPL_RPC_URL: JSON-RPC endpoint (default: XRPL testnet)
- XRPL_SEED: issuer wallet seed (testnet faucet wallet if unset)
- NFT_COLLECTION_NAME: collection name written into NFT metadata
"""

from __future__ import annotations

import os
from functools import lru_cache

from fastapi import Depends

from repositories.client import get_supabase
from repositories.memory_store import InMemoryRecordStore
from repositories.record_store import RecordStore
from repositories.supabase_store import SupabaseRecordStore
from services.minting_service import (
    DEFAULT_COLLECTION_NAME,
    XRPL_TESTNET_URL,
    MintingCollaborator,
    SimulatedMinter,
    XrplMinter,
)
from services.purchase_service import PurchaseOrchestrator


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    backend = os.getenv("RECORD_STORE", "memory").strip().lower()

    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "supabase":
        return SupabaseRecordStore(get_supabase())

    raise RuntimeError(
        f"Unsupported RECORD_STORE: {backend!r}. Use 'memory' or 'supabase'."
    )


@lru_cache(maxsize=1)
def get_minter() -> MintingCollaborator:
    backend = os.getenv("MINTER", "simulated").strip().lower()

    if backend == "simulated":
        return SimulatedMinter()
    if backend == "xrpl":
        return XrplMinter(
            rpc_url=os.getenv("XRPL_RPC_URL", XRPL_TESTNET_URL),
            seed=os.getenv("XRPL_SEED") or None,
        )

    raise RuntimeError(
        f"Unsupported MINTER: {backend!r}. Use 'simulated' or 'xrpl'."
    )


def get_purchase_orchestrator(
    store: RecordStore = Depends(get_record_store),
    minter: MintingCollaborator = Depends(get_minter),
) -> PurchaseOrchestrator:
    return PurchaseOrchestrator(
        store,
        minter,
        collection_name=os.getenv("NFT_COLLECTION_NAME", DEFAULT_COLLECTION_NAME),
    )
