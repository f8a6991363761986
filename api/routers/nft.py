"""
NFT API Endpoints.

Public verification of printed QR codes and ledger connectivity status.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_minter, get_record_store
from api.models import (
    ErrorResponse,
    NetworkStatusResponse,
    NFTResponse,
    VerificationResponse,
    VerifiedProduct,
    VerifiedTransaction,
)
from domain.nft import NFTStatus
from repositories.record_store import RecordStore
from services.minting_service import MintingCollaborator
from services.verification_service import verify_token

router = APIRouter()


@router.get(
    "/nft/verify/{token_id}",
    response_model=VerificationResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Verify NFT",
    description="Resolve a token id (from a scanned QR code) to its product and purchase."
)
def verify_nft(token_id: str, store: RecordStore = Depends(get_record_store)):
    result = verify_token(store, token_id)
    if result is None:
        return JSONResponse(
            status_code=404,
            content={"error": "NFT not found or invalid Token ID"}
        )

    product = None
    if result.product is not None:
        product = VerifiedProduct(
            name=result.product.name,
            description=result.product.description,
            image_url=result.product.image_url,
        )

    transaction = None
    if result.transaction is not None:
        transaction = VerifiedTransaction(
            purchase_date=result.transaction.created_at,
            amount=result.transaction.amount,
            status=result.transaction.status.value,
            unique_barcode_id=result.transaction.unique_barcode_id,
            purchase_number=result.transaction.purchase_number,
        )

    return VerificationResponse(
        verified=result.nft.status == NFTStatus.MINTED,
        nft=NFTResponse.from_record(result.nft),
        product=product,
        transaction=transaction,
        verification_url=result.verification_url,
    )


@router.get(
    "/network/status",
    response_model=NetworkStatusResponse,
    summary="Ledger Network Status",
)
def network_status(minter: MintingCollaborator = Depends(get_minter)):
    return NetworkStatusResponse(connected=minter.check_connection())
