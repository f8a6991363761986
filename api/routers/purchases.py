"""
Purchases API Endpoints.

Endpoints for buying a product (which mints its NFT) and listing purchase
transactions.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_purchase_orchestrator, get_record_store
from api.models import (
    ErrorResponse,
    MintFailureResponse,
    NFTResponse,
    PurchaseRequest,
    PurchaseResponse,
    TransactionResponse,
)
from repositories.record_store import RecordStore
from services.errors import InvalidRequestError, MintFailedError, NotFoundError, SoldOutError
from services.purchase_service import PurchaseOrchestrator
from services.qr_service import verification_qr_code
from services.verification_service import verification_url

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/products/{product_id}/purchase",
    response_model=PurchaseResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": MintFailureResponse},
    },
    summary="Purchase Product",
    description="Buy one unit of a limited-edition product and mint its NFT."
)
def purchase_product(
    product_id: str,
    request: Optional[PurchaseRequest] = Body(None),
    orchestrator: PurchaseOrchestrator = Depends(get_purchase_orchestrator),
):
    """
    Purchase one unit and mint the matching NFT.

    **Process:**
    1. Validates the buyer wallet and product
    2. Reserves one unit of inventory
    3. Records a pending transaction and NFT
    4. Mints the NFT on the ledger
    5. Marks the records completed/minted, or failed and releases the unit

    **Example request:**
    ```json
    {"buyerWallet": "rTestWallet111111111111111111"}
    ```

    **Success response:**
    ```json
    {
      "success": true,
      "transaction": {"id": "...", "status": "completed", "uniqueBarcodeId": "K3ZP0Q7M2A", ...},
      "nft": {"id": "...", "status": "minted", "tokenId": "000800...", ...},
      "uniqueBarcodeId": "K3ZP0Q7M2A",
      "purchaseNumber": 13,
      "verificationUrl": "http://localhost:5001/verify/000800...",
      "qrCode": "data:image/png;base64,..."
    }
    ```

    **Errors:** 400 (missing wallet, sold out), 404 (unknown product),
    500 with `success: false` (mint failed; inventory already released).
    """
    try:
        buyer_wallet = request.buyer_wallet if request is not None else None
        result = orchestrator.purchase(product_id, buyer_wallet)

    except (InvalidRequestError, SoldOutError) as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    except NotFoundError as e:
        return JSONResponse(status_code=404, content={"error": str(e)})

    except MintFailedError as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": e.reason}
        )

    except Exception:
        logger.exception("Purchase error for product %s", product_id)
        return JSONResponse(status_code=500, content={"error": "Purchase failed"})

    # The unit is already sold and minted; a rendering failure only drops the image
    qr_code = None
    try:
        qr_code = verification_qr_code(result.nft.token_id)
    except Exception:
        logger.exception("QR code generation failed for token %s", result.nft.token_id)

    return PurchaseResponse(
        transaction=TransactionResponse.from_record(result.transaction),
        nft=NFTResponse.from_record(result.nft),
        unique_barcode_id=result.unique_barcode_id,
        purchase_number=result.purchase_number,
        verification_url=qr_code.url if qr_code else verification_url(result.nft.token_id),
        qr_code=qr_code.data_url if qr_code else None,
    )


@router.get(
    "/transactions",
    response_model=List[TransactionResponse],
    summary="List Transactions",
    description="List every purchase transaction, including failed attempts."
)
def list_transactions(store: RecordStore = Depends(get_record_store)):
    return [TransactionResponse.from_record(t) for t in store.list_transactions()]
