"""
Products API Endpoints.

Read-only catalog endpoints for the storefront.
"""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_record_store
from api.models import ErrorResponse, ProductResponse
from repositories.record_store import RecordStore

router = APIRouter()


@router.get(
    "/products",
    response_model=List[ProductResponse],
    summary="List Products",
    description="List every product with its sales count and inventory limit."
)
def list_products(store: RecordStore = Depends(get_record_store)):
    return [ProductResponse.from_product(p) for p in store.list_products()]


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get Product",
)
def get_product(product_id: str, store: RecordStore = Depends(get_record_store)):
    product = store.get_product(product_id)
    if product is None:
        return JSONResponse(status_code=404, content={"error": "Product not found"})
    return ProductResponse.from_product(product)
