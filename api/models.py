"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
JSON field names are camelCase to stay compatible with the storefront client.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from domain.nft import NFTRecord
from domain.product import Product
from domain.transaction import TransactionRecord


# ============================================================================
# Product Models
# ============================================================================

class ProductResponse(BaseModel):
    """Single product in API response."""
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = Field(None, alias="imageUrl")
    barcode_id: str = Field(..., alias="barcodeId")
    sales_count: int = Field(..., alias="salesCount")
    inventory_limit: int = Field(..., alias="inventoryLimit")
    nft_status: str = Field(..., alias="nftStatus")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "0b6f5c1e-3c1d-4a57-9d0e-6a2f3c5b9e10",
                "name": "Genesis Hoodie",
                "description": "Limited edition",
                "price": "120.00",
                "imageUrl": "https://example.com/hoodie.jpg",
                "barcodeId": "GENESIS-001",
                "salesCount": 12,
                "inventoryLimit": 500,
                "nftStatus": "available",
                "createdAt": "2025-01-01T12:00:00Z"
            }
        }

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.product_id,
            name=product.name,
            description=product.description,
            price=product.price,
            image_url=product.image_url,
            barcode_id=product.barcode_id,
            sales_count=product.sales_count,
            inventory_limit=product.inventory_limit,
            nft_status=product.nft_status,
            created_at=product.created_at,
        )


# ============================================================================
# Transaction / NFT Models
# ============================================================================

class TransactionResponse(BaseModel):
    """Purchase transaction in API response."""
    id: str
    product_id: str = Field(..., alias="productId")
    nft_id: Optional[str] = Field(None, alias="nftId")
    buyer_wallet: str = Field(..., alias="buyerWallet")
    amount: Decimal
    tx_hash: Optional[str] = Field(None, alias="txHash")
    status: str
    unique_barcode_id: str = Field(..., alias="uniqueBarcodeId")
    purchase_number: int = Field(..., alias="purchaseNumber")
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_record(cls, transaction: TransactionRecord) -> "TransactionResponse":
        return cls(
            id=transaction.transaction_id,
            product_id=transaction.product_id,
            nft_id=transaction.nft_id,
            buyer_wallet=transaction.buyer_wallet,
            amount=transaction.amount,
            tx_hash=transaction.tx_hash,
            status=transaction.status.value,
            unique_barcode_id=transaction.unique_barcode_id,
            purchase_number=transaction.purchase_number,
            created_at=transaction.created_at,
        )


class NFTResponse(BaseModel):
    """NFT record in API response."""
    id: str
    product_id: str = Field(..., alias="productId")
    token_id: Optional[str] = Field(None, alias="tokenId")
    owner_wallet: Optional[str] = Field(None, alias="ownerWallet")
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    status: str
    minted_at: Optional[datetime] = Field(None, alias="mintedAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_record(cls, nft: NFTRecord) -> "NFTResponse":
        return cls(
            id=nft.nft_id,
            product_id=nft.product_id,
            token_id=nft.token_id,
            owner_wallet=nft.owner_wallet,
            transaction_hash=nft.transaction_hash,
            status=nft.status.value,
            minted_at=nft.minted_at,
        )


# ============================================================================
# Purchase Models
# ============================================================================

class PurchaseRequest(BaseModel):
    """Request to buy one unit of a product."""
    buyer_wallet: Optional[str] = Field(
        None,
        alias="buyerWallet",
        description="Wallet address that will own the minted NFT"
    )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "buyerWallet": "rTestWallet111111111111111111"
            }
        }


class PurchaseResponse(BaseModel):
    """Response after a successful purchase and mint."""
    success: bool = True
    transaction: TransactionResponse
    nft: NFTResponse
    unique_barcode_id: str = Field(..., alias="uniqueBarcodeId")
    purchase_number: int = Field(..., alias="purchaseNumber")
    verification_url: Optional[str] = Field(None, alias="verificationUrl")
    qr_code: Optional[str] = Field(
        None,
        alias="qrCode",
        description="PNG data URL of the verification QR code printed on the unit"
    )

    class Config:
        populate_by_name = True


# ============================================================================
# Verification Models
# ============================================================================

class VerifiedProduct(BaseModel):
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")

    class Config:
        populate_by_name = True


class VerifiedTransaction(BaseModel):
    purchase_date: datetime = Field(..., alias="purchaseDate")
    amount: Decimal
    status: str
    unique_barcode_id: str = Field(..., alias="uniqueBarcodeId")
    purchase_number: int = Field(..., alias="purchaseNumber")

    class Config:
        populate_by_name = True


class VerificationResponse(BaseModel):
    """Response for NFT verification lookups."""
    success: bool = True
    verified: bool
    nft: NFTResponse
    product: Optional[VerifiedProduct] = None
    transaction: Optional[VerifiedTransaction] = None
    verification_url: str = Field(..., alias="verificationUrl")

    class Config:
        populate_by_name = True


class NetworkStatusResponse(BaseModel):
    connected: bool


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Product sold out - inventory limit reached"
            }
        }


class MintFailureResponse(BaseModel):
    """Response when the NFT could not be minted."""
    success: bool = False
    error: str


__all__ = [
    "ErrorResponse",
    "MintFailureResponse",
    "NFTResponse",
    "NetworkStatusResponse",
    "ProductResponse",
    "PurchaseRequest",
    "PurchaseResponse",
    "TransactionResponse",
    "VerificationResponse",
    "VerifiedProduct",
    "VerifiedTransaction",
]
