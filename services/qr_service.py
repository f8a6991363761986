"""
Verification QR codes.

The QR code printed on each garment encodes the verification URL of its NFT.
Codes use high error correction so they still scan after printing on fabric.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from typing import Optional

import segno

from services.verification_service import verification_url

QR_ERROR_LEVEL: str = "h"
QR_BORDER: int = 2
QR_TARGET_WIDTH: int = 512


@dataclass(frozen=True, slots=True)
class VerificationQRCode:
    """PNG rendering of a verification URL."""
    url: str
    png: bytes

    @property
    def data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.png).decode("ascii")


def make_qr(url: str) -> segno.QRCode:
    return segno.make(url, error=QR_ERROR_LEVEL, micro=False)


def render_qr_code(url: str) -> VerificationQRCode:
    """
    Render `url` as a print-resolution PNG.

    The module scale is the largest that keeps the image within
    QR_TARGET_WIDTH pixels (at least 1).
    """

    qr = make_qr(url)
    modules, _ = qr.symbol_size(scale=1, border=QR_BORDER)
    scale = max(1, QR_TARGET_WIDTH // modules)

    buffer = io.BytesIO()
    qr.save(buffer, kind="png", scale=scale, border=QR_BORDER, dark="#000000", light="#FFFFFF")
    return VerificationQRCode(url=url, png=buffer.getvalue())


def verification_qr_code(token_id: str, public_url: Optional[str] = None) -> VerificationQRCode:
    """QR code for the verify page of `token_id`."""

    return render_qr_code(verification_url(token_id, public_url))


__all__ = [
    "VerificationQRCode",
    "make_qr",
    "render_qr_code",
    "verification_qr_code",
]
