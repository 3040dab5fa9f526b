from __future__ import annotations

import asyncio
from io import BytesIO

import qrcode
from qrcode.exceptions import DataOverflowError

from ..shared.errors import CertificateEncodingError


def make_qr_png(url: str) -> bytes:
    """Encode ``url`` as a QR code PNG using the library defaults."""
    try:
        image = qrcode.make(url)
        buffer = BytesIO()
        image.save(buffer, format="PNG")
    except (DataOverflowError, ValueError, TypeError, OSError) as exc:
        raise CertificateEncodingError(
            f"Could not encode verification URL {url!r}"
        ) from exc
    return buffer.getvalue()


async def encode_verification_code(url: str) -> bytes:
    return await asyncio.to_thread(make_qr_png, url)
