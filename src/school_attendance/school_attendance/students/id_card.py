from __future__ import annotations

import io
from typing import BinaryIO

import qrcode
from PIL import Image

PHOTO_MAX_SIZE = (400, 400)


def student_qr_png(student_id: str) -> bytes:
    """PNG QR code encoding the student identifier, as scanned at the gate."""

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(student_id)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def normalize_photo(stream: BinaryIO) -> bytes:
    """Downscale an uploaded photo to a JPEG that fits the ID card."""

    img = Image.open(stream).convert("RGB")
    img.thumbnail(PHOTO_MAX_SIZE)
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=85)
    return buf.getvalue()
