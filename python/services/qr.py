"""
Entry pass QR codes.

The pass identifier is 32 random bytes in hex (64 chars). The image is a
PNG data URL that the SPA shows and the gym's scanner reads back.
"""

import base64
import io
import secrets

import qrcode
from qrcode.constants import ERROR_CORRECT_M

QR_TOKEN_BYTES = 32


def generate_qr_token() -> str:
    return secrets.token_hex(QR_TOKEN_BYTES)


def generate_qr_png(data: str, box_size: int = 8, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_data_url(data: str) -> str:
    encoded = base64.b64encode(generate_qr_png(data)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def new_entry_pass():
    """Return (token, image data URL) for a new booking."""
    token = generate_qr_token()
    return token, qr_data_url(token)
