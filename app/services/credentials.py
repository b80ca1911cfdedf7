# File: app/services/credentials.py
import base64
import io
import secrets
import string
from typing import Optional
import qrcode
from app.core.config import settings

TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
MIN_TOKEN_LENGTH = 20


def generate_token(length: Optional[int] = None) -> str:
    """
    Mint an opaque credential token.

    Tokens are drawn uniformly from a mixed-case alphanumeric alphabet and
    carry no ordering information. Uniqueness is enforced by the store.
    """
    length = length or settings.CREDENTIAL_TOKEN_LENGTH
    if length < MIN_TOKEN_LENGTH:
        raise ValueError(f"Credential tokens must be at least {MIN_TOKEN_LENGTH} characters")
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def credential_url(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/r/{token}"


def qr_data_url(token: str) -> str:
    """Render the credential link as a base64 PNG data URL"""
    qr = qrcode.QRCode(version=1, box_size=10, border=2)
    qr.add_data(credential_url(token))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    img_buffer = io.BytesIO()
    img.save(img_buffer, format="PNG")
    img_str = base64.b64encode(img_buffer.getvalue()).decode()
    return f"data:image/png;base64,{img_str}"


def qr_png_bytes(token: str) -> bytes:
    """Same QR image as raw PNG bytes, for email attachments"""
    img = qrcode.make(credential_url(token))
    img_buffer = io.BytesIO()
    img.save(img_buffer, format="PNG")
    return img_buffer.getvalue()
