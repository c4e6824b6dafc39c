# qr_codes.py
from io import BytesIO

import qrcode


def render_qr_png(target_url: str) -> bytes:
    """
    Render a QR code that opens the given URL (https://...) as PNG bytes.
    """
    qr_img = qrcode.make(target_url)

    buf = BytesIO()
    qr_img.save(buf)

    return buf.getvalue()
