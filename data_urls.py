# data_urls.py

import base64
import binascii
import re
from typing import Optional, Tuple

from compositor import InvalidInput

# Same shape the browser canvas emits: data:image/jpeg;base64,<payload>
DATA_URL_RE = re.compile(r"data:(.+);base64,(.*)")


def decode_data_url(value: Optional[str]) -> Tuple[str, bytes]:
    """
    Split a base64 data URL into (mime_type, raw bytes).
    Raises InvalidInput for anything that does not match.
    """
    match = DATA_URL_RE.fullmatch(value or "")
    if not match:
        raise InvalidInput("invalid photo data URL")

    mime_type, payload = match.group(1), match.group(2)
    # Browsers and some encoders drop the trailing "=" padding.
    payload = payload.rstrip("=")
    payload += "=" * (-len(payload) % 4)
    try:
        raw = base64.b64decode(payload)
    except (binascii.Error, ValueError) as e:
        raise InvalidInput(f"invalid photo data URL: {e}") from e

    return mime_type, raw
