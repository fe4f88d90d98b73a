import base64
import binascii
import logging
from typing import Optional, Tuple

import requests

from overlaykit.core.config import get_settings
from overlaykit.core.errors import FetchError, SizeLimitExceeded

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/"
CHUNK_SIZE = 64 * 1024


def _decode_data_url(url: str, max_bytes: int) -> Tuple[bytes, str]:
    header, sep, payload = url.partition(",")
    if not sep or not header.endswith(";base64"):
        raise FetchError("Invalid base64 image format")
    # base64 expands 3 bytes to 4 characters
    if len(payload) * 3 // 4 > max_bytes:
        raise SizeLimitExceeded(f"Image larger than {max_bytes} bytes")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FetchError(f"Invalid base64 image data: {e}")
    return data, header[len("data:"):-len(";base64")]


def fetch_image(url: str, max_bytes: Optional[int] = None) -> Tuple[bytes, str]:
    """
    Retrieve image bytes from an http(s) URL or an inline data URL.

    Returns (bytes, content type). The response is streamed and abandoned as
    soon as it exceeds `max_bytes`, so oversized payloads are never buffered.
    """
    settings = get_settings()
    max_bytes = max_bytes or settings.MAX_GIF_BYTES

    if url.startswith(DATA_URL_PREFIX):
        return _decode_data_url(url, max_bytes)

    if not url.startswith(("http://", "https://")):
        raise FetchError(f"Invalid image URL format: {url[:100]}")

    try:
        with requests.get(url, stream=True, timeout=settings.FETCH_TIMEOUT_SECONDS) as resp:
            if not resp.ok:
                raise FetchError(f"Failed to fetch image ({resp.status_code} {resp.reason})")

            content_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip()
            if not content_type.startswith("image/"):
                raise FetchError(f"Invalid content type: {content_type or 'missing'}")

            length = resp.headers.get("Content-Length")
            if length and length.isdigit() and int(length) > max_bytes:
                raise SizeLimitExceeded(f"Image larger than {max_bytes} bytes")

            chunks = []
            received = 0
            for chunk in resp.iter_content(CHUNK_SIZE):
                received += len(chunk)
                if received > max_bytes:
                    raise SizeLimitExceeded(f"Image larger than {max_bytes} bytes")
                chunks.append(chunk)
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch image from {url}: {e}")

    logger.info("Fetched %s (%d bytes, %s)", url, received, content_type)
    return b"".join(chunks), content_type


def to_data_url(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"
