from __future__ import annotations

import base64
import binascii
import mimetypes

DEFAULT_MIME: str = "application/octet-stream"

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


def guess_file_type(file_name: str) -> str:
    """Guess a MIME type from the file name, falling back to octet-stream."""
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or DEFAULT_MIME


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URL (the inline storage format)."""
    payload = base64.b64encode(data).decode("ascii")
    return f"{_DATA_URL_PREFIX}{mime_type or DEFAULT_MIME}{_BASE64_MARKER}{payload}"


def decode_data_url(content: str) -> bytes:
    """
    Decode inline content back into bytes.

    Content that is not a base64 data URL is treated as UTF-8 text (older clients
    stored plain text files verbatim).
    """
    if content.startswith(_DATA_URL_PREFIX) and _BASE64_MARKER in content:
        payload = content.split(_BASE64_MARKER, 1)[1]
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("inline content is not valid base64") from exc
    return content.encode("utf-8")
