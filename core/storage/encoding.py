# Path: core/storage/encoding.py
# Purpose: Convert raw image buffers to validated base64 and back.
# Layer: core/storage.
# Details: Validation checks charset, padding, and length modulo 4 before a payload is accepted for storage.

from __future__ import annotations

import base64
import binascii
import re

from core.errors import EncodingFailure

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")


def is_valid_base64(text: str) -> bool:
    """Return True when text is non-empty, well-formed, padded base64."""

    if not isinstance(text, str) or not text:
        return False
    if not _BASE64_RE.match(text):
        return False
    if len(text) % 4 != 0:
        return False
    try:
        base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def encode_image(buffer: bytes | bytearray | memoryview) -> str:
    """Encode an image buffer to base64, failing hard on empty or non-binary input."""

    if not isinstance(buffer, (bytes, bytearray, memoryview)):
        raise EncodingFailure(f"Image data must be binary, got {type(buffer).__name__}")
    raw = bytes(buffer)
    if not raw:
        raise EncodingFailure("Image data is empty")

    encoded = base64.b64encode(raw).decode("ascii")
    if not is_valid_base64(encoded):
        raise EncodingFailure("Encoded image failed base64 validation")
    return encoded


def decode_base64(text: str | bytes) -> bytes:
    """Decode strict base64, raising EncodingFailure for malformed input."""

    if isinstance(text, bytes):
        try:
            text = text.decode("ascii").strip()
        except UnicodeDecodeError as exc:
            raise EncodingFailure("Base64 payload contains non-ASCII bytes") from exc
    if not is_valid_base64(text):
        raise EncodingFailure("Malformed base64 payload")
    return base64.b64decode(text, validate=True)


__all__ = ["decode_base64", "encode_image", "is_valid_base64"]
