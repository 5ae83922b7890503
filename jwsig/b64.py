"""Strict Base64 encoding in its URL-safe unpadded and standard padded forms."""

from __future__ import annotations

import base64
import binascii
import re

_URLSAFE = re.compile(r"[A-Za-z0-9_-]*")
_STANDARD = re.compile(
    r"(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?"
)


class DecodeError(ValueError):
    """Raised when text is not valid, canonical Base64."""


def _as_text(text) -> str:
    if isinstance(text, (bytes, bytearray, memoryview)):
        try:
            return bytes(text).decode("ascii")
        except UnicodeDecodeError as exc:
            raise DecodeError("base64 text must be ASCII") from exc
    if not isinstance(text, str):
        raise DecodeError(f"cannot decode {type(text).__name__} as base64")
    return text


def encode_urlsafe(data) -> str:
    """Encode bytes as URL-safe Base64 without padding."""
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def decode_urlsafe(text) -> bytes:
    """Decode URL-safe unpadded Base64, rejecting any non-canonical form."""
    text = _as_text(text)
    if not _URLSAFE.fullmatch(text) or len(text) % 4 == 1:
        raise DecodeError("invalid url-safe base64")
    try:
        data = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("invalid url-safe base64") from exc
    if encode_urlsafe(data) != text:
        raise DecodeError("non-canonical url-safe base64")
    return data


def encode_standard(data) -> str:
    """Encode bytes as standard padded Base64."""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode_standard(text) -> bytes:
    """Decode standard padded Base64, rejecting any non-canonical form."""
    text = _as_text(text)
    if not _STANDARD.fullmatch(text):
        raise DecodeError("invalid standard base64")
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("invalid standard base64") from exc
    if encode_standard(data) != text:
        raise DecodeError("non-canonical standard base64")
    return data