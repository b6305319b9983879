"""Best-effort decoding of embedded attribute values (user_data and friends).

Tries base64 (standard, URL-safe, padded and unpadded), transparently
gunzips base64 payloads that carry the gzip magic, then falls back to hex.
Decoded bytes are only accepted as display text when they are valid UTF-8
and free of NUL bytes.

Decoding only ever improves display. try_decode() fails closed: any
failure, including an unexpected internal fault, yields None.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import logging
import string
import zlib

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"
_HEX_DIGITS = frozenset(string.hexdigits)


def _decode_std(s: str) -> bytes:
    return base64.b64decode(s, validate=True)


def _decode_url(s: str) -> bytes:
    return base64.b64decode(s, altchars=b"-_", validate=True)


def _pad(s: str) -> str:
    if "=" in s:
        raise binascii.Error("unpadded alphabet does not allow '='")
    return s + "=" * (-len(s) % 4)


# [LAW:one-source-of-truth] Variant order: padded before raw, std before URL.
_BASE64_VARIANTS = (
    ("std", _decode_std),
    ("url", _decode_url),
    ("raw-std", lambda s: _decode_std(_pad(s))),
    ("raw-url", lambda s: _decode_url(_pad(s))),
)


def is_placeholder(value: str) -> bool:
    """Values that stand in for content rather than being content."""
    return value == "" or value == "null" or value.startswith("(")


def unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def strip_base64_whitespace(value: str) -> str:
    return value.replace("\n", "").replace("\r", "").replace(" ", "")


def _gunzip(raw: bytes) -> bytes | None:
    if not raw.startswith(_GZIP_MAGIC):
        return None
    try:
        return gzip.decompress(raw)
    except (OSError, EOFError, zlib.error):
        return None


def _try_base64(value: str) -> bytes | None:
    """Decode with the first variant that accepts the input."""
    for name, decode in _BASE64_VARIANTS:
        try:
            raw = decode(value)
        except (binascii.Error, ValueError):
            continue
        logger.debug("decoded value as %s base64 (%d bytes)", name, len(raw))
        decompressed = _gunzip(raw)
        return decompressed if decompressed is not None else raw
    return None


def _try_hex(value: str) -> bytes | None:
    if len(value) % 2 != 0 or not value or not set(value) <= _HEX_DIGITS:
        return None
    try:
        return bytes.fromhex(value)
    except ValueError:
        return None


def _validate(raw: bytes | None) -> str | None:
    if raw is None or b"\x00" in raw:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def try_decode(value: str) -> str | None:
    """Decode value for display, or None when it is not decodable."""
    try:
        if is_placeholder(value):
            return None
        decoded = _validate(_try_base64(strip_base64_whitespace(value)))
        if decoded is not None:
            return decoded
        return _validate(_try_hex(value))
    except Exception:
        # [LAW:single-enforcer] The decoder is display-only; faults end here.
        logger.debug("decoder fault on %d-char value", len(value), exc_info=True)
        return None
