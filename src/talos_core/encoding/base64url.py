"""Base64URL (RFC 4648 section 5) without padding.

Signatures travel in this encoding. Hashes do not: they are lowercase hex
(see :mod:`talos_core.crypto.sha256`).
"""
from __future__ import annotations

import base64
import binascii

from talos_core.errors import InvalidInputError


def encode_base64url(data: bytes) -> str:
    """Encode *data* with the URL-safe alphabet and strip ``=`` padding."""
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def decode_base64url(encoded: str) -> bytes:
    """Decode a Base64URL string; trailing padding is optional.

    Raises
    ------
    InvalidInputError
        If *encoded* contains characters outside the URL-safe alphabet or has
        an impossible length.
    """
    if not isinstance(encoded, str):
        raise InvalidInputError(
            f"Base64URL input must be a string, got {type(encoded).__name__}"
        )
    stripped = encoded.rstrip("=")
    if "+" in stripped or "/" in stripped:
        raise InvalidInputError("Standard Base64 characters are not valid Base64URL")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidInputError(
            "Malformed Base64URL string",
            details={"length": len(encoded)},
        ) from exc


__all__ = ["decode_base64url", "encode_base64url"]
