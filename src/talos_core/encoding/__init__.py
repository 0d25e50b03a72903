"""talos_core.encoding: byte codecs and canonical JSON.

Submodules
----------
bytes
    UTF-8 encode/decode and concatenation.
base64url
    Base64URL without padding, used for signatures.
base58
    base58btc, used for ``did:key`` identities.
canonical_json
    The deterministic serializer every hash and signature is computed over.
"""
from __future__ import annotations

from talos_core.encoding.base58 import BASE58_ALPHABET, base58btc_decode, base58btc_encode
from talos_core.encoding.base64url import decode_base64url, encode_base64url
from talos_core.encoding.bytes import bytes_to_utf8, concat_bytes, utf8_to_bytes
from talos_core.encoding.canonical_json import canonicalize, canonicalize_str

__all__ = [
    "BASE58_ALPHABET",
    "base58btc_decode",
    "base58btc_encode",
    "bytes_to_utf8",
    "canonicalize",
    "canonicalize_str",
    "concat_bytes",
    "decode_base64url",
    "encode_base64url",
    "utf8_to_bytes",
]
