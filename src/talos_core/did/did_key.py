"""``did:key`` identities for Ed25519 public keys.

Encoding
--------
1. Take the 32-byte raw Ed25519 public key.
2. Prepend the Ed25519 multicodec prefix ``0xed 0x01``.
3. Encode the 34-byte result with base58btc.
4. Prefix with ``did:key:z`` (``z`` is the multibase tag for base58btc).

The identifier is purely representational. Holding a DID says nothing about
whether its key should be trusted.
"""
from __future__ import annotations

from talos_core.crypto.ed25519 import PUBLIC_KEY_SIZE
from talos_core.encoding.base58 import base58btc_decode, base58btc_encode
from talos_core.errors import InvalidInputError

ED25519_MULTICODEC_PREFIX: bytes = b"\xed\x01"
DID_KEY_PREFIX: str = "did:key:z"


def public_key_to_did(public_key: bytes) -> str:
    """Encode a raw Ed25519 public key as ``did:key:z<base58btc>``.

    Raises
    ------
    InvalidInputError
        If *public_key* is not 32 bytes.
    """
    public_key = bytes(public_key)
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise InvalidInputError(
            f"Public key must be exactly {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}",
            details={"public_key_length": len(public_key)},
        )
    return DID_KEY_PREFIX + base58btc_encode(ED25519_MULTICODEC_PREFIX + public_key)


def validate_did_key_format(did: str) -> None:
    """Raise :class:`InvalidInputError` if *did* is not ``did:key:z<...>``."""
    if not isinstance(did, str) or not did.startswith(DID_KEY_PREFIX):
        raise InvalidInputError(
            f"Invalid did:key format: {did!r}. "
            "Expected format: did:key:z<base58btc-encoded-public-key>"
        )
    if not did[len(DID_KEY_PREFIX):]:
        raise InvalidInputError(
            f"Invalid did:key format: {did!r}. The encoded key portion is empty."
        )


def did_to_public_key(did: str) -> bytes:
    """Recover the 32-byte Ed25519 public key from a ``did:key`` string.

    Raises
    ------
    InvalidInputError
        If the DID is malformed, uses a non-Ed25519 multicodec prefix, or
        does not carry a 32-byte key.
    """
    validate_did_key_format(did)
    decoded = base58btc_decode(did[len(DID_KEY_PREFIX):])
    if not decoded.startswith(ED25519_MULTICODEC_PREFIX):
        raise InvalidInputError(
            f"Unsupported multicodec prefix 0x{decoded[:2].hex()} in DID {did!r}. "
            "Only Ed25519 (0xed01) keys are supported."
        )
    public_key = decoded[len(ED25519_MULTICODEC_PREFIX):]
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise InvalidInputError(
            f"DID {did!r} encodes a {len(public_key)}-byte key, expected {PUBLIC_KEY_SIZE}"
        )
    return public_key


__all__ = [
    "DID_KEY_PREFIX",
    "ED25519_MULTICODEC_PREFIX",
    "did_to_public_key",
    "public_key_to_did",
    "validate_did_key_format",
]
