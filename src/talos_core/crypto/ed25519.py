"""Ed25519 key derivation, signing, and verification.

A thin layer over the ``cryptography`` package's Ed25519 primitives. All key
material is handled as raw bytes so callers can store or transmit keys
without depending on this module's types.

Private key format
------------------
The private key is exactly the 32-byte seed. No hashing or clamping happens
here; the curve implementation expands the seed internally when it signs.
Other implementations of the protocol rely on this, so it must not change.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from talos_core.errors import InvalidInputError

logger = logging.getLogger(__name__)

SEED_SIZE: int = 32
PUBLIC_KEY_SIZE: int = 32
SIGNATURE_SIZE: int = 64


@dataclass(frozen=True)
class KeyPair:
    """An Ed25519 key pair.

    Parameters
    ----------
    public_key:
        The 32-byte raw public key.
    private_key:
        The 32-byte seed. Omitted from ``repr``.
    """

    public_key: bytes
    private_key: bytes = field(repr=False)


def generate_keypair() -> KeyPair:
    """Generate a key pair from 32 bytes of OS randomness."""
    return from_seed(secrets.token_bytes(SEED_SIZE))


def from_seed(seed: bytes) -> KeyPair:
    """Derive a key pair deterministically from a 32-byte *seed*.

    Raises
    ------
    InvalidInputError
        If *seed* is not exactly 32 bytes.
    """
    seed = bytes(seed)
    if len(seed) != SEED_SIZE:
        raise InvalidInputError(
            f"Seed must be exactly {SEED_SIZE} bytes, got {len(seed)}",
            details={"seed_length": len(seed)},
        )
    private_key = Ed25519PrivateKey.from_private_bytes(seed)
    public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return KeyPair(public_key=public_bytes, private_key=seed)


def sign(message: bytes, private_key: bytes) -> bytes:
    """Sign *message* and return the 64-byte signature.

    Raises
    ------
    InvalidInputError
        If *private_key* is not a 32-byte seed.
    """
    private_key = bytes(private_key)
    if len(private_key) != SEED_SIZE:
        raise InvalidInputError(
            f"Private key must be exactly {SEED_SIZE} bytes, got {len(private_key)}",
            details={"private_key_length": len(private_key)},
        )
    return Ed25519PrivateKey.from_private_bytes(private_key).sign(bytes(message))


def verify(signature: bytes, message: bytes, public_key: bytes) -> bool:
    """Return ``True`` only if *signature* over *message* checks out.

    Malformed keys and signatures yield ``False``; this never raises.
    """
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes(public_key))
        key.verify(bytes(signature), bytes(message))
    except InvalidSignature:
        logger.debug("Ed25519 signature did not verify")
        return False
    except (TypeError, ValueError) as exc:
        logger.debug("Ed25519 verification rejected malformed input: %s", exc)
        return False
    return True


__all__ = [
    "KeyPair",
    "PUBLIC_KEY_SIZE",
    "SEED_SIZE",
    "SIGNATURE_SIZE",
    "from_seed",
    "generate_keypair",
    "sign",
    "verify",
]
