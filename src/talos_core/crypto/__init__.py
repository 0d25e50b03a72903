"""talos_core.crypto: SHA-256 and Ed25519 primitives."""
from __future__ import annotations

from talos_core.crypto.ed25519 import KeyPair, from_seed, generate_keypair, sign, verify
from talos_core.crypto.sha256 import (
    DEFAULT_BACKEND,
    HashBackend,
    HashlibBackend,
    OpenSSLHashBackend,
    sha256,
    sha256_hex,
)

__all__ = [
    "DEFAULT_BACKEND",
    "HashBackend",
    "HashlibBackend",
    "KeyPair",
    "OpenSSLHashBackend",
    "from_seed",
    "generate_keypair",
    "sha256",
    "sha256_hex",
    "sign",
    "verify",
]
