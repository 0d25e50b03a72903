"""SHA-256 with an injectable backend.

Two interchangeable backends produce identical digests:

``OpenSSLHashBackend``
    ``cryptography``'s ``hashes.SHA256`` (OpenSSL EVP, uses the CPU's SHA
    extensions where present). This is the default.
``HashlibBackend``
    The standard-library ``hashlib.sha256``.

Callers choose a backend per call through the ``backend`` argument. There
is no process-wide switch, so tests can pin either path deterministically.
"""
from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives import hashes

DIGEST_SIZE: int = 32


@runtime_checkable
class HashBackend(Protocol):
    """Strategy interface for computing a SHA-256 digest."""

    name: str

    def digest(self, data: bytes) -> bytes:
        """Return the 32-byte SHA-256 digest of *data*."""
        ...


class OpenSSLHashBackend:
    """SHA-256 through ``cryptography``'s OpenSSL bindings."""

    name = "openssl"

    def digest(self, data: bytes) -> bytes:
        hasher = hashes.Hash(hashes.SHA256())
        hasher.update(bytes(data))
        return hasher.finalize()


class HashlibBackend:
    """SHA-256 through :mod:`hashlib`."""

    name = "hashlib"

    def digest(self, data: bytes) -> bytes:
        return hashlib.sha256(bytes(data)).digest()


DEFAULT_BACKEND: HashBackend = OpenSSLHashBackend()


def sha256(data: bytes, backend: HashBackend | None = None) -> bytes:
    """Return the raw 32-byte SHA-256 digest of *data*."""
    return (backend or DEFAULT_BACKEND).digest(data)


def sha256_hex(data: bytes, backend: HashBackend | None = None) -> str:
    """Return the SHA-256 digest of *data* as lowercase hex.

    Every hash field on the wire (``request_hash``, ``response_hash``,
    ``capability_hash``) uses this rendering.
    """
    return sha256(data, backend).hex()


__all__ = [
    "DEFAULT_BACKEND",
    "DIGEST_SIZE",
    "HashBackend",
    "HashlibBackend",
    "OpenSSLHashBackend",
    "sha256",
    "sha256_hex",
]
