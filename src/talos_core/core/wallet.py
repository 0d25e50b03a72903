"""Wallet: in-memory holder of an Ed25519 key pair.

The wallet is the reference implementation of the :class:`Signer`
interface that envelope construction consumes. It never persists keys.

Example
-------
::

    wallet = Wallet.generate(name="agent-1")
    signature = wallet.sign(b"payload")
    assert Wallet.verify(b"payload", signature, wallet.public_key)
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from talos_core.crypto import ed25519
from talos_core.crypto.sha256 import HashBackend, sha256_hex
from talos_core.did.did_key import public_key_to_did


@runtime_checkable
class Signer(Protocol):
    """Anything that holds a private key and can sign bytes with it."""

    def get_public_key(self) -> bytes:
        """Return the 32-byte Ed25519 public key."""
        ...

    def sign(self, data: bytes) -> bytes:
        """Return the 64-byte Ed25519 signature over *data*."""
        ...


class Wallet:
    """An Ed25519 identity held in process memory.

    Parameters
    ----------
    keypair:
        The key pair to hold.
    name:
        Optional label, for display only.
    """

    def __init__(self, keypair: ed25519.KeyPair, name: str | None = None) -> None:
        self._keypair = keypair
        self.name = name

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def generate(cls, name: str | None = None) -> "Wallet":
        """Create a wallet with a fresh random key pair."""
        return cls(ed25519.generate_keypair(), name=name)

    @classmethod
    def from_seed(cls, seed: bytes, name: str | None = None) -> "Wallet":
        """Create a wallet deterministically from a 32-byte *seed*.

        Raises
        ------
        InvalidInputError
            If *seed* is not exactly 32 bytes.
        """
        return cls(ed25519.from_seed(seed), name=name)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def public_key(self) -> bytes:
        return self._keypair.public_key

    def get_public_key(self) -> bytes:
        return self._keypair.public_key

    def to_did(self) -> str:
        """Return the ``did:key`` identity for this wallet's public key."""
        return public_key_to_did(self._keypair.public_key)

    def get_address(self, backend: HashBackend | None = None) -> str:
        """Return the lowercase hex SHA-256 of the public key."""
        return sha256_hex(self._keypair.public_key, backend)

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self, data: bytes) -> bytes:
        return ed25519.sign(data, self._keypair.private_key)

    @staticmethod
    def verify(data: bytes, signature: bytes, public_key: bytes) -> bool:
        """Verify *signature* over *data*; never raises."""
        return ed25519.verify(signature, data, public_key)

    def __repr__(self) -> str:
        return f"Wallet(name={self.name!r}, did={self.to_did()!r})"


__all__ = ["Signer", "Wallet"]
