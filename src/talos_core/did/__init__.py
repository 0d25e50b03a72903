"""talos_core.did: DID-style identities derived from public keys."""
from __future__ import annotations

from talos_core.did.did_key import (
    DID_KEY_PREFIX,
    ED25519_MULTICODEC_PREFIX,
    did_to_public_key,
    public_key_to_did,
    validate_did_key_format,
)

__all__ = [
    "DID_KEY_PREFIX",
    "ED25519_MULTICODEC_PREFIX",
    "did_to_public_key",
    "public_key_to_did",
    "validate_did_key_format",
]
