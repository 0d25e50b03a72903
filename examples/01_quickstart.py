#!/usr/bin/env python3
"""Example: Quickstart

Demonstrates issuing a capability, verifying it, and showing that any
change to the signed content breaks the signature.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install talos-core
"""
from __future__ import annotations

import talos_core
from talos_core import (
    Capability,
    canonicalize,
    compute_capability_hash,
    generate_keypair,
    public_key_to_did,
    sign_capability,
    verify_capability,
)


def main() -> None:
    print(f"talos-core version: {talos_core.__version__}")

    # Step 1: Create issuer and subject identities
    issuer = generate_keypair()
    subject = generate_keypair()
    print(f"Issuer DID:  {public_key_to_did(issuer.public_key)}")
    print(f"Subject DID: {public_key_to_did(subject.public_key)}")

    # Step 2: Issue a one-hour capability
    content = Capability.create(
        iss=public_key_to_did(issuer.public_key),
        sub=public_key_to_did(subject.public_key),
        scope="files/read",
        constraints={"path_prefix": "/data"},
    )
    grant = sign_capability(content, issuer.private_key)
    print(f"Canonical content: {canonicalize(grant.content()).decode()}")
    print(f"Capability hash:   {compute_capability_hash(grant)}")

    # Step 3: Verify
    print(f"Signature valid:   {verify_capability(grant, issuer.public_key)}")

    # Step 4: Tamper with the scope
    tampered = {**grant.to_dict(), "scope": "files/write"}
    print(f"Tampered valid:    {verify_capability(tampered, issuer.public_key)}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
