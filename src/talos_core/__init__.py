"""talos-core: canonical JSON, Ed25519 capabilities and signed MCP frames.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import talos_core
>>> talos_core.__version__
'1.0.0'

Quick start
-----------
::

    from talos_core import (
        Capability, CapabilityStore, Wallet, generate_keypair, public_key_to_did,
        sign_capability, verify_capability, build_signed_message, verify_frame,
    )

    issuer = generate_keypair()
    agent = Wallet.generate(name="agent")
    grant = sign_capability(
        Capability.create(
            iss=public_key_to_did(issuer.public_key), sub=agent.to_did(), scope="files/read"
        ),
        issuer.private_key,
    )
    assert verify_capability(grant, issuer.public_key)

    frame = build_signed_message(
        agent, request, session_id="s-1", correlation_id="c-1",
        tool="files", method="read", capabilities=CapabilityStore([grant]),
    )
    assert verify_frame(frame, agent.public_key)
"""
from __future__ import annotations

from talos_core.version import (
    CAPABILITY_VERSION,
    PROTOCOL_VERSION,
    SDK_VERSION,
    SUPPORTED_PROTOCOL_RANGE,
)

__version__: str = SDK_VERSION

from talos_core.errors import (
    CanonicalizationError,
    FrameSchemaError,
    InvalidInputError,
    TalosError,
    TalosInvalidCapabilityError,
)

# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------
from talos_core.encoding import (
    base58btc_decode,
    base58btc_encode,
    bytes_to_utf8,
    canonicalize,
    canonicalize_str,
    concat_bytes,
    decode_base64url,
    encode_base64url,
    utf8_to_bytes,
)

# ------------------------------------------------------------------
# Crypto
# ------------------------------------------------------------------
from talos_core.crypto import ed25519
from talos_core.crypto.ed25519 import KeyPair, generate_keypair
from talos_core.crypto.sha256 import (
    HashBackend,
    HashlibBackend,
    OpenSSLHashBackend,
    sha256,
    sha256_hex,
)

# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------
from talos_core.did import did_to_public_key, public_key_to_did, validate_did_key_format

# ------------------------------------------------------------------
# Capabilities, frames and envelopes
# ------------------------------------------------------------------
from talos_core.core import (
    MCP_MESSAGE,
    MCP_MESSAGE_FIELDS,
    MCP_RESPONSE,
    MCP_RESPONSE_FIELDS,
    Capability,
    CapabilityStore,
    McpMessageFrame,
    McpResponseFrame,
    SignedFrame,
    Signer,
    Wallet,
    build_signed_message,
    build_signed_response,
    canonicalize_mcp_request,
    compute_capability_hash,
    compute_request_hash,
    compute_response_hash,
    create_envelope,
    create_envelope_content,
    create_response_content,
    is_expired,
    parse_frame,
    sign_capability,
    sign_frame,
    sign_mcp_request,
    validate_frame_strict,
    verify_capability,
    verify_envelope,
    verify_frame,
    verify_mcp_response,
    verify_request_binding,
    verify_response_binding,
)

__all__ = [
    "__version__",
    # version
    "CAPABILITY_VERSION",
    "PROTOCOL_VERSION",
    "SDK_VERSION",
    "SUPPORTED_PROTOCOL_RANGE",
    # errors
    "CanonicalizationError",
    "FrameSchemaError",
    "InvalidInputError",
    "TalosError",
    "TalosInvalidCapabilityError",
    # encoding
    "base58btc_decode",
    "base58btc_encode",
    "bytes_to_utf8",
    "canonicalize",
    "canonicalize_str",
    "concat_bytes",
    "decode_base64url",
    "encode_base64url",
    "utf8_to_bytes",
    # crypto
    "HashBackend",
    "HashlibBackend",
    "KeyPair",
    "OpenSSLHashBackend",
    "ed25519",
    "generate_keypair",
    "sha256",
    "sha256_hex",
    # identity
    "did_to_public_key",
    "public_key_to_did",
    "validate_did_key_format",
    # capabilities, frames, envelopes
    "MCP_MESSAGE",
    "MCP_MESSAGE_FIELDS",
    "MCP_RESPONSE",
    "MCP_RESPONSE_FIELDS",
    "Capability",
    "CapabilityStore",
    "McpMessageFrame",
    "McpResponseFrame",
    "SignedFrame",
    "Signer",
    "Wallet",
    "build_signed_message",
    "build_signed_response",
    "canonicalize_mcp_request",
    "compute_capability_hash",
    "compute_request_hash",
    "compute_response_hash",
    "create_envelope",
    "create_envelope_content",
    "create_response_content",
    "is_expired",
    "parse_frame",
    "sign_capability",
    "sign_frame",
    "sign_mcp_request",
    "validate_frame_strict",
    "verify_capability",
    "verify_envelope",
    "verify_frame",
    "verify_mcp_response",
    "verify_request_binding",
    "verify_response_binding",
]
