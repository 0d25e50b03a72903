"""talos_core.core: capabilities, frames, envelopes, and their collaborators.

Submodules
----------
capability
    Signed capability grants: hash, sign, verify.
frames
    ``MCP_MESSAGE`` / ``MCP_RESPONSE`` models, strictness, sign, verify.
mcp
    Request/response hash binding and the :class:`SignedFrame` audit signer.
envelope
    Frame content builders and the signer-driven ``build_signed_*`` helpers.
wallet
    The :class:`Signer` interface and the in-memory :class:`Wallet`.
store
    :class:`CapabilityStore`, the capability-lookup collaborator.
"""
from __future__ import annotations

from talos_core.core.capability import (
    Capability,
    capability_to_wire,
    compute_capability_hash,
    is_expired,
    sign_capability,
    verify_capability,
)
from talos_core.core.envelope import (
    build_signed_message,
    build_signed_response,
    create_envelope,
    create_envelope_content,
    create_response_content,
    verify_envelope,
)
from talos_core.core.frames import (
    MCP_MESSAGE,
    MCP_MESSAGE_FIELDS,
    MCP_RESPONSE,
    MCP_RESPONSE_FIELDS,
    McpMessageFrame,
    McpResponseFrame,
    parse_frame,
    seal_frame,
    sign_frame,
    validate_frame_strict,
    verify_frame,
)
from talos_core.core.mcp import (
    SignedFrame,
    canonicalize_mcp_request,
    compute_request_hash,
    compute_response_hash,
    sign_mcp_request,
    verify_mcp_response,
    verify_request_binding,
    verify_response_binding,
)
from talos_core.core.store import CapabilityStore, scope_covers
from talos_core.core.wallet import Signer, Wallet

__all__ = [
    # capability
    "Capability",
    "capability_to_wire",
    "compute_capability_hash",
    "is_expired",
    "sign_capability",
    "verify_capability",
    # envelope
    "build_signed_message",
    "build_signed_response",
    "create_envelope",
    "create_envelope_content",
    "create_response_content",
    "verify_envelope",
    # frames
    "MCP_MESSAGE",
    "MCP_MESSAGE_FIELDS",
    "MCP_RESPONSE",
    "MCP_RESPONSE_FIELDS",
    "McpMessageFrame",
    "McpResponseFrame",
    "parse_frame",
    "seal_frame",
    "sign_frame",
    "validate_frame_strict",
    "verify_frame",
    # mcp
    "SignedFrame",
    "canonicalize_mcp_request",
    "compute_request_hash",
    "compute_response_hash",
    "sign_mcp_request",
    "verify_mcp_response",
    "verify_request_binding",
    "verify_response_binding",
    # collaborators
    "CapabilityStore",
    "Signer",
    "Wallet",
    "scope_covers",
]
