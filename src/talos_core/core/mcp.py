"""Bindings between frames and the raw MCP request/response bodies.

A frame never embeds the JSON-RPC body it describes. It carries a hash of
the body's canonical bytes instead, and the frame signature authenticates
that hash. A receiver holding the body recomputes the hash and compares.

:func:`sign_mcp_request` is the lighter audit binding: it signs the request
together with its session, correlation id, tool, action and timestamp, and
returns the signed bytes as a :class:`SignedFrame`.
"""
from __future__ import annotations

import hmac
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from talos_core.core.wallet import Signer
from talos_core.crypto import ed25519
from talos_core.crypto.sha256 import HashBackend, sha256_hex
from talos_core.did.did_key import public_key_to_did
from talos_core.encoding.canonical_json import canonicalize

logger = logging.getLogger(__name__)


def canonicalize_mcp_request(request: Any) -> bytes:
    """Return the canonical bytes of a raw MCP request."""
    return canonicalize(request)


def compute_request_hash(request: Any, backend: HashBackend | None = None) -> str:
    """Return ``hex(sha256(canonicalize(request)))``."""
    return sha256_hex(canonicalize(request), backend)


def compute_response_hash(response: Any, backend: HashBackend | None = None) -> str:
    """Return ``hex(sha256(canonicalize(response)))``."""
    return sha256_hex(canonicalize(response), backend)


def verify_request_binding(
    frame: Mapping[str, Any],
    request: Any,
    backend: HashBackend | None = None,
) -> bool:
    """Return ``True`` if *frame*'s ``request_hash`` matches *request*.

    Does not check the frame signature; call
    :func:`~talos_core.core.frames.verify_frame` for that.
    """
    return _matches(frame, "request_hash", compute_request_hash(request, backend))


def verify_response_binding(
    frame: Mapping[str, Any],
    response: Any,
    backend: HashBackend | None = None,
) -> bool:
    """Return ``True`` if *frame*'s ``response_hash`` matches *response*."""
    return _matches(frame, "response_hash", compute_response_hash(response, backend))


@dataclass(frozen=True)
class SignedFrame:
    """A signed MCP request with its audit bindings.

    Parameters
    ----------
    payload:
        Canonical bytes of ``{action, correlation_id, request, session_id,
        timestamp, tool}``.
    signature:
        The 64-byte Ed25519 signature over *payload*.
    signer_did:
        ``did:key`` of the signer.
    correlation_id:
        Correlation id, repeated outside *payload* for cheap matching.
    """

    payload: bytes
    signature: bytes
    signer_did: str
    correlation_id: str


def sign_mcp_request(
    signer: Signer,
    request: Mapping[str, Any],
    session_id: str,
    correlation_id: str,
    tool: str,
    action: str,
    timestamp: int | None = None,
) -> SignedFrame:
    """Sign *request* together with its session and call metadata.

    Deterministic for fixed inputs; *timestamp* defaults to the current Unix
    time.

    Raises
    ------
    CanonicalizationError
        If *request* has no canonical form.
    """
    payload = canonicalize(
        {
            "action": action,
            "correlation_id": correlation_id,
            "request": request,
            "session_id": session_id,
            "timestamp": int(time.time()) if timestamp is None else timestamp,
            "tool": tool,
        }
    )
    return SignedFrame(
        payload=payload,
        signature=signer.sign(payload),
        signer_did=public_key_to_did(signer.get_public_key()),
        correlation_id=correlation_id,
    )


def verify_mcp_response(
    frame: SignedFrame,
    expected_correlation_id: str,
    public_key: bytes,
) -> bool:
    """Return ``True`` if *frame* answers *expected_correlation_id* and its
    signature verifies under *public_key*.

    The correlation id is compared before any signature math runs.
    """
    if frame.correlation_id != expected_correlation_id:
        logger.debug(
            "Signed frame correlation_id %r does not match %r",
            frame.correlation_id,
            expected_correlation_id,
        )
        return False
    return ed25519.verify(frame.signature, frame.payload, public_key)


def _matches(frame: Mapping[str, Any], field_name: str, computed: str) -> bool:
    declared = frame.get(field_name)
    if not isinstance(declared, str):
        logger.debug("Frame has no %s to compare", field_name)
        return False
    if not hmac.compare_digest(declared.encode("ascii", "replace"), computed.encode("ascii")):
        logger.debug("Frame %s does not match the payload", field_name)
        return False
    return True


__all__ = [
    "SignedFrame",
    "canonicalize_mcp_request",
    "compute_request_hash",
    "compute_response_hash",
    "sign_mcp_request",
    "verify_mcp_response",
    "verify_request_binding",
    "verify_response_binding",
]
