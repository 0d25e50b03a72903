"""Envelope construction: unsigned frame content and signed frames.

In protocol v1 a request envelope *is* an ``MCP_MESSAGE`` frame, so
:func:`create_envelope` and :func:`verify_envelope` are the frame
operations under their envelope names.

The ``build_signed_*`` helpers compose the whole request/response path from
the two collaborators the core consumes: a :class:`Signer` holding the key
and a :class:`CapabilityStore` choosing the capability.
"""
from __future__ import annotations

import logging
import time
from typing import Any

from talos_core.core.capability import (
    CapabilityLike,
    capability_to_wire,
    compute_capability_hash,
)
from talos_core.core.frames import (
    MCP_MESSAGE,
    MCP_RESPONSE,
    ResultCode,
    parse_frame,
    seal_frame,
    sign_frame,
    verify_frame,
)
from talos_core.core.mcp import compute_request_hash, compute_response_hash
from talos_core.core.store import CapabilityStore
from talos_core.core.wallet import Signer
from talos_core.crypto.sha256 import HashBackend
from talos_core.did.did_key import public_key_to_did
from talos_core.errors import TalosInvalidCapabilityError
from talos_core.version import PROTOCOL_VERSION

logger = logging.getLogger(__name__)

create_envelope = sign_frame
verify_envelope = verify_frame


def create_envelope_content(
    session_id: str,
    correlation_id: str,
    peer_id: str,
    request_hash: str,
    tool: str,
    method: str,
    capability_hash: str,
    capability: CapabilityLike | None = None,
    issued_at: int | None = None,
) -> dict[str, Any]:
    """Build unsigned ``MCP_MESSAGE`` content.

    Parameters
    ----------
    session_id, correlation_id:
        Session and request identifiers chosen by the caller.
    peer_id:
        Identity of the signer, usually its ``did:key``.
    request_hash:
        Lowercase hex hash of the raw request (:func:`compute_request_hash`).
    tool, method:
        The invocation being authorized.
    capability_hash:
        Lowercase hex hash of the complete signed capability.
    capability:
        Optional capability to embed verbatim.
    issued_at:
        Unix seconds; defaults to now. Pass a fixed value for reproducible
        output.

    Raises
    ------
    FrameSchemaError
        If any field has the wrong type.
    """
    content: dict[str, Any] = {
        "type": MCP_MESSAGE,
        "protocol_version": PROTOCOL_VERSION,
        "session_id": session_id,
        "correlation_id": correlation_id,
        "peer_id": peer_id,
        "issued_at": _now() if issued_at is None else issued_at,
        "request_hash": request_hash,
        "tool": tool,
        "method": method,
        "capability_hash": capability_hash,
    }
    if capability is not None:
        content["capability"] = capability_to_wire(capability)
    return parse_frame(content).to_dict()


def create_response_content(
    session_id: str,
    correlation_id: str,
    peer_id: str,
    response_hash: str,
    tool: str,
    method: str,
    result_code: ResultCode,
    denial_reason: str | None = None,
    mcp_id: str | None = None,
    issued_at: int | None = None,
) -> dict[str, Any]:
    """Build unsigned ``MCP_RESPONSE`` content.

    Raises
    ------
    FrameSchemaError
        If any field has the wrong type or *result_code* is not one of
        ``"OK"``, ``"DENY"``, ``"ERROR"``.
    """
    content: dict[str, Any] = {
        "type": MCP_RESPONSE,
        "protocol_version": PROTOCOL_VERSION,
        "session_id": session_id,
        "correlation_id": correlation_id,
        "peer_id": peer_id,
        "issued_at": _now() if issued_at is None else issued_at,
        "response_hash": response_hash,
        "tool": tool,
        "method": method,
        "result_code": result_code,
    }
    if denial_reason is not None:
        content["denial_reason"] = denial_reason
    if mcp_id is not None:
        content["mcp_id"] = mcp_id
    return parse_frame(content).to_dict()


def build_signed_message(
    signer: Signer,
    request: Any,
    session_id: str,
    correlation_id: str,
    tool: str,
    method: str,
    capabilities: CapabilityStore,
    issued_at: int | None = None,
    embed_capability: bool = True,
    backend: HashBackend | None = None,
) -> dict[str, Any]:
    """Hash *request*, pick a capability, and return a signed ``MCP_MESSAGE``.

    Raises
    ------
    TalosInvalidCapabilityError
        If *capabilities* holds nothing covering *tool*/*method*.
    """
    capability = capabilities.get(tool, method)
    if capability is None:
        raise TalosInvalidCapabilityError(
            f"No capability covers {tool}/{method}",
            details={"tool": tool, "method": method},
        )
    content = create_envelope_content(
        session_id=session_id,
        correlation_id=correlation_id,
        peer_id=public_key_to_did(signer.get_public_key()),
        request_hash=compute_request_hash(request, backend),
        tool=tool,
        method=method,
        capability_hash=compute_capability_hash(capability, backend),
        capability=capability if embed_capability else None,
        issued_at=issued_at,
    )
    logger.debug("Signing MCP_MESSAGE correlation_id=%s tool=%s", correlation_id, tool)
    return seal_frame(content, signer.sign)


def build_signed_response(
    signer: Signer,
    response: Any,
    session_id: str,
    correlation_id: str,
    tool: str,
    method: str,
    result_code: ResultCode = "OK",
    denial_reason: str | None = None,
    mcp_id: str | None = None,
    issued_at: int | None = None,
    backend: HashBackend | None = None,
) -> dict[str, Any]:
    """Hash *response* and return a signed ``MCP_RESPONSE``."""
    content = create_response_content(
        session_id=session_id,
        correlation_id=correlation_id,
        peer_id=public_key_to_did(signer.get_public_key()),
        response_hash=compute_response_hash(response, backend),
        tool=tool,
        method=method,
        result_code=result_code,
        denial_reason=denial_reason,
        mcp_id=mcp_id,
        issued_at=issued_at,
    )
    logger.debug(
        "Signing MCP_RESPONSE correlation_id=%s result_code=%s", correlation_id, result_code
    )
    return seal_frame(content, signer.sign)


def _now() -> int:
    return int(time.time())


__all__ = [
    "build_signed_message",
    "build_signed_response",
    "create_envelope",
    "create_envelope_content",
    "create_response_content",
    "verify_envelope",
]
