"""MCP message and response frames.

Two frame variants share a ``type`` discriminator but have disjoint, closed
field sets:

``MCP_MESSAGE``
    A signed request envelope binding ``request_hash`` to a capability.
``MCP_RESPONSE``
    A signed response envelope binding ``response_hash`` to a result code.

Frame strictness
----------------
A frame carrying any top-level key outside its variant's field set is
rejected by :func:`validate_frame_strict` before any signature math runs.
An intermediary cannot smuggle in a field that a lenient verifier would
ignore.

Signing covers the canonical bytes of the frame without ``sig``. The
embedded ``capability`` is signed as part of the frame, exactly as it
appears on the wire.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from talos_core.crypto import ed25519
from talos_core.encoding.base64url import decode_base64url, encode_base64url
from talos_core.encoding.canonical_json import canonicalize
from talos_core.errors import FrameSchemaError, InvalidInputError, summarize_validation_error

logger = logging.getLogger(__name__)

MCP_MESSAGE: str = "MCP_MESSAGE"
MCP_RESPONSE: str = "MCP_RESPONSE"

ResultCode = Literal["OK", "DENY", "ERROR"]


# ---------------------------------------------------------------------------
# Frame models
# ---------------------------------------------------------------------------


class McpMessageFrame(BaseModel):
    """Request envelope for a single tool invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    type: Literal["MCP_MESSAGE"] = "MCP_MESSAGE"
    protocol_version: str
    session_id: str
    correlation_id: str
    peer_id: str
    issued_at: int
    request_hash: str
    tool: str
    method: str
    capability_hash: str
    capability: Optional[dict[str, Any]] = None
    sig: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire mapping; absent optional fields are omitted."""
        return self.model_dump(exclude_none=True)


class McpResponseFrame(BaseModel):
    """Response envelope for a single tool invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    type: Literal["MCP_RESPONSE"] = "MCP_RESPONSE"
    protocol_version: str
    session_id: str
    correlation_id: str
    peer_id: str
    issued_at: int
    response_hash: str
    tool: str
    method: str
    result_code: ResultCode
    denial_reason: Optional[str] = None
    mcp_id: Optional[str] = None
    sig: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire mapping; absent optional fields are omitted."""
        return self.model_dump(exclude_none=True)


Frame = Annotated[Union[McpMessageFrame, McpResponseFrame], Field(discriminator="type")]
FrameLike = Union[McpMessageFrame, McpResponseFrame, Mapping[str, Any]]

MCP_MESSAGE_FIELDS: frozenset[str] = frozenset(McpMessageFrame.model_fields)
MCP_RESPONSE_FIELDS: frozenset[str] = frozenset(McpResponseFrame.model_fields)

_FIELDS_BY_TYPE: dict[str, frozenset[str]] = {
    MCP_MESSAGE: MCP_MESSAGE_FIELDS,
    MCP_RESPONSE: MCP_RESPONSE_FIELDS,
}

_FRAME_ADAPTER: TypeAdapter[Any] = TypeAdapter(Frame)


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def validate_frame_strict(frame: FrameLike) -> None:
    """Reject frames with an unknown ``type`` or any undeclared top-level key.

    Raises
    ------
    FrameSchemaError
        On an unknown ``type`` or an unrecognized field.
    """
    wire = _as_wire(frame)
    frame_type = wire.get("type")
    allowed = _FIELDS_BY_TYPE.get(frame_type) if isinstance(frame_type, str) else None
    if allowed is None:
        logger.warning("Rejected frame with unknown type %r", frame_type)
        raise FrameSchemaError(
            f"Unknown frame type: {frame_type!r}",
            details={"type": repr(frame_type)},
        )
    unknown = sorted(str(key) for key in wire if key not in allowed)
    if unknown:
        logger.warning("Rejected %s frame with unknown fields %s", frame_type, unknown)
        raise FrameSchemaError(
            f"{frame_type} Frame Strictness: Unknown field '{unknown[0]}' rejected",
            details={"type": frame_type, "unknown_fields": unknown},
        )


def parse_frame(data: Mapping[str, Any]) -> Union[McpMessageFrame, McpResponseFrame]:
    """Validate a wire mapping into the frame variant named by its ``type``.

    Raises
    ------
    FrameSchemaError
        On strictness violations, missing fields, or mistyped fields.
    """
    validate_frame_strict(data)
    try:
        return _FRAME_ADAPTER.validate_python(dict(data))
    except ValidationError as exc:
        raise FrameSchemaError(
            f"Malformed {data.get('type')} frame",
            details={"errors": summarize_validation_error(exc)},
        ) from exc


# ---------------------------------------------------------------------------
# Sign / verify
# ---------------------------------------------------------------------------


def sign_frame(content: FrameLike, private_key: bytes) -> dict[str, Any]:
    """Sign frame *content* and return the wire mapping with ``sig`` attached.

    Any ``sig`` already present is discarded first. Works for either variant.

    Raises
    ------
    FrameSchemaError
        If *content* fails the strictness check.
    InvalidInputError
        If *private_key* is malformed.
    """
    return seal_frame(content, lambda data: ed25519.sign(data, private_key))


def seal_frame(content: FrameLike, sign: Callable[[bytes], bytes]) -> dict[str, Any]:
    """Like :func:`sign_frame`, but delegate the signature to *sign*.

    *sign* receives the canonical content bytes and returns the raw 64-byte
    signature, e.g. a :class:`~talos_core.core.wallet.Signer`'s ``sign``.
    """
    wire = _as_wire(content)
    wire.pop("sig", None)
    validate_frame_strict(wire)
    signature = sign(canonicalize(wire))
    return {**wire, "sig": encode_base64url(signature)}


def verify_frame(frame: FrameLike, public_key: bytes) -> bool:
    """Verify a frame's signature against *public_key*.

    The strictness check runs first and fails closed: a frame with an
    unrecognized field raises :class:`FrameSchemaError` whether or not its
    signature would check out. After that, a missing or wrong ``sig`` returns
    ``False``.
    """
    wire = _as_wire(frame)
    validate_frame_strict(wire)

    sig = wire.pop("sig", None)
    if not isinstance(sig, str) or not sig:
        logger.debug(
            "%s frame has no signature; correlation_id=%r",
            wire.get("type"),
            wire.get("correlation_id"),
        )
        return False
    try:
        signature = decode_base64url(sig)
    except InvalidInputError:
        logger.debug("Frame signature is not valid Base64URL")
        return False
    return ed25519.verify(signature, canonicalize(wire), public_key)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_wire(frame: FrameLike) -> dict[str, Any]:
    if isinstance(frame, (McpMessageFrame, McpResponseFrame)):
        return frame.to_dict()
    if isinstance(frame, Mapping):
        return dict(frame)
    raise FrameSchemaError(f"Expected a frame mapping, got {type(frame).__name__}")


__all__ = [
    "Frame",
    "FrameLike",
    "MCP_MESSAGE",
    "MCP_MESSAGE_FIELDS",
    "MCP_RESPONSE",
    "MCP_RESPONSE_FIELDS",
    "McpMessageFrame",
    "McpResponseFrame",
    "ResultCode",
    "parse_frame",
    "seal_frame",
    "sign_frame",
    "validate_frame_strict",
    "verify_frame",
]
