"""Cross-implementation test vectors.

Every implementation of the protocol must reproduce these artifacts byte for
byte from the same seed, and must reject the negative cases. The directory
layout is::

    meta.json
    positive/capability.json
    positive/capability_content_canonical.bytes
    positive/capability_token_canonical.bytes
    positive/capability_hash.hex
    positive/mcp_request.json
    positive/mcp_request_canonical.bytes
    positive/request_hash.hex
    positive/mcp_response.json
    positive/response_hash.hex
    positive/mcp_message_frame.json
    positive/mcp_response_frame.json
    negative/wrong_sig.json
    negative/non_canonical_json_order.json
    negative/missing_request_binding.json
    negative/unknown_frame_field.json
    replay/duplicate.json

Timestamps are fixed, so generation is deterministic for a given seed.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from talos_core.core.capability import (
    Capability,
    compute_capability_hash,
    sign_capability,
    verify_capability,
)
from talos_core.core.envelope import create_envelope_content, create_response_content
from talos_core.core.frames import sign_frame, verify_frame
from talos_core.core.mcp import (
    canonicalize_mcp_request,
    compute_request_hash,
    compute_response_hash,
    verify_request_binding,
)
from talos_core.crypto import ed25519
from talos_core.crypto.sha256 import sha256
from talos_core.did.did_key import public_key_to_did
from talos_core.encoding.base64url import decode_base64url, encode_base64url
from talos_core.encoding.canonical_json import canonicalize
from talos_core.errors import FrameSchemaError, TalosError
from talos_core.version import PROTOCOL_VERSION

logger = logging.getLogger(__name__)

DEFAULT_SEED: bytes = b"\x01" * ed25519.SEED_SIZE
FIXED_IAT: int = 1_700_000_000
CAPABILITY_TTL: int = 3600

MCP_REQUEST: dict[str, Any] = {
    "jsonrpc": "2.0",
    "id": "req-1",
    "method": "tools/call",
    "params": {"name": "read_file", "arguments": {"path": "/data/report.txt"}},
}

MCP_RESPONSE: dict[str, Any] = {
    "jsonrpc": "2.0",
    "id": "req-1",
    "result": {"content": [{"type": "text", "text": "quarterly numbers"}]},
}


@dataclass(frozen=True)
class VectorBundle:
    """Generated vector files keyed by path relative to the vector root."""

    public_key: bytes
    files: dict[str, bytes] = field(default_factory=dict)

    def load_json(self, relative_path: str) -> Any:
        return json.loads(self.files[relative_path].decode("utf-8"))


@dataclass(frozen=True)
class VectorResult:
    """Outcome of one vector check."""

    name: str
    passed: bool
    detail: str = ""


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def generate_vectors(seed: bytes = DEFAULT_SEED) -> VectorBundle:
    """Build the full vector set from a 32-byte *seed*.

    Raises
    ------
    InvalidInputError
        If *seed* is not 32 bytes.
    """
    issuer = ed25519.from_seed(seed)
    subject = ed25519.from_seed(sha256(seed))
    issuer_did = public_key_to_did(issuer.public_key)

    capability = sign_capability(
        Capability.create(
            iss=issuer_did,
            sub=public_key_to_did(subject.public_key),
            scope="files/read",
            iat=FIXED_IAT,
            ttl_seconds=CAPABILITY_TTL,
            constraints={"path_prefix": "/data"},
            delegatable=False,
        ),
        issuer.private_key,
    )
    cap_wire = capability.to_dict()
    cap_hash = compute_capability_hash(cap_wire)
    request_hash = compute_request_hash(MCP_REQUEST)
    response_hash = compute_response_hash(MCP_RESPONSE)

    message_content = create_envelope_content(
        session_id="session-1",
        correlation_id="corr-1",
        peer_id=issuer_did,
        request_hash=request_hash,
        tool="files",
        method="read",
        capability_hash=cap_hash,
        capability=cap_wire,
        issued_at=FIXED_IAT + 10,
    )
    message_frame = sign_frame(message_content, issuer.private_key)
    response_frame = sign_frame(
        create_response_content(
            session_id="session-1",
            correlation_id="corr-1",
            peer_id=issuer_did,
            response_hash=response_hash,
            tool="files",
            method="read",
            result_code="OK",
            mcp_id=MCP_REQUEST["id"],
            issued_at=FIXED_IAT + 11,
        ),
        issuer.private_key,
    )

    files: dict[str, bytes] = {
        "meta.json": _dump(
            {
                "hash_alg": "sha256",
                "sig_alg": "ed25519",
                "keypair_seed_hex": bytes(seed).hex(),
                "public_key_hex": issuer.public_key.hex(),
                "protocol_version": PROTOCOL_VERSION,
            }
        ),
        "positive/capability.json": _dump(cap_wire),
        "positive/capability_content_canonical.bytes": canonicalize(capability.content()),
        "positive/capability_token_canonical.bytes": canonicalize(cap_wire),
        "positive/capability_hash.hex": cap_hash.encode("ascii"),
        "positive/mcp_request.json": _dump(MCP_REQUEST),
        "positive/mcp_request_canonical.bytes": canonicalize_mcp_request(MCP_REQUEST),
        "positive/request_hash.hex": request_hash.encode("ascii"),
        "positive/mcp_response.json": _dump(MCP_RESPONSE),
        "positive/response_hash.hex": response_hash.encode("ascii"),
        "positive/mcp_message_frame.json": _dump(message_frame),
        "positive/mcp_response_frame.json": _dump(response_frame),
        "negative/wrong_sig.json": _dump(
            {
                "vector_type": "json",
                "expected_denial": "SIGNATURE_INVALID",
                "input": sign_capability(cap_wire, subject.private_key).to_dict(),
            }
        ),
        "negative/non_canonical_json_order.json": _dump(
            {
                "vector_type": "raw_string",
                "expected_denial": "SIGNATURE_INVALID",
                "input": _non_canonical_signed(issuer.private_key),
            }
        ),
        "negative/missing_request_binding.json": _dump(
            {
                "vector_type": "json",
                "expected_denial": "MISSING_REQUEST_BINDING",
                "input": sign_frame(
                    {k: v for k, v in message_content.items() if k != "request_hash"},
                    issuer.private_key,
                ),
            }
        ),
        "negative/unknown_frame_field.json": _dump(
            {
                "vector_type": "json",
                "expected_denial": "FRAME_INVALID",
                "input": {**message_frame, "extra": "x"},
            }
        ),
        "replay/duplicate.json": _dump(
            {
                "vector_type": "json",
                "expected_denial": "REPLAY",
                "input": [message_frame, message_frame],
            }
        ),
    }
    return VectorBundle(public_key=issuer.public_key, files=files)


def write_vectors(bundle: VectorBundle, directory: Path) -> list[Path]:
    """Write *bundle* under *directory*; return the written paths."""
    written: list[Path] = []
    for relative_path, content in sorted(bundle.files.items()):
        target = Path(directory) / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        written.append(target)
    logger.info("Wrote %d vector files to %s", len(written), directory)
    return written


# ---------------------------------------------------------------------------
# Checking
# ---------------------------------------------------------------------------


def check_vectors(directory: Path) -> list[VectorResult]:
    """Re-derive every artifact under *directory* and report per vector.

    A missing or unreadable ``meta.json`` yields a single failed result.
    """
    root = Path(directory)
    try:
        meta = json.loads((root / "meta.json").read_text(encoding="utf-8"))
        keypair = ed25519.from_seed(bytes.fromhex(meta["keypair_seed_hex"]))
    except (OSError, ValueError, KeyError, TalosError) as exc:
        return [VectorResult("meta", False, f"cannot load meta.json: {exc}")]

    public_key = keypair.public_key
    checks: list[tuple[str, Callable[[], bool]]] = [
        ("meta.public_key", lambda: meta.get("public_key_hex") == public_key.hex()),
        (
            "capability.content_canonical",
            lambda: canonicalize(_without_sig(_read_json(root, "positive/capability.json")))
            == _read_bytes(root, "positive/capability_content_canonical.bytes"),
        ),
        (
            "capability.token_canonical",
            lambda: canonicalize(_read_json(root, "positive/capability.json"))
            == _read_bytes(root, "positive/capability_token_canonical.bytes"),
        ),
        (
            "capability.hash",
            lambda: compute_capability_hash(_read_json(root, "positive/capability.json"))
            == _read_hex(root, "positive/capability_hash.hex"),
        ),
        (
            "capability.signature",
            lambda: verify_capability(_read_json(root, "positive/capability.json"), public_key),
        ),
        (
            "mcp_request.canonical",
            lambda: canonicalize_mcp_request(_read_json(root, "positive/mcp_request.json"))
            == _read_bytes(root, "positive/mcp_request_canonical.bytes"),
        ),
        (
            "mcp_request.hash",
            lambda: compute_request_hash(_read_json(root, "positive/mcp_request.json"))
            == _read_hex(root, "positive/request_hash.hex"),
        ),
        (
            "mcp_response.hash",
            lambda: compute_response_hash(_read_json(root, "positive/mcp_response.json"))
            == _read_hex(root, "positive/response_hash.hex"),
        ),
        (
            "mcp_message_frame.signature",
            lambda: verify_frame(_read_json(root, "positive/mcp_message_frame.json"), public_key),
        ),
        (
            "mcp_response_frame.signature",
            lambda: verify_frame(_read_json(root, "positive/mcp_response_frame.json"), public_key),
        ),
        (
            "negative.wrong_sig",
            lambda: not verify_capability(
                _read_json(root, "negative/wrong_sig.json")["input"], public_key
            ),
        ),
        (
            "negative.non_canonical_json_order",
            lambda: not _verify_generic(
                json.loads(_read_json(root, "negative/non_canonical_json_order.json")["input"]),
                public_key,
            ),
        ),
        (
            "negative.missing_request_binding",
            lambda: _check_missing_binding(root, public_key),
        ),
        (
            "negative.unknown_frame_field",
            lambda: _raises_schema_error(
                _read_json(root, "negative/unknown_frame_field.json")["input"], public_key
            ),
        ),
        ("replay.duplicate", lambda: _check_replay(root, public_key)),
    ]

    results = [_run(name, check) for name, check in checks]
    failed = [result.name for result in results if not result.passed]
    if failed:
        logger.warning("%d of %d vectors failed: %s", len(failed), len(results), failed)
    else:
        logger.info("All %d vectors passed", len(results))
    return results


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dump(value: Any) -> bytes:
    return (json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False) + "\n").encode("utf-8")


def _non_canonical_signed(private_key: bytes) -> str:
    # Signed over insertion-ordered, spaced JSON rather than canonical bytes.
    content = {"v": "1", "b_field": "b", "a_field": "a"}
    signature = ed25519.sign(json.dumps(content).encode("utf-8"), private_key)
    return json.dumps({**content, "sig": encode_base64url(signature)})


def _verify_generic(signed: dict[str, Any], public_key: bytes) -> bool:
    sig = signed.pop("sig", None)
    if not isinstance(sig, str):
        return False
    return ed25519.verify(decode_base64url(sig), canonicalize(signed), public_key)


def _raises_schema_error(frame: dict[str, Any], public_key: bytes) -> bool:
    try:
        verify_frame(frame, public_key)
    except FrameSchemaError:
        return True
    return False


def _check_missing_binding(root: Path, public_key: bytes) -> bool:
    # The frame is validly signed; only the request binding is absent.
    frame = _read_json(root, "negative/missing_request_binding.json")["input"]
    request = _read_json(root, "positive/mcp_request.json")
    return (
        "request_hash" not in frame
        and verify_frame(frame, public_key)
        and not verify_request_binding(frame, request)
    )


def _check_replay(root: Path, public_key: bytes) -> bool:
    vector = _read_json(root, "replay/duplicate.json")
    frames = vector["input"]
    if vector.get("expected_denial") != "REPLAY" or len(frames) != 2:
        return False
    first, second = frames
    return (
        verify_frame(first, public_key)
        and verify_frame(second, public_key)
        and first["correlation_id"] == second["correlation_id"]
    )


def _without_sig(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key != "sig"}


def _read_json(root: Path, relative_path: str) -> Any:
    return json.loads((root / relative_path).read_text(encoding="utf-8"))


def _read_bytes(root: Path, relative_path: str) -> bytes:
    return (root / relative_path).read_bytes()


def _read_hex(root: Path, relative_path: str) -> str:
    return (root / relative_path).read_text(encoding="ascii").strip()


def _run(name: str, check: Callable[[], bool]) -> VectorResult:
    try:
        passed = bool(check())
    except (OSError, ValueError, KeyError, TypeError, TalosError) as exc:
        return VectorResult(name, False, f"{type(exc).__name__}: {exc}")
    return VectorResult(name, passed, "" if passed else "mismatch")


__all__ = [
    "DEFAULT_SEED",
    "FIXED_IAT",
    "VectorBundle",
    "VectorResult",
    "check_vectors",
    "generate_vectors",
    "write_vectors",
]
