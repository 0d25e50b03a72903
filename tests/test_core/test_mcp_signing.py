"""Tests for the SignedFrame audit signer in talos_core.core.mcp."""
from __future__ import annotations

import dataclasses
import json
import time

import pytest

from talos_core.core.mcp import SignedFrame, sign_mcp_request, verify_mcp_response
from talos_core.core.wallet import Wallet
from talos_core.crypto import ed25519
from talos_core.errors import CanonicalizationError

SEED = b"\x02" * 32
TIMESTAMP = 1_700_000_000
REQUEST = {"jsonrpc": "2.0", "id": "req-1", "method": "tools/call", "params": {"name": "ls"}}


def _wallet() -> Wallet:
    return Wallet.from_seed(SEED, name="agent")


def _sign(wallet: Wallet, **overrides: object) -> SignedFrame:
    kwargs: dict[str, object] = {
        "request": REQUEST,
        "session_id": "session-1",
        "correlation_id": "corr-1",
        "tool": "files",
        "action": "list",
        "timestamp": TIMESTAMP,
    }
    kwargs.update(overrides)
    return sign_mcp_request(wallet, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


class TestSignMcpRequest:
    def test_deterministic_for_fixed_timestamp(self) -> None:
        wallet = _wallet()
        assert _sign(wallet) == _sign(wallet)

    def test_payload_is_canonical_audit_object(self) -> None:
        frame = _sign(_wallet())
        assert frame.payload == (
            b'{"action":"list","correlation_id":"corr-1",'
            b'"request":{"id":"req-1","jsonrpc":"2.0","method":"tools/call",'
            b'"params":{"name":"ls"}},"session_id":"session-1",'
            b'"timestamp":1700000000,"tool":"files"}'
        )

    def test_metadata(self) -> None:
        wallet = _wallet()
        frame = _sign(wallet)
        assert frame.signer_did == wallet.to_did()
        assert frame.correlation_id == "corr-1"
        assert len(frame.signature) == ed25519.SIGNATURE_SIZE

    def test_timestamp_defaults_to_now(self) -> None:
        before = int(time.time())
        frame = _sign(_wallet(), timestamp=None)
        after = int(time.time())
        assert before <= json.loads(frame.payload)["timestamp"] <= after

    def test_different_action_changes_signature(self) -> None:
        wallet = _wallet()
        assert _sign(wallet).signature != _sign(wallet, action="delete").signature

    def test_null_in_request_rejected(self) -> None:
        with pytest.raises(CanonicalizationError):
            _sign(_wallet(), request={"id": None})

    def test_frame_is_frozen(self) -> None:
        frame = _sign(_wallet())
        with pytest.raises(dataclasses.FrozenInstanceError):
            frame.correlation_id = "corr-2"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class TestVerifyMcpResponse:
    def test_valid_frame_verifies(self) -> None:
        wallet = _wallet()
        assert verify_mcp_response(_sign(wallet), "corr-1", wallet.public_key) is True

    def test_correlation_mismatch_fails(self) -> None:
        wallet = _wallet()
        assert verify_mcp_response(_sign(wallet), "corr-2", wallet.public_key) is False

    def test_outer_correlation_id_is_checked_first(self) -> None:
        wallet = _wallet()
        relabeled = dataclasses.replace(_sign(wallet), correlation_id="corr-2")
        assert verify_mcp_response(relabeled, "corr-1", wallet.public_key) is False

    def test_tampered_payload_fails(self) -> None:
        wallet = _wallet()
        frame = _sign(wallet)
        tampered = dataclasses.replace(
            frame, payload=frame.payload.replace(b'"action":"list"', b'"action":"drop"')
        )
        assert tampered.payload != frame.payload
        assert verify_mcp_response(tampered, "corr-1", wallet.public_key) is False

    def test_tampered_signature_fails(self) -> None:
        wallet = _wallet()
        frame = _sign(wallet)
        flipped = bytes([frame.signature[0] ^ 0x01]) + frame.signature[1:]
        tampered = dataclasses.replace(frame, signature=flipped)
        assert verify_mcp_response(tampered, "corr-1", wallet.public_key) is False

    def test_wrong_key_fails(self) -> None:
        frame = _sign(_wallet())
        other = Wallet.from_seed(b"\x03" * 32)
        assert verify_mcp_response(frame, "corr-1", other.public_key) is False
