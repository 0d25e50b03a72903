"""Tests for talos_core.cli.main: CLI commands via Click test runner."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from talos_core.cli.main import cli
from talos_core.core.capability import compute_capability_hash, sign_capability
from talos_core.core.frames import sign_frame
from talos_core.crypto import ed25519
from talos_core.crypto.sha256 import sha256_hex
from talos_core.did.did_key import public_key_to_did
from talos_core.vectors import generate_vectors, write_vectors

SEED_HEX = "01" * 32


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def keypair() -> ed25519.KeyPair:
    return ed25519.from_seed(bytes.fromhex(SEED_HEX))


@pytest.fixture()
def capability_content(keypair: ed25519.KeyPair) -> dict[str, Any]:
    return {
        "v": "1",
        "iss": public_key_to_did(keypair.public_key),
        "sub": "did:key:z6MkAgent",
        "scope": "files/read",
        "iat": 1700000000,
        "exp": 1700003600,
    }


def _write_json(path: Path, value: Any) -> str:
    path.write_text(json.dumps(value), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# Root CLI
# ---------------------------------------------------------------------------


class TestRootCLI:
    def test_help_exits_zero(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "capability" in result.output

    def test_version_option(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "talos-core" in result.output.lower()
        assert "Protocol version: 1" in result.output

    def test_log_level_option(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--log-level", "debug", "version"])
        assert result.exit_code == 0

    def test_log_level_from_env(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"], env={"TALOS_LOG_LEVEL": "INFO"})
        assert result.exit_code == 0

    def test_invalid_log_level(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--log-level", "LOUD", "version"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# keygen / did
# ---------------------------------------------------------------------------


class TestKeygenCommand:
    def test_random_keygen(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0
        assert "did:key:z6Mk" in result.output
        assert "Private key" not in result.output

    def test_seeded_keygen(self, runner: CliRunner, keypair: ed25519.KeyPair) -> None:
        result = runner.invoke(cli, ["keygen", "--seed-hex", SEED_HEX])
        assert result.exit_code == 0
        assert keypair.public_key.hex() in result.output
        assert public_key_to_did(keypair.public_key) in result.output

    def test_show_private(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["keygen", "--seed-hex", SEED_HEX, "--show-private"])
        assert result.exit_code == 0
        assert SEED_HEX in result.output

    def test_short_seed_is_typed_error(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["keygen", "--seed-hex", "0102"])
        assert result.exit_code == 1
        assert "TALOS_INVALID_INPUT" in result.output

    def test_non_hex_seed(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["keygen", "--seed-hex", "zz"])
        assert result.exit_code == 2


class TestDidCommand:
    def test_did_for_public_key(self, runner: CliRunner, keypair: ed25519.KeyPair) -> None:
        result = runner.invoke(cli, ["did", keypair.public_key.hex()])
        assert result.exit_code == 0
        assert result.output.strip() == public_key_to_did(keypair.public_key)

    def test_wrong_length(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["did", "abcd"])
        assert result.exit_code == 1
        assert "TALOS_INVALID_INPUT" in result.output


# ---------------------------------------------------------------------------
# canonicalize
# ---------------------------------------------------------------------------


class TestCanonicalizeCommand:
    def test_canonical_output(self, runner: CliRunner, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "v.json", {"b": 1, "a": [True, "x"]})
        result = runner.invoke(cli, ["canonicalize", path])
        assert result.exit_code == 0
        assert result.output.strip() == '{"a":[true,"x"],"b":1}'

    @pytest.mark.parametrize("backend", ["openssl", "hashlib"])
    def test_hash_output(self, runner: CliRunner, tmp_path: Path, backend: str) -> None:
        path = tmp_path / "v.json"
        path.write_text('"abc"', encoding="utf-8")
        result = runner.invoke(cli, ["canonicalize", str(path), "--hash", "--backend", backend])
        assert result.exit_code == 0
        assert result.output.strip() == sha256_hex(b'"abc"')

    def test_null_rejected(self, runner: CliRunner, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "v.json", {"a": None})
        result = runner.invoke(cli, ["canonicalize", path])
        assert result.exit_code == 1
        assert "TALOS_CANONICALIZATION_ERROR" in result.output

    def test_invalid_json(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "v.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli, ["canonicalize", str(path)])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output


# ---------------------------------------------------------------------------
# capability
# ---------------------------------------------------------------------------


class TestCapabilityCommands:
    def test_sign_to_file_then_verify(
        self,
        runner: CliRunner,
        tmp_path: Path,
        keypair: ed25519.KeyPair,
        capability_content: dict[str, Any],
    ) -> None:
        content_path = _write_json(tmp_path / "content.json", capability_content)
        signed_path = tmp_path / "signed.json"
        result = runner.invoke(
            cli,
            [
                "capability",
                "sign",
                content_path,
                "--seed-hex",
                SEED_HEX,
                "--output",
                str(signed_path),
            ],
        )
        assert result.exit_code == 0
        assert "sig" in json.loads(signed_path.read_text(encoding="utf-8"))

        public_key = keypair.public_key.hex()
        result = runner.invoke(
            cli, ["capability", "verify", str(signed_path), "--public-key", public_key]
        )
        assert result.exit_code == 0
        assert "VALID" in result.output

    def test_sign_to_stdout(
        self, runner: CliRunner, tmp_path: Path, capability_content: dict[str, Any]
    ) -> None:
        content_path = _write_json(tmp_path / "content.json", capability_content)
        result = runner.invoke(cli, ["capability", "sign", content_path, "--seed-hex", SEED_HEX])
        assert result.exit_code == 0
        assert json.loads(result.output)["scope"] == "files/read"

    def test_verify_accepts_did(
        self,
        runner: CliRunner,
        tmp_path: Path,
        keypair: ed25519.KeyPair,
        capability_content: dict[str, Any],
    ) -> None:
        signed = sign_capability(capability_content, keypair.private_key).to_dict()
        path = _write_json(tmp_path / "signed.json", signed)
        did = public_key_to_did(keypair.public_key)
        result = runner.invoke(cli, ["capability", "verify", path, "--public-key", did])
        assert result.exit_code == 0

    def test_verify_tampered_is_invalid(
        self,
        runner: CliRunner,
        tmp_path: Path,
        keypair: ed25519.KeyPair,
        capability_content: dict[str, Any],
    ) -> None:
        signed = sign_capability(capability_content, keypair.private_key).to_dict()
        signed["scope"] = "files/write"
        path = _write_json(tmp_path / "signed.json", signed)
        result = runner.invoke(
            cli, ["capability", "verify", path, "--public-key", keypair.public_key.hex()]
        )
        assert result.exit_code == 1
        assert "INVALID" in result.output

    def test_sign_invalid_content(
        self, runner: CliRunner, tmp_path: Path, capability_content: dict[str, Any]
    ) -> None:
        path = _write_json(tmp_path / "content.json", {**capability_content, "exp": 1})
        result = runner.invoke(cli, ["capability", "sign", path, "--seed-hex", SEED_HEX])
        assert result.exit_code == 1
        assert "TALOS_INVALID_INPUT" in result.output

    def test_hash(
        self,
        runner: CliRunner,
        tmp_path: Path,
        keypair: ed25519.KeyPair,
        capability_content: dict[str, Any],
    ) -> None:
        signed = sign_capability(capability_content, keypair.private_key).to_dict()
        path = _write_json(tmp_path / "signed.json", signed)
        result = runner.invoke(cli, ["capability", "hash", path])
        assert result.exit_code == 0
        assert result.output.strip() == compute_capability_hash(signed)


# ---------------------------------------------------------------------------
# frame verify
# ---------------------------------------------------------------------------


class TestFrameVerifyCommand:
    @pytest.fixture()
    def bundle_dir(self, tmp_path: Path) -> Path:
        write_vectors(generate_vectors(), tmp_path)
        return tmp_path

    def test_valid_frame_with_request(
        self, runner: CliRunner, bundle_dir: Path, keypair: ed25519.KeyPair
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "frame",
                "verify",
                str(bundle_dir / "positive/mcp_message_frame.json"),
                "--public-key",
                keypair.public_key.hex(),
                "--request",
                str(bundle_dir / "positive/mcp_request.json"),
            ],
        )
        assert result.exit_code == 0
        assert "VALID" in result.output

    def test_valid_response_frame(
        self, runner: CliRunner, bundle_dir: Path, keypair: ed25519.KeyPair
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "frame",
                "verify",
                str(bundle_dir / "positive/mcp_response_frame.json"),
                "--public-key",
                public_key_to_did(keypair.public_key),
                "--response",
                str(bundle_dir / "positive/mcp_response.json"),
            ],
        )
        assert result.exit_code == 0

    def test_request_mismatch(
        self, runner: CliRunner, bundle_dir: Path, tmp_path: Path, keypair: ed25519.KeyPair
    ) -> None:
        other = _write_json(tmp_path / "other.json", {"jsonrpc": "2.0", "id": "x"})
        result = runner.invoke(
            cli,
            [
                "frame",
                "verify",
                str(bundle_dir / "positive/mcp_message_frame.json"),
                "--public-key",
                keypair.public_key.hex(),
                "--request",
                other,
            ],
        )
        assert result.exit_code == 1
        assert "request_hash" in result.output

    def test_unknown_field_is_typed_error(
        self, runner: CliRunner, tmp_path: Path, keypair: ed25519.KeyPair
    ) -> None:
        frame = {
            "type": "MCP_MESSAGE",
            "protocol_version": "1",
            "session_id": "s",
            "correlation_id": "c",
            "peer_id": "p",
            "issued_at": 1,
            "request_hash": "h",
            "tool": "t",
            "method": "m",
            "capability_hash": "ch",
        }
        signed = sign_frame(frame, keypair.private_key)
        path = _write_json(tmp_path / "frame.json", {**signed, "extra": "x"})
        result = runner.invoke(
            cli, ["frame", "verify", path, "--public-key", keypair.public_key.hex()]
        )
        assert result.exit_code == 1
        assert "TALOS_FRAME_INVALID" in result.output

    def test_wrong_key_is_invalid(self, runner: CliRunner, bundle_dir: Path) -> None:
        other = ed25519.generate_keypair()
        result = runner.invoke(
            cli,
            [
                "frame",
                "verify",
                str(bundle_dir / "positive/mcp_message_frame.json"),
                "--public-key",
                other.public_key.hex(),
            ],
        )
        assert result.exit_code == 1
        assert "INVALID" in result.output


# ---------------------------------------------------------------------------
# vectors
# ---------------------------------------------------------------------------


class TestVectorsCommands:
    def test_generate_then_check(self, runner: CliRunner, tmp_path: Path) -> None:
        out_dir = tmp_path / "vectors"
        result = runner.invoke(cli, ["vectors", "generate", str(out_dir)])
        assert result.exit_code == 0
        assert (out_dir / "meta.json").exists()

        result = runner.invoke(cli, ["vectors", "check", str(out_dir)])
        assert result.exit_code == 0
        assert "Passed: 15/15" in result.output

    def test_check_reports_failure(self, runner: CliRunner, tmp_path: Path) -> None:
        write_vectors(generate_vectors(), tmp_path)
        (tmp_path / "positive/capability_hash.hex").write_text("ff" * 32, encoding="ascii")
        result = runner.invoke(cli, ["vectors", "check", str(tmp_path)])
        assert result.exit_code == 1
        assert "Passed: 14/15" in result.output

    def test_generate_with_seed(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["vectors", "generate", str(tmp_path), "--seed-hex", "02" * 32])
        assert result.exit_code == 0
        meta = json.loads((tmp_path / "meta.json").read_text(encoding="utf-8"))
        assert meta["keypair_seed_hex"] == "02" * 32
