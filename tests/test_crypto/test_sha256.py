"""Tests for talos_core.crypto.sha256: digest values and backend selection."""
from __future__ import annotations

import pytest

from talos_core.crypto.sha256 import (
    DEFAULT_BACKEND,
    DIGEST_SIZE,
    HashBackend,
    HashlibBackend,
    OpenSSLHashBackend,
    sha256,
    sha256_hex,
)

EMPTY_DIGEST = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
ABC_DIGEST = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

BACKENDS = [OpenSSLHashBackend(), HashlibBackend()]


class _RecordingBackend:
    name = "recording"

    def __init__(self) -> None:
        self.calls: list[bytes] = []

    def digest(self, data: bytes) -> bytes:
        self.calls.append(data)
        return HashlibBackend().digest(data)


# ---------------------------------------------------------------------------
# Known answers
# ---------------------------------------------------------------------------


class TestKnownAnswers:
    @pytest.mark.parametrize("backend", BACKENDS, ids=lambda b: b.name)
    def test_empty_input(self, backend: HashBackend) -> None:
        assert sha256_hex(b"", backend) == EMPTY_DIGEST

    @pytest.mark.parametrize("backend", BACKENDS, ids=lambda b: b.name)
    def test_abc(self, backend: HashBackend) -> None:
        assert sha256_hex(b"abc", backend) == ABC_DIGEST

    def test_default_backend(self) -> None:
        assert sha256_hex(b"abc") == ABC_DIGEST

    def test_raw_digest_size(self) -> None:
        digest = sha256(b"abc")
        assert len(digest) == DIGEST_SIZE
        assert digest.hex() == ABC_DIGEST

    def test_hex_is_lowercase(self) -> None:
        digest = sha256_hex(b"talos")
        assert digest == digest.lower()
        assert len(digest) == 64


# ---------------------------------------------------------------------------
# Backend strategy
# ---------------------------------------------------------------------------


class TestBackends:
    def test_backends_agree(self) -> None:
        data = bytes(range(256)) * 17
        assert OpenSSLHashBackend().digest(data) == HashlibBackend().digest(data)

    def test_default_is_openssl(self) -> None:
        assert DEFAULT_BACKEND.name == "openssl"

    def test_backends_satisfy_protocol(self) -> None:
        for backend in BACKENDS:
            assert isinstance(backend, HashBackend)

    def test_custom_backend_is_used(self) -> None:
        backend = _RecordingBackend()
        assert sha256_hex(b"abc", backend) == ABC_DIGEST
        assert backend.calls == [b"abc"]
