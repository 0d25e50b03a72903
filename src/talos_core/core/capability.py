"""Capability: a signed, time-bounded grant of scope from issuer to subject.

Wire shape::

    {v, iss, sub, scope, constraints?, iat, exp, delegatable?,
     delegation_chain?, sig?}

Hash vs. signature
------------------
* The signature covers the canonical bytes of every field *except* ``sig``.
* The capability hash (what a message frame carries as ``capability_hash``)
  covers the complete signed object *including* ``sig``.

Both rules are fixed by the wire protocol. Re-signing the same content with a
different key therefore changes the hash but not the signed bytes.

Verification here answers one question: was this exact content signed by
this key. Expiry, ``iat`` and delegation-chain policy belong to the caller.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from talos_core.crypto import ed25519
from talos_core.crypto.sha256 import HashBackend, sha256_hex
from talos_core.encoding.base64url import decode_base64url, encode_base64url
from talos_core.encoding.canonical_json import canonicalize
from talos_core.errors import InvalidInputError, summarize_validation_error
from talos_core.version import CAPABILITY_VERSION

logger = logging.getLogger(__name__)


class Capability(BaseModel):
    """Typed, immutable view of a capability.

    Parameters
    ----------
    v:
        Version tag, ``"1"``.
    iss:
        Issuer identity (usually a ``did:key``).
    sub:
        Subject identity receiving the grant.
    scope:
        Non-empty scope string, e.g. ``"files/read"``.
    constraints:
        Optional application-defined restrictions. Stored and signed, never
        evaluated here.
    iat:
        Issued-at, integer Unix seconds.
    exp:
        Expiry, integer Unix seconds. Must be greater than ``iat``.
    delegatable:
        Whether the subject may re-delegate.
    delegation_chain:
        Optional list of encoded parent grants.
    sig:
        Base64URL (no padding) Ed25519 signature, present once signed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    v: str = CAPABILITY_VERSION
    iss: str
    sub: str
    scope: str = Field(min_length=1)
    constraints: Optional[dict[str, Any]] = None
    iat: int
    exp: int
    delegatable: Optional[bool] = None
    delegation_chain: Optional[list[str]] = None
    sig: Optional[str] = None

    @model_validator(mode="after")
    def _check_validity_window(self) -> "Capability":
        if self.iat >= self.exp:
            raise ValueError(f"iat ({self.iat}) must be earlier than exp ({self.exp})")
        return self

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        iss: str,
        sub: str,
        scope: str,
        ttl_seconds: int = 3600,
        iat: int | None = None,
        constraints: dict[str, Any] | None = None,
        delegatable: bool | None = None,
        delegation_chain: list[str] | None = None,
    ) -> "Capability":
        """Build unsigned capability content valid for *ttl_seconds*.

        ``iat`` defaults to the current Unix time.
        """
        issued = int(time.time()) if iat is None else iat
        return cls.from_dict(
            {
                "v": CAPABILITY_VERSION,
                "iss": iss,
                "sub": sub,
                "scope": scope,
                "constraints": constraints,
                "iat": issued,
                "exp": issued + ttl_seconds,
                "delegatable": delegatable,
                "delegation_chain": delegation_chain,
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Capability":
        """Validate a wire mapping into a :class:`Capability`.

        Keys whose value is ``None`` are treated as absent.

        Raises
        ------
        InvalidInputError
            When a field is missing, mistyped, or violates an invariant.
        """
        present = {key: value for key, value in data.items() if value is not None}
        try:
            return cls.model_validate(present)
        except ValidationError as exc:
            raise InvalidInputError(
                "Invalid capability",
                details={"errors": summarize_validation_error(exc)},
            ) from exc

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the wire mapping; absent optional fields are omitted."""
        return self.model_dump(exclude_none=True)

    def content(self) -> dict[str, Any]:
        """Return the wire mapping without ``sig`` (the signed content)."""
        wire = self.to_dict()
        wire.pop("sig", None)
        return wire

    @property
    def is_signed(self) -> bool:
        return bool(self.sig)


CapabilityLike = Union[Capability, Mapping[str, Any]]


# ---------------------------------------------------------------------------
# Protocol operations
# ---------------------------------------------------------------------------


def compute_capability_hash(cap: CapabilityLike, backend: HashBackend | None = None) -> str:
    """Return ``hex(sha256(canonicalize(cap)))`` over the full capability.

    ``sig`` is included when present, so the hash identifies the signed
    artifact rather than just its content.
    """
    return sha256_hex(canonicalize(capability_to_wire(cap)), backend)


def sign_capability(content: CapabilityLike, private_key: bytes) -> Capability:
    """Sign capability *content* and return it with ``sig`` attached.

    Any ``sig`` already present on *content* is discarded before signing.

    Parameters
    ----------
    content:
        The capability fields, as a :class:`Capability` or wire mapping.
    private_key:
        The issuer's 32-byte seed.

    Returns
    -------
    Capability
        The signed capability.

    Raises
    ------
    CanonicalizationError
        If *content* holds a value with no canonical form, such as ``None``.
    InvalidInputError
        If *content* is not a valid capability or the key is malformed.
    """
    wire = capability_to_wire(content)
    wire.pop("sig", None)
    canonicalize(wire)
    unsigned = Capability.from_dict(wire)
    signature = ed25519.sign(canonicalize(unsigned.to_dict()), private_key)
    return unsigned.model_copy(update={"sig": encode_base64url(signature)})


def verify_capability(cap: CapabilityLike, public_key: bytes) -> bool:
    """Return ``True`` if *cap* was signed by the holder of *public_key*.

    A missing ``sig``, an undecodable ``sig`` and a wrong signature all
    return ``False``. Expiry is not checked.
    """
    wire = capability_to_wire(cap)
    sig = wire.pop("sig", None)
    if not isinstance(sig, str) or not sig:
        logger.debug("Capability has no signature; scope=%r", wire.get("scope"))
        return False
    try:
        signature = decode_base64url(sig)
    except InvalidInputError:
        logger.debug("Capability signature is not valid Base64URL")
        return False
    return ed25519.verify(signature, canonicalize(wire), public_key)


def is_expired(cap: CapabilityLike, now: int | None = None) -> bool:
    """Return ``True`` once ``now`` has reached the capability's ``exp``.

    Provided for policy layers; :func:`verify_capability` never calls it.
    """
    wire = capability_to_wire(cap)
    reference = int(time.time()) if now is None else now
    exp = wire.get("exp")
    if not isinstance(exp, int) or isinstance(exp, bool):
        raise InvalidInputError("Capability 'exp' must be an integer")
    return reference >= exp


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def capability_to_wire(cap: CapabilityLike) -> dict[str, Any]:
    """Return a fresh wire mapping for *cap*, including ``sig`` when present."""
    if isinstance(cap, Capability):
        return cap.to_dict()
    if isinstance(cap, Mapping):
        return dict(cap)
    raise InvalidInputError(
        f"Expected a Capability or mapping, got {type(cap).__name__}"
    )


__all__ = [
    "Capability",
    "CapabilityLike",
    "capability_to_wire",
    "compute_capability_hash",
    "is_expired",
    "sign_capability",
    "verify_capability",
]
