"""Error taxonomy for talos-core.

Every error raised across the public API derives from :class:`TalosError`
and carries a stable, machine-readable ``code`` so callers (and other
language implementations) can match on it without parsing messages.

Three failure classes never overlap:

* canonicalization errors (:class:`CanonicalizationError`),
* schema and input errors (:class:`FrameSchemaError`,
  :class:`InvalidInputError`),
* cryptographic outcomes, which are *not* exceptions: ``verify_*``
  functions return ``False``.
"""
from __future__ import annotations

from typing import Any


class TalosError(Exception):
    """Base class for all talos-core errors.

    Parameters
    ----------
    code:
        Stable error code, e.g. ``"TALOS_FRAME_INVALID"``.
    message:
        Human-readable description.
    details:
        Optional structured context. Never contains key material.
    """

    code: str = "TALOS_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary suitable for JSON error bodies."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }
        if self.__cause__ is not None:
            result["cause"] = str(self.__cause__)
        return result


class CanonicalizationError(TalosError):
    """Raised when a value cannot be mapped to canonical bytes."""

    code = "TALOS_CANONICALIZATION_ERROR"


class FrameSchemaError(TalosError):
    """Raised when a frame carries an unknown field or an unknown ``type``."""

    code = "TALOS_FRAME_INVALID"


class InvalidInputError(TalosError):
    """Raised for malformed inputs such as a seed of the wrong length."""

    code = "TALOS_INVALID_INPUT"


class TalosInvalidCapabilityError(TalosError):
    """Raised when no usable capability is available for a tool invocation."""

    code = "TALOS_INVALID_CAPABILITY"


def summarize_validation_error(exc: Any) -> list[dict[str, Any]]:
    """Reduce a ``pydantic.ValidationError`` to JSON-safe ``details``."""
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


__all__ = [
    "CanonicalizationError",
    "FrameSchemaError",
    "InvalidInputError",
    "TalosError",
    "TalosInvalidCapabilityError",
    "summarize_validation_error",
]
