"""UTF-8 and byte concatenation helpers."""
from __future__ import annotations

from talos_core.errors import InvalidInputError


def utf8_to_bytes(text: str) -> bytes:
    """Encode *text* as UTF-8."""
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInputError("String is not encodable as UTF-8") from exc


def bytes_to_utf8(data: bytes) -> str:
    """Decode *data* as strict UTF-8."""
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(
            "Byte sequence is not valid UTF-8",
            details={"position": exc.start},
        ) from exc


def concat_bytes(*chunks: bytes) -> bytes:
    """Concatenate byte sequences in order."""
    return b"".join(bytes(chunk) for chunk in chunks)


__all__ = ["bytes_to_utf8", "concat_bytes", "utf8_to_bytes"]
