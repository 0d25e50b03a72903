"""Base58btc codec (Bitcoin alphabet) used for ``did:key`` identities."""
from __future__ import annotations

from talos_core.errors import InvalidInputError

BASE58_ALPHABET: str = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_ALPHABET_INDEX: dict[str, int] = {char: index for index, char in enumerate(BASE58_ALPHABET)}


def base58btc_encode(data: bytes) -> str:
    """Encode *data* to a base58btc string.

    Leading zero bytes are preserved as leading ``"1"`` characters.
    """
    n = int.from_bytes(data, "big")
    result: list[str] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(BASE58_ALPHABET[remainder])
    for byte in data:
        if byte == 0:
            result.append(BASE58_ALPHABET[0])
        else:
            break
    return "".join(reversed(result))


def base58btc_decode(encoded: str) -> bytes:
    """Decode a base58btc string back to bytes.

    Raises
    ------
    InvalidInputError
        If the string contains a character outside the base58btc alphabet.
    """
    n = 0
    for char in encoded:
        index = _ALPHABET_INDEX.get(char)
        if index is None:
            raise InvalidInputError(
                f"Invalid base58btc character {char!r}",
                details={"encoded": encoded},
            )
        n = n * 58 + index
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_size = len(encoded) - len(encoded.lstrip(BASE58_ALPHABET[0]))
    return b"\x00" * pad_size + body


__all__ = ["BASE58_ALPHABET", "base58btc_decode", "base58btc_encode"]
