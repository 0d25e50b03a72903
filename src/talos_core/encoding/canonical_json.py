"""Canonical JSON serialization.

Every hash and every signature in the protocol is computed over the bytes
produced here, so two implementations that disagree on a single byte will
not cross-verify.

Rules
-----
* ``None`` is rejected. A missing value is expressed by omitting the key.
* Numbers must be finite integers and render as plain decimal digits.
  A ``float`` is accepted only when it is integral (``json.loads("1.0")``)
  and is rendered exactly like the equivalent ``int``.
* Strings use standard JSON escaping with non-ASCII characters emitted raw.
* Lists keep their order.
* Mapping keys must be strings and are sorted by code point, which equals
  UTF-8 byte order.
* No whitespace is emitted.
"""
from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from talos_core.errors import CanonicalizationError


def canonicalize(value: Any) -> bytes:
    """Return the canonical UTF-8 bytes for *value*.

    Parameters
    ----------
    value:
        A ``bool``, ``int``, integral ``float``, ``str``, ``list``/``tuple``
        or string-keyed ``Mapping``, nested arbitrarily.

    Returns
    -------
    bytes
        Canonical JSON encoded as UTF-8.

    Raises
    ------
    CanonicalizationError
        For ``None``, non-integral or non-finite numbers, non-string mapping
        keys, strings that are not UTF-8 encodable, or unsupported types.
    """
    text = _stringify(value, "$")
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CanonicalizationError(
            "Canonical JSON v1: strings must be valid Unicode (lone surrogate found)"
        ) from exc


def canonicalize_str(value: Any) -> str:
    """Return canonical JSON as a ``str``."""
    return canonicalize(value).decode("utf-8")


def _stringify(value: Any, path: str) -> str:
    if value is None:
        raise CanonicalizationError(
            "Canonical JSON v1: null values are not permitted (omit the field instead)",
            details={"path": path},
        )

    # bool is a subclass of int and must be checked first
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, int):
        return str(int(value))

    if isinstance(value, float):
        if not math.isfinite(value):
            raise CanonicalizationError(
                f"Canonical JSON v1: number must be finite, got {value!r}",
                details={"path": path},
            )
        if not value.is_integer():
            raise CanonicalizationError(
                f"Canonical JSON v1: floats are not permitted, got {value!r}",
                details={"path": path},
            )
        return str(int(value))

    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, (list, tuple)):
        items = [_stringify(item, f"{path}[{index}]") for index, item in enumerate(value)]
        return "[" + ",".join(items) + "]"

    if isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise CanonicalizationError(
                    f"Canonical JSON v1: object keys must be strings, got {type(key).__name__}",
                    details={"path": path},
                )
        entries = [
            json.dumps(key, ensure_ascii=False) + ":" + _stringify(value[key], f"{path}.{key}")
            for key in sorted(value)
        ]
        return "{" + ",".join(entries) + "}"

    raise CanonicalizationError(
        f"Canonical JSON v1: unsupported type {type(value).__name__}",
        details={"path": path},
    )


__all__ = ["canonicalize", "canonicalize_str"]
