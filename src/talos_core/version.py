"""Version and protocol constants."""
from __future__ import annotations

SDK_VERSION: str = "1.0.0"

# Literal written into ``protocol_version`` of every frame built here.
PROTOCOL_VERSION: str = "1"

# Literal written into ``v`` of every capability built here.
CAPABILITY_VERSION: str = "1"

SUPPORTED_PROTOCOL_RANGE: tuple[str, str] = ("1.0", "1.x")

__all__ = [
    "CAPABILITY_VERSION",
    "PROTOCOL_VERSION",
    "SDK_VERSION",
    "SUPPORTED_PROTOCOL_RANGE",
]
