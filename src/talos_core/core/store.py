"""CapabilityStore: selects which capability to embed in a message frame.

Scope matching
--------------
A capability's ``scope`` covers a ``(tool, method)`` pair when it is exactly
one of:

* ``"*"``               any tool, any method
* ``"<tool>"``          any method of that tool
* ``"<tool>/*"``        any method of that tool
* ``"<tool>/<method>"`` that method only

Matching is whole-string; ``"files"`` does not cover tool ``"files2"``.
This selects a capability to present. Whether the presented grant is honored
is decided by the receiving side's policy, not here.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from talos_core.core.capability import Capability, CapabilityLike

logger = logging.getLogger(__name__)

WILDCARD: str = "*"


def scope_covers(scope: str, tool: str, method: str) -> bool:
    """Return ``True`` if *scope* covers *method* on *tool*."""
    return scope in (WILDCARD, tool, f"{tool}/{WILDCARD}", f"{tool}/{method}")


class CapabilityStore:
    """In-memory capability lookup keyed by scope.

    Parameters
    ----------
    capabilities:
        Optional initial capabilities, added in order.
    """

    def __init__(self, capabilities: Iterable[CapabilityLike] = ()) -> None:
        self._capabilities: list[Capability] = []
        for capability in capabilities:
            self.add(capability)

    def add(self, capability: CapabilityLike) -> Capability:
        """Store *capability* and return it as a :class:`Capability`.

        Raises
        ------
        InvalidInputError
            If a mapping does not describe a valid capability.
        """
        if not isinstance(capability, Capability):
            capability = Capability.from_dict(capability)
        self._capabilities.append(capability)
        return capability

    def get(self, tool: str, method: str) -> Capability | None:
        """Return the most recently added capability covering *tool*/*method*."""
        for capability in reversed(self._capabilities):
            if scope_covers(capability.scope, tool, method):
                return capability
        logger.debug("No capability covers %s/%s", tool, method)
        return None

    def remove_scope(self, scope: str) -> int:
        """Remove every capability with exactly *scope*; return the count."""
        before = len(self._capabilities)
        self._capabilities = [cap for cap in self._capabilities if cap.scope != scope]
        return before - len(self._capabilities)

    def __len__(self) -> int:
        return len(self._capabilities)

    def __iter__(self) -> Iterator[Capability]:
        return iter(list(self._capabilities))


__all__ = ["CapabilityStore", "WILDCARD", "scope_covers"]
