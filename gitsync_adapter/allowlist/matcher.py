"""Allowlist membership for webhook targets.

``Allowlist.contains()`` is the ONLY authorization check in the service. It
runs before the request headers are read and before the resource store is
contacted.

The allowlist is built once at startup (see loader.py) and never mutated,
so concurrent requests read it without any lock.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from gitsync_adapter.models.resource import ResourceRef


class Allowlist:
    """Immutable set of ConfigMaps this service may patch.

    Backed by a frozenset: membership is O(1), duplicates collapse, and
    there is no mutation API.
    """

    __slots__ = ("_refs",)

    def __init__(self, refs: Iterable[ResourceRef] = ()) -> None:
        self._refs: frozenset[ResourceRef] = frozenset(refs)

    def contains(self, ref: ResourceRef) -> bool:
        """Return True if ``ref`` is allowlisted. Exact, case-sensitive match."""
        return ref in self._refs

    def __contains__(self, ref: object) -> bool:
        return ref in self._refs

    def __iter__(self) -> Iterator[ResourceRef]:
        return iter(sorted(self._refs))

    def __len__(self) -> int:
        return len(self._refs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Allowlist):
            return NotImplemented
        return self._refs == other._refs

    def __hash__(self) -> int:
        return hash(self._refs)

    def __repr__(self) -> str:
        return f"Allowlist({[str(ref) for ref in self]!r})"
