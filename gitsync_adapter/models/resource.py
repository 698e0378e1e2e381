"""ResourceRef — namespace-qualified ConfigMap identifier."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class ResourceRef:
    """Identifies one ConfigMap by ``namespace`` and ``name``.

    Frozen and ordered (namespace first, then name) so refs can live in a
    frozenset and be listed deterministically. Comparison is exact: no case
    folding, no trimming.
    """

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"
