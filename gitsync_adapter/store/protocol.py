"""ResourceStore Protocol — the webhook handler's view of the cluster.

The handler needs exactly two operations:

  get_annotations(namespace, name)  — read the target's annotation map
  apply_merge_patch(namespace, name, annotations, field_manager)
                                    — merge the given annotations in

Implementations raise StoreError (ResourceNotFoundError for a missing
target) on any failure; they never retry and never create the resource.

Layout:
    protocol.py           — ResourceStore Protocol
    kubernetes_backend.py — KubernetesConfigMapStore (kubernetes client)
    factory.py            — create_resource_store() — credential loading
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class ResourceStore(Protocol):
    """Pluggable resource store interface.

    All methods are async. Both data methods are suspension points: other
    webhook requests proceed while one is waiting on the cluster.
    """

    async def get_annotations(self, namespace: str, name: str) -> dict[str, str]:
        """Return the current annotations of ``namespace/name``.

        A resource with no annotations yields an empty dict.

        Raises:
            ResourceNotFoundError: the resource does not exist.
            StoreError: any other failure (transport, permission, ...).
        """
        ...

    async def apply_merge_patch(
        self,
        namespace: str,
        name: str,
        annotations: Mapping[str, str],
        field_manager: str,
    ) -> None:
        """Merge ``annotations`` into the resource's annotation map.

        Keys not named in ``annotations`` are left untouched. Never a
        full-object replace.

        Raises:
            StoreError: the patch was rejected or did not reach the cluster.
        """
        ...

    async def health_check(self) -> bool:
        """Returns True if the store is reachable. Must not raise."""
        ...

    async def close(self) -> None:
        """Release client resources. Called during graceful shutdown."""
        ...
