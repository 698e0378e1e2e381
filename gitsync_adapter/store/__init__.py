"""Resource store package.

Re-exports the public API:

    from gitsync_adapter.store import ResourceStore, KubernetesConfigMapStore

Layout:
    protocol.py           — ResourceStore Protocol
    kubernetes_backend.py — KubernetesConfigMapStore (CoreV1Api, worker threads)
    factory.py            — create_resource_store() — credential loading
"""

from gitsync_adapter.store.kubernetes_backend import KubernetesConfigMapStore
from gitsync_adapter.store.protocol import ResourceStore

__all__ = [
    "KubernetesConfigMapStore",
    "ResourceStore",
]
