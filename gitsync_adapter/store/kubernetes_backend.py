"""KubernetesConfigMapStore — ResourceStore backed by the Kubernetes API.

Reads and patches ConfigMaps through ``kubernetes.client.CoreV1Api``.

The official client is blocking, so every API call runs in a worker thread
via ``asyncio.to_thread()``. The event loop stays free for other webhook
requests while a call is in flight.

Error mapping:
  ApiException 404                  → ResourceNotFoundError
  any other ApiException            → StoreError(status=<http status>)
  urllib3 / socket transport errors → StoreError(status=None)

The original exception is always chained (``raise ... from exc``).

Patches are sent as ``application/merge-patch+json`` with a stable
``field_manager`` so repeated writes are attributed to this adapter.
Concurrent patches to the same ConfigMap are not serialized here: the last
patch to reach the API server wins.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

import urllib3
from kubernetes import client
from kubernetes.client.rest import ApiException

from gitsync_adapter.constants import DEFAULT_REQUEST_TIMEOUT_S, MERGE_PATCH_CONTENT_TYPE
from gitsync_adapter.errors import ResourceNotFoundError, StoreError
from gitsync_adapter.utils.logger import get_logger

logger = get_logger(__name__)

# Transport-level failures that never produce an ApiException.
_TRANSPORT_ERRORS = (urllib3.exceptions.HTTPError, OSError)


class KubernetesConfigMapStore:
    """ConfigMap annotations via CoreV1Api.

    Args:
        core_api:          Configured CoreV1Api (credentials already loaded).
        request_timeout_s: Per-call timeout passed as ``_request_timeout``.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api,
        request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
    ) -> None:
        self._core = core_api
        self._timeout = request_timeout_s

    # ── ResourceStore API ─────────────────────────────────────────────────────

    async def get_annotations(self, namespace: str, name: str) -> dict[str, str]:
        return await asyncio.to_thread(self._read_annotations, namespace, name)

    async def apply_merge_patch(
        self,
        namespace: str,
        name: str,
        annotations: Mapping[str, str],
        field_manager: str,
    ) -> None:
        body = build_annotation_patch(annotations)
        await asyncio.to_thread(self._patch, namespace, name, body, field_manager)

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(
                self._core.get_api_resources, _request_timeout=self._timeout
            )
            return True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Kubernetes API health check failed", error=str(exc))
            return False

    async def close(self) -> None:
        api_client: Optional[client.ApiClient] = getattr(self._core, "api_client", None)
        if api_client is not None:
            api_client.close()
            logger.debug("Kubernetes API client closed")

    # ── Blocking calls (run in worker threads) ────────────────────────────────

    def _read_annotations(self, namespace: str, name: str) -> dict[str, str]:
        try:
            configmap = self._core.read_namespaced_config_map(
                name=name,
                namespace=namespace,
                _request_timeout=self._timeout,
            )
        except ApiException as exc:
            raise _api_error("read", namespace, name, exc) from exc
        except _TRANSPORT_ERRORS as exc:
            raise StoreError(
                f"failed to load ConfigMap {namespace}/{name}: {exc}",
                namespace=namespace,
                name=name,
            ) from exc

        metadata = configmap.metadata
        annotations = metadata.annotations if metadata is not None else None
        return dict(annotations or {})

    def _patch(
        self,
        namespace: str,
        name: str,
        body: dict[str, Any],
        field_manager: str,
    ) -> None:
        try:
            self._core.patch_namespaced_config_map(
                name=name,
                namespace=namespace,
                body=body,
                field_manager=field_manager,
                _content_type=MERGE_PATCH_CONTENT_TYPE,
                _request_timeout=self._timeout,
            )
        except ApiException as exc:
            raise _api_error("patch", namespace, name, exc) from exc
        except _TRANSPORT_ERRORS as exc:
            raise StoreError(
                f"failed to patch ConfigMap {namespace}/{name}: {exc}",
                namespace=namespace,
                name=name,
            ) from exc


# ─── Helpers ──────────────────────────────────────────────────────────────────


def build_annotation_patch(annotations: Mapping[str, str]) -> dict[str, Any]:
    """Merge-patch body touching only ``metadata.annotations``."""
    return {"metadata": {"annotations": dict(annotations)}}


def _api_error(verb: str, namespace: str, name: str, exc: ApiException) -> StoreError:
    if exc.status == 404:
        return ResourceNotFoundError(
            f"ConfigMap {namespace}/{name} not found",
            namespace=namespace,
            name=name,
            status=404,
        )
    return StoreError(
        f"failed to {verb} ConfigMap {namespace}/{name}: "
        f"HTTP {exc.status} {exc.reason}",
        namespace=namespace,
        name=name,
        status=exc.status,
    )
