"""Resource store factory — cluster credential loading.

Credential selection (``kubernetes.in_cluster`` in the config):
  auto  → in-cluster service account if mounted, otherwise kubeconfig
  true  → in-cluster service account only
  false → kubeconfig only (``kubernetes.kubeconfig`` / ``kubernetes.context``)

Credentials are loaded into a private ``client.Configuration`` rather than
the library's process-wide default.

Any failure raises ConfigError. The lifespan propagates it, so the process
never starts serving without a usable client.
"""

from __future__ import annotations

from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException

from gitsync_adapter.config import Config, KubernetesConfig
from gitsync_adapter.errors import ConfigError
from gitsync_adapter.store.kubernetes_backend import KubernetesConfigMapStore
from gitsync_adapter.store.protocol import ResourceStore
from gitsync_adapter.utils.logger import get_logger

logger = get_logger(__name__)


async def create_resource_store(config: Config) -> ResourceStore:
    """Create the Kubernetes-backed ResourceStore.

    Raises:
        ConfigError: No usable credentials (no service account and no
                     kubeconfig, unknown context, unreadable file, ...).
    """
    kube = config.kubernetes
    configuration, source = _load_credentials(kube)
    core_api = client.CoreV1Api(api_client=client.ApiClient(configuration))

    logger.info(
        "resource_store_selected",
        backend="KubernetesConfigMapStore",
        credentials=source,
        api_host=configuration.host,
        request_timeout_s=kube.request_timeout_s,
        field_manager=kube.field_manager,
    )
    return KubernetesConfigMapStore(core_api, request_timeout_s=kube.request_timeout_s)


def _load_credentials(kube: KubernetesConfig) -> tuple[client.Configuration, str]:
    """Return (configuration, source) where source is 'in-cluster' or 'kubeconfig'."""
    configuration = client.Configuration()

    if kube.in_cluster is not False:
        try:
            k8s_config.load_incluster_config(client_configuration=configuration)
            return configuration, "in-cluster"
        except ConfigException as exc:
            if kube.in_cluster is True:
                raise ConfigError(
                    f"failed to load in-cluster Kubernetes config: {exc}"
                ) from exc
            logger.debug(
                "No in-cluster service account, falling back to kubeconfig",
                error=str(exc),
            )

    try:
        k8s_config.load_kube_config(
            config_file=kube.kubeconfig,
            context=kube.context,
            client_configuration=configuration,
            persist_config=False,
        )
    except (ConfigException, OSError) as exc:
        raise ConfigError(f"failed to infer kube config: {exc}") from exc
    return configuration, "kubeconfig"
