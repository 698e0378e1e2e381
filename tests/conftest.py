"""Root test configuration for the git-sync reloader adapter.

Provides:
  - isolate_config_env (autouse): no config file or GITSYNC_ADAPTER_* variable
    from the developer's machine leaks into a test.
  - make_store: factory fixture for InMemoryResourceStore, a ResourceStore
    double that records every read and patch and can be told to fail.
  - memory_store: InMemoryResourceStore holding prod/app-config.
  - untouchable_store: ResourceStore double that fails the test if called.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

import pytest

from gitsync_adapter.errors import ResourceNotFoundError, StoreError


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip adapter env vars and disable the default config search paths."""
    for var in (
        "GITSYNC_ADAPTER_CONFIG",
        "GITSYNC_ADAPTER_HOST",
        "GITSYNC_ADAPTER_PORT",
        "GITSYNC_ADAPTER_ALLOWLIST",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("gitsync_adapter.config.DEFAULT_CONFIG_PATHS", [])


class InMemoryResourceStore:
    """ConfigMap annotations kept in a dict keyed by (namespace, name).

    Attributes:
        reads:   every (namespace, name) passed to get_annotations()
        patches: every (namespace, name, annotations, field_manager) passed
                 to apply_merge_patch(), including failed ones
    """

    def __init__(self, configmaps: Optional[dict[tuple[str, str], dict[str, str]]] = None) -> None:
        self.configmaps: dict[tuple[str, str], dict[str, str]] = {
            key: dict(value) for key, value in (configmaps or {}).items()
        }
        self.reads: list[tuple[str, str]] = []
        self.patches: list[tuple[str, str, dict[str, str], str]] = []
        self.read_error: Optional[StoreError] = None
        self.patch_error: Optional[StoreError] = None
        self.healthy = True
        self.closed = False

    async def get_annotations(self, namespace: str, name: str) -> dict[str, str]:
        self.reads.append((namespace, name))
        if self.read_error is not None:
            raise self.read_error
        if (namespace, name) not in self.configmaps:
            raise ResourceNotFoundError(
                f"ConfigMap {namespace}/{name} not found",
                namespace=namespace,
                name=name,
                status=404,
            )
        return dict(self.configmaps[(namespace, name)])

    async def apply_merge_patch(
        self,
        namespace: str,
        name: str,
        annotations: Mapping[str, str],
        field_manager: str,
    ) -> None:
        self.patches.append((namespace, name, dict(annotations), field_manager))
        if self.patch_error is not None:
            raise self.patch_error
        self.configmaps[(namespace, name)].update(annotations)

    async def health_check(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


class UntouchableStore:
    """ResourceStore that fails the test on any data access."""

    async def get_annotations(self, namespace: str, name: str) -> dict[str, str]:
        pytest.fail(f"store read for {namespace}/{name} must not happen")

    async def apply_merge_patch(
        self,
        namespace: str,
        name: str,
        annotations: Mapping[str, str],
        field_manager: str,
    ) -> None:
        pytest.fail(f"store patch for {namespace}/{name} must not happen")

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


@pytest.fixture
def memory_store() -> InMemoryResourceStore:
    """Store holding prod/app-config with no annotations."""
    return InMemoryResourceStore({("prod", "app-config"): {}})


@pytest.fixture
def make_store() -> Callable[..., InMemoryResourceStore]:
    """Factory: ``make_store({(namespace, name): annotations, ...})``."""
    return InMemoryResourceStore


@pytest.fixture
def untouchable_store() -> UntouchableStore:
    return UntouchableStore()
