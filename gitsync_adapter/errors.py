"""Exception taxonomy for the git-sync reloader adapter.

Only two families are exceptions:

  ConfigError  — fatal, startup only. The process must not start serving.
  StoreError   — raised by a ResourceStore; the webhook handler turns it into
                 an UPSTREAM_FAILURE outcome. Never retried, never fatal.

Denied and malformed webhook calls are ordinary outcomes, not exceptions
(see gitsync_adapter/models/outcome.py).
"""

from __future__ import annotations


class ConfigError(Exception):
    """Startup configuration is unusable (bad allowlist, no cluster credentials)."""


class AllowlistParseError(ConfigError):
    """An allowlist entry is not of the form ``namespace/name``."""

    def __init__(self, entry: str) -> None:
        self.entry = entry
        super().__init__(
            f"Invalid ConfigMap format: '{entry}' (expected namespace/name)"
        )


class StoreError(Exception):
    """A read or write against the resource store failed.

    The underlying exception is chained as ``__cause__`` by the raiser.
    """

    def __init__(self, message: str, *, namespace: str, name: str, status: int | None = None) -> None:
        self.namespace = namespace
        self.name = name
        self.status = status
        super().__init__(message)


class ResourceNotFoundError(StoreError):
    """The target ConfigMap does not exist. Never auto-created."""
