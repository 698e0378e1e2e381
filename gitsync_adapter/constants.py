"""Shared constants for the git-sync reloader adapter.

Wire names (header, annotation, field manager) and startup defaults live here.
Other modules import wire names and defaults from here.
"""

# ─── Wire contract ────────────────────────────────────────────────────────────

# Request header git-sync sets on its webhook call. Matched case-insensitively.
SYNC_HASH_HEADER: str = "Gitsync-Hash"

# The single annotation this service manages on each allowlisted ConfigMap.
# Stakater Reloader watches for changes to it and rolls the consuming workloads.
SYNC_HASH_ANNOTATION: str = "git-sync-hash"

# Field-manager identity sent with every patch. Must stay stable across
# releases so repeated patches are attributed to the same actor.
FIELD_MANAGER: str = "git-sync-webhook-adapter"

# Content type for the annotation patch (RFC 7386 JSON merge patch).
MERGE_PATCH_CONTENT_TYPE: str = "application/merge-patch+json"

# Response header carrying the per-request ULID.
REQUEST_ID_HEADER: str = "X-Request-ID"

# ─── Server defaults ──────────────────────────────────────────────────────────

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8080

# Upper bound for a single Kubernetes API call (seconds).
DEFAULT_REQUEST_TIMEOUT_S: float = 10.0

# Uvicorn hardening. git-sync calls once per sync period per ConfigMap, so
# these leave plenty of headroom.
UVICORN_LIMIT_CONCURRENCY: int = 100
UVICORN_BACKLOG: int = 50
UVICORN_TIMEOUT_KEEP_ALIVE: int = 5
