"""Webhook handler — authorize, compare, and conditionally patch.

``WebhookHandler.handle()`` is the whole conditional-patch algorithm:

  1. ResourceRef(namespace, name) from the path segments (no validation)
  2. not allowlisted            → FORBIDDEN  (headers unread, store untouched)
  3. no usable Gitsync-Hash     → MISSING_HASH  (store untouched)
  4. read current annotations   → StoreError → UPSTREAM_FAILURE (no write)
  5. stored hash == incoming    → ALREADY_CURRENT (no write)
  6. merge-patch the annotation → StoreError → UPSTREAM_FAILURE
  7.                            → UPDATED

INVARIANTS:
  - The allowlist check runs before anything else. A caller outside the
    allowlist learns nothing about the target's existence or state.
  - At most one store read and at most one store write per call.
  - An unchanged hash is never written: Reloader reacts to annotation
    changes, and a redundant write would only add noise.
  - The patch names only the ``git-sync-hash`` annotation.

The handler is transport-agnostic: it takes plain strings and any header
mapping, and returns a WebhookOutcome. It holds no mutable state, so one
instance serves all concurrent requests.
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

from gitsync_adapter.allowlist import Allowlist
from gitsync_adapter.constants import FIELD_MANAGER, SYNC_HASH_ANNOTATION, SYNC_HASH_HEADER
from gitsync_adapter.errors import StoreError
from gitsync_adapter.models.outcome import WebhookOutcome
from gitsync_adapter.models.resource import ResourceRef
from gitsync_adapter.store.protocol import ResourceStore
from gitsync_adapter.utils.logger import get_logger

logger = get_logger(__name__)

HeaderValue = Union[str, bytes]

_SYNC_HASH_HEADER_LOWER = SYNC_HASH_HEADER.lower()


class WebhookHandler:
    """Stateless per-request logic for ``PATCH /webhook/{namespace}/{name}``.

    Args:
        allowlist:     Immutable allowlist built at startup.
        store:         ResourceStore used for the read and the patch.
        field_manager: Actor identity sent with every patch.
    """

    def __init__(
        self,
        allowlist: Allowlist,
        store: ResourceStore,
        field_manager: str = FIELD_MANAGER,
    ) -> None:
        self._allowlist = allowlist
        self._store = store
        self._field_manager = field_manager

    @property
    def allowlist(self) -> Allowlist:
        return self._allowlist

    @property
    def store(self) -> ResourceStore:
        return self._store

    async def handle(
        self,
        namespace: str,
        name: str,
        headers: Mapping[str, HeaderValue],
    ) -> WebhookOutcome:
        """Process one git-sync webhook call. Never raises for expected failures."""
        ref = ResourceRef(namespace=namespace, name=name)
        logger.info("Received webhook", configmap=str(ref))

        # ── Step 2: authorization (before any other work) ─────────────────────
        if not self._allowlist.contains(ref):
            logger.warning("Denied update to unauthorized ConfigMap", configmap=str(ref))
            return WebhookOutcome.forbidden()

        # ── Step 3: hash extraction ───────────────────────────────────────────
        git_hash = extract_sync_hash(headers)
        if git_hash is None:
            logger.warning(
                "Request missing Gitsync-Hash header",
                configmap=str(ref),
            )
            return WebhookOutcome.missing_hash()

        # ── Step 4: read current state ────────────────────────────────────────
        try:
            annotations = await self._store.get_annotations(namespace, name)
        except StoreError as exc:
            logger.error(
                "Failed to load current ConfigMap value",
                configmap=str(ref),
                git_hash=git_hash,
                error=str(exc),
                error_type=type(exc).__name__,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
            return WebhookOutcome.upstream_failure(exc)

        # ── Step 5: idempotency check ─────────────────────────────────────────
        current_hash = annotations.get(SYNC_HASH_ANNOTATION)
        if current_hash == git_hash:
            logger.info(
                "Git hash unchanged, skipping update",
                configmap=str(ref),
                git_hash=git_hash,
            )
            return WebhookOutcome.already_current(git_hash)

        # ── Step 6: single-key merge patch ────────────────────────────────────
        try:
            await self._store.apply_merge_patch(
                namespace,
                name,
                {SYNC_HASH_ANNOTATION: git_hash},
                self._field_manager,
            )
        except StoreError as exc:
            logger.error(
                "Failed to update ConfigMap",
                configmap=str(ref),
                git_hash=git_hash,
                previous_hash=current_hash,
                error=str(exc),
                error_type=type(exc).__name__,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
            return WebhookOutcome.upstream_failure(exc)

        # ── Step 7 ────────────────────────────────────────────────────────────
        logger.info(
            "Successfully updated ConfigMap",
            configmap=str(ref),
            git_hash=git_hash,
            previous_hash=current_hash,
        )
        return WebhookOutcome.updated(git_hash)


# ─── Header extraction ────────────────────────────────────────────────────────


def extract_sync_hash(headers: Mapping[str, HeaderValue]) -> Optional[str]:
    """Return the Gitsync-Hash header value, or None if it is unusable.

    The header name is matched case-insensitively, so both Starlette's
    ``Headers`` and a plain dict work. The first matching header wins.

    Returns None when the header is:
      - absent
      - not decodable as visible ASCII (bytes that are not ASCII, control
        characters, or non-ASCII text)

    An empty value is a valid hash.
    """
    for key, value in headers.items():
        if key.lower() != _SYNC_HASH_HEADER_LOWER:
            continue
        return _decode_header_value(value)
    return None


def _decode_header_value(value: HeaderValue) -> Optional[str]:
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError:
            return None
    if not isinstance(value, str):
        return None
    if not all(ch == "\t" or " " <= ch <= "~" for ch in value):
        return None
    return value
