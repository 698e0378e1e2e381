"""Webhook outcome — the tagged result of one ``WebhookHandler.handle()`` call.

One variant per terminal branch of the conditional-patch algorithm:

  UPDATED           annotation written with the new hash
  ALREADY_CURRENT   annotation already held the hash; nothing written
  FORBIDDEN         target not in the allowlist
  MISSING_HASH      no usable Gitsync-Hash header
  UPSTREAM_FAILURE  the resource store read or write failed

The HTTP projection of each variant lives in models/responses.py; the
handler itself never touches transport types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gitsync_adapter.errors import StoreError


class OutcomeKind(str, Enum):
    """Terminal state of a webhook call."""

    UPDATED = "UPDATED"
    ALREADY_CURRENT = "ALREADY_CURRENT"
    FORBIDDEN = "FORBIDDEN"
    MISSING_HASH = "MISSING_HASH"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"


@dataclass(frozen=True)
class WebhookOutcome:
    """Result of a webhook call.

    INVARIANT:
      - ``git_hash`` is set iff kind is UPDATED or ALREADY_CURRENT.
      - ``error`` is set iff kind is UPSTREAM_FAILURE.

    Build instances through the classmethods, not the constructor.
    """

    kind: OutcomeKind
    git_hash: Optional[str] = None
    error: Optional[StoreError] = None

    @classmethod
    def updated(cls, git_hash: str) -> "WebhookOutcome":
        return cls(kind=OutcomeKind.UPDATED, git_hash=git_hash)

    @classmethod
    def already_current(cls, git_hash: str) -> "WebhookOutcome":
        return cls(kind=OutcomeKind.ALREADY_CURRENT, git_hash=git_hash)

    @classmethod
    def forbidden(cls) -> "WebhookOutcome":
        return cls(kind=OutcomeKind.FORBIDDEN)

    @classmethod
    def missing_hash(cls) -> "WebhookOutcome":
        return cls(kind=OutcomeKind.MISSING_HASH)

    @classmethod
    def upstream_failure(cls, error: StoreError) -> "WebhookOutcome":
        return cls(kind=OutcomeKind.UPSTREAM_FAILURE, error=error)

    @property
    def is_success(self) -> bool:
        return self.kind in (OutcomeKind.UPDATED, OutcomeKind.ALREADY_CURRENT)

    @property
    def updated_flag(self) -> bool:
        """True only for UPDATED; mirrors the ``updated`` response field."""
        return self.kind is OutcomeKind.UPDATED
