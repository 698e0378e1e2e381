"""Unit tests for WebhookHandler.handle() and extract_sync_hash().

Verifies:
  - FORBIDDEN for any ref outside the allowlist, store never contacted
  - MISSING_HASH for an absent/undecodable header, store never contacted
  - An empty header value is an ordinary hash
  - Header lookup is case-insensitive
  - ALREADY_CURRENT issues zero writes
  - UPDATED issues exactly one single-key patch with the field manager
  - Store read failure → UPSTREAM_FAILURE, no write attempted
  - Store patch failure → UPSTREAM_FAILURE
"""

from __future__ import annotations

import pytest
from starlette.datastructures import Headers

from gitsync_adapter.allowlist import build_allowlist
from gitsync_adapter.constants import FIELD_MANAGER
from gitsync_adapter.errors import ResourceNotFoundError, StoreError
from gitsync_adapter.models.outcome import OutcomeKind
from gitsync_adapter.webhook.handler import WebhookHandler, extract_sync_hash

ALLOWLIST = build_allowlist(["prod/app-config", "ns2/cm2"])


def _handler(store) -> WebhookHandler:
    return WebhookHandler(ALLOWLIST, store)


# ─── Authorization ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
class TestForbidden:
    @pytest.mark.parametrize(
        "namespace,name",
        [
            ("prod", "other-config"),
            ("staging", "app-config"),
            ("PROD", "app-config"),
            ("prod", "App-Config"),
            ("", ""),
            ("prod/app-config", ""),
        ],
    )
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Gitsync-Hash": "abc123"},
            {"gitsync-hash": "abc123"},
        ],
    )
    async def test_not_allowlisted_is_forbidden(
        self, untouchable_store, namespace: str, name: str, headers: dict
    ) -> None:
        outcome = await _handler(untouchable_store).handle(namespace, name, headers)
        assert outcome.kind is OutcomeKind.FORBIDDEN
        assert outcome.git_hash is None

    async def test_forbidden_does_not_read_headers(self, untouchable_store) -> None:
        class ExplodingHeaders(dict):
            def items(self):  # type: ignore[override]
                pytest.fail("headers must not be read for a forbidden target")

        outcome = await _handler(untouchable_store).handle(
            "prod", "other", ExplodingHeaders({"Gitsync-Hash": "abc"})
        )
        assert outcome.kind is OutcomeKind.FORBIDDEN


# ─── Hash extraction ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
class TestMissingHash:
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Content-Type": "application/json"},
            {"Gitsync_Hash": "abc123"},
            {"X-Gitsync-Hash": "abc123"},
            {"Gitsync-Hash": b"\xff\xfe"},
            {"Gitsync-Hash": "café"},
            {"Gitsync-Hash": "abc\n123"},
        ],
    )
    async def test_missing_or_unusable_header(self, untouchable_store, headers: dict) -> None:
        outcome = await _handler(untouchable_store).handle("prod", "app-config", headers)
        assert outcome.kind is OutcomeKind.MISSING_HASH


class TestExtractSyncHash:
    @pytest.mark.parametrize("key", ["Gitsync-Hash", "gitsync-hash", "GITSYNC-HASH", "GitSync-Hash"])
    def test_case_insensitive_name(self, key: str) -> None:
        assert extract_sync_hash({key: "abc123"}) == "abc123"

    def test_starlette_headers(self) -> None:
        headers = Headers(raw=[(b"gitsync-hash", b"abc123")])
        assert extract_sync_hash(headers) == "abc123"

    def test_ascii_bytes_decoded(self) -> None:
        assert extract_sync_hash({"Gitsync-Hash": b"abc123"}) == "abc123"

    def test_value_is_opaque(self) -> None:
        value = "  Not A Hash / but fine\t"
        assert extract_sync_hash({"Gitsync-Hash": value}) == value

    def test_absent_returns_none(self) -> None:
        assert extract_sync_hash({"Other": "x"}) is None

    def test_empty_value_is_a_hash(self) -> None:
        assert extract_sync_hash({"Gitsync-Hash": ""}) == ""
        assert extract_sync_hash(Headers(raw=[(b"gitsync-hash", b"")])) == ""


# ─── Read / compare / write ───────────────────────────────────────────────────


@pytest.mark.asyncio
class TestConditionalPatch:
    async def test_already_current_issues_no_write(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {"git-sync-hash": "H"}})
        outcome = await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "H"})

        assert outcome.kind is OutcomeKind.ALREADY_CURRENT
        assert outcome.git_hash == "H"
        assert outcome.updated_flag is False
        assert store.reads == [("prod", "app-config")]
        assert store.patches == []

    async def test_changed_hash_patches_once(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {"git-sync-hash": "H1"}})
        outcome = await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "H2"})

        assert outcome.kind is OutcomeKind.UPDATED
        assert outcome.git_hash == "H2"
        assert outcome.updated_flag is True
        assert store.patches == [
            ("prod", "app-config", {"git-sync-hash": "H2"}, FIELD_MANAGER)
        ]

    async def test_absent_annotation_counts_as_different(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        outcome = await _handler(store).handle("prod", "app-config", {"gitsync-hash": "abc123"})

        assert outcome.kind is OutcomeKind.UPDATED
        assert len(store.patches) == 1

    async def test_other_annotations_untouched(self, make_store) -> None:
        store = make_store(
            {("prod", "app-config"): {"owner": "team-a", "git-sync-hash": "old"}}
        )
        await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "new"})

        patched = store.patches[0][2]
        assert patched == {"git-sync-hash": "new"}
        assert store.configmaps[("prod", "app-config")] == {
            "owner": "team-a",
            "git-sync-hash": "new",
        }

    async def test_comparison_is_exact(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {"git-sync-hash": "ABC"}})
        outcome = await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "abc"})
        assert outcome.kind is OutcomeKind.UPDATED

    async def test_custom_field_manager(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        handler = WebhookHandler(ALLOWLIST, store, field_manager="my-adapter")
        await handler.handle("prod", "app-config", {"Gitsync-Hash": "abc"})
        assert store.patches[0][3] == "my-adapter"

    async def test_empty_hash_is_compared_and_patched(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        handler = _handler(store)

        first = await handler.handle("prod", "app-config", {"Gitsync-Hash": ""})
        second = await handler.handle("prod", "app-config", {"Gitsync-Hash": ""})

        assert first.kind is OutcomeKind.UPDATED
        assert first.git_hash == ""
        assert second.kind is OutcomeKind.ALREADY_CURRENT
        assert store.patches == [("prod", "app-config", {"git-sync-hash": ""}, FIELD_MANAGER)]

    async def test_second_identical_call_is_noop(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        handler = _handler(store)

        first = await handler.handle("prod", "app-config", {"Gitsync-Hash": "abc123"})
        second = await handler.handle("prod", "app-config", {"Gitsync-Hash": "abc123"})

        assert first.kind is OutcomeKind.UPDATED
        assert second.kind is OutcomeKind.ALREADY_CURRENT
        assert len(store.patches) == 1


# ─── Store failures ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
class TestUpstreamFailure:
    async def test_not_found_is_upstream_failure_without_write(self, make_store) -> None:
        store = make_store({})
        outcome = await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "abc"})

        assert outcome.kind is OutcomeKind.UPSTREAM_FAILURE
        assert isinstance(outcome.error, ResourceNotFoundError)
        assert store.patches == []

    async def test_read_error_is_upstream_failure_without_write(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        store.read_error = StoreError("boom", namespace="prod", name="app-config", status=403)
        outcome = await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "abc"})

        assert outcome.kind is OutcomeKind.UPSTREAM_FAILURE
        assert outcome.error is store.read_error
        assert store.patches == []

    async def test_patch_error_is_upstream_failure(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        store.patch_error = StoreError("conflict", namespace="prod", name="app-config", status=409)
        outcome = await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "abc"})

        assert outcome.kind is OutcomeKind.UPSTREAM_FAILURE
        assert outcome.error is store.patch_error
        assert len(store.patches) == 1

    async def test_no_retry_on_failure(self, make_store) -> None:
        store = make_store({("prod", "app-config"): {}})
        store.patch_error = StoreError("down", namespace="prod", name="app-config")
        await _handler(store).handle("prod", "app-config", {"Gitsync-Hash": "abc"})

        assert len(store.reads) == 1
        assert len(store.patches) == 1
