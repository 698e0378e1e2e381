"""Tests for WebhookOutcome and the outcome → HTTP projection."""

from __future__ import annotations

import json

import pytest

from gitsync_adapter.errors import StoreError
from gitsync_adapter.models.outcome import OutcomeKind, WebhookOutcome
from gitsync_adapter.models.responses import build_outcome_response


class TestWebhookOutcome:
    def test_updated(self) -> None:
        outcome = WebhookOutcome.updated("abc")
        assert outcome.kind is OutcomeKind.UPDATED
        assert outcome.git_hash == "abc"
        assert outcome.is_success
        assert outcome.updated_flag

    def test_already_current(self) -> None:
        outcome = WebhookOutcome.already_current("abc")
        assert outcome.is_success
        assert not outcome.updated_flag

    def test_failures_carry_no_hash(self) -> None:
        error = StoreError("x", namespace="a", name="b")
        for outcome in (
            WebhookOutcome.forbidden(),
            WebhookOutcome.missing_hash(),
            WebhookOutcome.upstream_failure(error),
        ):
            assert outcome.git_hash is None
            assert not outcome.is_success

    def test_upstream_failure_keeps_error(self) -> None:
        error = StoreError("x", namespace="a", name="b")
        assert WebhookOutcome.upstream_failure(error).error is error


class TestBuildOutcomeResponse:
    def test_updated_body(self) -> None:
        response = build_outcome_response(WebhookOutcome.updated("abc123"))
        assert response.status_code == 200
        assert json.loads(response.body) == {
            "status": "success",
            "git_hash": "abc123",
            "updated": True,
        }

    def test_already_current_body(self) -> None:
        response = build_outcome_response(WebhookOutcome.already_current("abc123"))
        assert response.status_code == 200
        assert json.loads(response.body) == {
            "status": "success",
            "git_hash": "abc123",
            "updated": False,
        }

    @pytest.mark.parametrize(
        "outcome,status",
        [
            (WebhookOutcome.forbidden(), 403),
            (WebhookOutcome.missing_hash(), 400),
            (
                WebhookOutcome.upstream_failure(StoreError("x", namespace="a", name="b")),
                500,
            ),
        ],
    )
    def test_failures_have_empty_body(self, outcome: WebhookOutcome, status: int) -> None:
        response = build_outcome_response(outcome)
        assert response.status_code == status
        assert response.body == b""
