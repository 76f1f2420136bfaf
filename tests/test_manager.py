"""Unit tests for src.translation.manager: batch send and reminder workflows."""

import pytest

from src.notify import NotificationError
from src.translation import WorkflowManager
from src.translation.exceptions import EmptySelectionError, ValidationError
from src.translation.models import KeyStatus

from conftest import FakeGateway


class TestSendBatch:

    def test_posts_then_commits(self, manager, store, gateway):
        request = manager.send_batch(["1", "2"])

        assert len(gateway.posts) == 1
        post = gateway.posts[0]
        assert post["channel"] == "#translations"
        assert "`DETAIL_MULTI_RATE_CANCELLATION_OPTIONS_AVAILABLE`" in post["text"]
        assert request.message == post["text"]
        assert request.message_url.endswith("p1700000000000001")
        assert store.get_key("1").status is KeyStatus.SENT
        assert store.get_key("2").status is KeyStatus.SENT
        assert store.get_key("3").status is KeyStatus.IN_PROGRESS

    def test_explicit_channel(self, manager, gateway):
        request = manager.send_batch(["3"], channel="#mobile-translations")
        assert gateway.posts[0]["channel"] == "#mobile-translations"
        assert request.channel == "#mobile-translations"

    def test_idempotency_key_posts_once(self, manager, store, gateway):
        first = manager.send_batch(["1"], idempotency_key="req-1")
        second = manager.send_batch(["1"], idempotency_key="req-1")

        assert first is second
        assert len(gateway.posts) == 1
        assert gateway.posts[0]["idempotency_key"] == "req-1"
        assert len(store.list_proofreading()) == 4

    def test_empty_selection(self, manager, gateway):
        with pytest.raises(EmptySelectionError):
            manager.send_batch([])
        assert gateway.posts == []

    def test_gateway_failure_leaves_store_unchanged(self, store, config_loader):
        failing = FakeGateway(error=NotificationError("down", code="http_error", retryable=True))
        manager = WorkflowManager(store, gateway=failing, config_loader=config_loader)

        with pytest.raises(NotificationError) as exc_info:
            manager.send_batch(["1", "2"])

        assert exc_info.value.retryable
        assert store.get_key("1").status is KeyStatus.IN_PROGRESS
        assert store.get_key("2").status is KeyStatus.IN_PROGRESS
        assert len(store.list_proofreading()) == 3

    def test_notifications_disabled_commits_without_posting(self, manager, store, gateway, config):
        config["workflow"]["notifications"] = False
        request = manager.send_batch(["2"])

        assert gateway.posts == []
        assert request.message_url is None
        assert request.channel == "#translations"
        assert store.get_key("2").status is KeyStatus.SENT

    def test_deep_link_template_from_config(self, manager, config):
        config["workflow"]["deep_link_template"] = "https://tms.example/k/{key}"
        text = manager.preview_batch(["3"])
        assert "(https://tms.example/k/LIST_SMART_SEARCH_TITLE)" in text

    def test_preview_does_not_mutate(self, manager, store, gateway):
        manager.preview_batch(["1"])
        assert gateway.posts == []
        assert store.get_key("1").status is KeyStatus.IN_PROGRESS

    def test_preview_empty_selection(self, manager):
        with pytest.raises(EmptySelectionError):
            manager.preview_batch([])


class TestReminder:

    def test_send_reminder(self, manager, gateway):
        receipt = manager.send_reminder("1")
        assert receipt.channel == "#translations"
        assert "@spain-translation-team" in gateway.posts[0]["text"]
        assert "@germany-translation-team" not in gateway.posts[0]["text"]

    def test_complete_request_rejected(self, manager, gateway):
        with pytest.raises(ValidationError) as exc_info:
            manager.send_reminder("3")
        assert exc_info.value.code == "request_complete"
        assert gateway.posts == []

    def test_preview_reminder(self, manager):
        assert "🌍 **Pending Languages:** DE, ES, PT, NL, FR, IT" in manager.preview_reminder("2")
