"""
Translation Desk test suite: shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import copy
import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest

from src.config import DEFAULT_CONFIG
from src.notify import DeliveryReceipt, NotificationError


# ---------------------------------------------------------------------------
# Environment setup: keep settings and jobs out of the real workspace
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch):
    """Point the settings database at a temp file and reset global state."""
    import src.core.database as db
    import src.logger as logger_mod
    from src.web import tasks

    monkeypatch.setattr(db, "DB_FILE", tmp_path / "settings.db")
    logger_mod._log_mode_cache = None
    tasks.reset_jobs()
    yield
    tasks.reset_jobs()
    logger_mod._log_mode_cache = None


class FakeGateway:
    """Records posted messages; optionally fails with a NotificationError."""

    provider = "fake"

    def __init__(self, error: Optional[NotificationError] = None):
        self.error = error
        self.posts: List[Dict[str, Any]] = []

    def post(self, channel: str, text: str, idempotency_key: Optional[str] = None) -> DeliveryReceipt:
        if self.error is not None:
            raise self.error
        self.posts.append({"channel": channel, "text": text, "idempotency_key": idempotency_key})
        n = len(self.posts)
        return DeliveryReceipt(
            channel=channel,
            ts=f"1700000000.00000{n}",
            permalink=f"https://chat.example/archives/{channel.lstrip('#')}/p170000000000000{n}",
            provider=self.provider,
        )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clock():
    """Deterministic, strictly increasing clock starting at 2024-02-01."""
    start = datetime(2024, 2, 1, 9, 0, 0)
    ticks = itertools.count()
    return lambda: start + timedelta(minutes=next(ticks))


@pytest.fixture
def id_factory():
    counter = itertools.count(100)
    return lambda: str(next(counter))


@pytest.fixture
def store(clock, id_factory):
    """Demo store (keys 1..5, batches 1..3) with deterministic ids and clock."""
    from src.translation.seed import build_demo_store

    return build_demo_store(clock=clock, id_factory=id_factory)


@pytest.fixture
def config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def config_loader(config):
    return lambda: config


@pytest.fixture
def manager(store, gateway, config_loader):
    from src.translation import WorkflowManager

    return WorkflowManager(store, gateway=gateway, config_loader=config_loader)


@pytest.fixture
def instant_draft_config(config) -> Dict[str, Any]:
    config["drafts"]["simulated_latency"] = 0
    return config


@pytest.fixture
def app(store, gateway, instant_draft_config):
    from src.ai import DraftService
    from src.web.app import build_app

    application = build_app(
        store=store,
        gateway=gateway,
        draft_service_factory=lambda: DraftService(instant_draft_config),
        background_jobs=False,
    )
    application.config["TESTING"] = True
    return application


@pytest.fixture
def anonymous_client(app):
    return app.test_client()


@pytest.fixture
def client(app):
    """Test client with the mock user signed in."""
    test_client = app.test_client()
    response = test_client.post("/api/session/sign-in")
    assert response.status_code == 200
    return test_client
