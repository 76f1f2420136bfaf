"""Flask application configuration and blueprint registration."""

from __future__ import annotations

import os
import secrets
from typing import Callable, Optional

from flask import Flask, jsonify

from src.ai import DraftService, TranslationError
from src.config import load_config
from src.language_codes import DRAFT_LANGUAGES, PROOFREADING_LANGUAGES, describe_languages
from src.logger import get_logger
from src.notify import NotificationError
from src.translation import PROJECTS, TranslationRequestStore, WorkflowError, WorkflowManager
from src.translation.seed import build_demo_store

from .routes import drafts_bp, keys_bp, proofreading_bp, session_bp, settings_bp
from .routes._helpers import (
    EXTENSION_KEY,
    notification_error_response,
    translation_error_response,
    workflow_error_response,
)
from .ui_state import DEFAULT_VIEW, VIEWS

logger = get_logger(__name__)


def build_app(
    store: Optional[TranslationRequestStore] = None,
    gateway=None,
    draft_service_factory: Optional[Callable[[], DraftService]] = None,
    background_jobs: bool = True,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data (flags, emoji in messages).
    app.config["JSON_AS_ASCII"] = False
    app.json.ensure_ascii = False
    app.config["SECRET_KEY"] = os.environ.get("TRANSLATION_DESK_SECRET_KEY") or secrets.token_hex(32)

    if store is None:
        workflow = load_config().get("workflow", {})
        if workflow.get("seed_demo_data", True):
            store = build_demo_store()
            logger.info("Request store seeded with demo data")
        else:
            store = TranslationRequestStore()

    app.extensions[EXTENSION_KEY] = {
        "store": store,
        "manager": WorkflowManager(store, gateway=gateway),
        "draft_service_factory": draft_service_factory,
        "background_jobs": background_jobs,
    }

    register_blueprints(app)
    register_error_handlers(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(session_bp, url_prefix="/api/session")
    app.register_blueprint(keys_bp, url_prefix="/api/keys")
    app.register_blueprint(proofreading_bp, url_prefix="/api/proofreading")
    app.register_blueprint(drafts_bp, url_prefix="/api/drafts")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_error_handlers(app: Flask) -> None:
    """Map domain exceptions to JSON responses."""

    @app.errorhandler(WorkflowError)
    def handle_workflow_error(e):
        logger.info("Workflow error (%s): %s", e.code, e)
        return workflow_error_response(e)

    @app.errorhandler(NotificationError)
    def handle_notification_error(e):
        logger.warning("Notification failed (%s): %s", e.code, e)
        return notification_error_response(e)

    @app.errorhandler(TranslationError)
    def handle_translation_error(e):
        logger.warning("Draft generation failed (%s): %s", e.code, e)
        return translation_error_response(e)

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"error": "Resource not found", "code": "not_found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "code": "method_not_allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "An unexpected error occurred", "code": "internal_error"}), 500


def register_default_routes(app: Flask) -> None:
    """Register default health and meta routes."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.get("/api/meta")
    def meta():
        """Static choices the forms need: projects, languages and views."""
        workflow = load_config().get("workflow", {})
        return jsonify({
            "projects": list(PROJECTS),
            "default_project": workflow.get("default_project", PROJECTS[0]),
            "draft_languages": describe_languages(DRAFT_LANGUAGES),
            "proofreading_languages": describe_languages(PROOFREADING_LANGUAGES),
            "views": list(VIEWS),
            "default_view": DEFAULT_VIEW,
        })
