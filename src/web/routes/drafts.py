"""Draft generation routes - start, poll and cancel draft jobs."""

from __future__ import annotations

from flask import Blueprint, jsonify

from src.ai import DraftService
from src.config import load_config
from src.logger import get_logger
from src.web import tasks
from src.web.ui_state import login_required

from ._helpers import get_json_body, get_services, get_text_field

drafts_bp = Blueprint("drafts", __name__)
logger = get_logger(__name__)

DEFAULT_FORM_ID = "default"


def _build_service() -> DraftService:
    factory = get_services().get("draft_service_factory")
    if factory is not None:
        return factory()
    return DraftService(load_config())


@drafts_bp.post("/")
@login_required
def start_drafts():
    """Start draft generation for the form's text. Body: text, optional form_id."""
    data = get_json_body()
    text = get_text_field(data, "text")
    form_id = str(data.get("form_id") or DEFAULT_FORM_ID)

    if not text.strip():
        return jsonify({"error": "English text is required to generate drafts", "code": "validation_error"}), 400

    config = load_config()
    timeout = float(config.get("drafts", {}).get("job_timeout", 60))
    background = get_services().get("background_jobs", True)

    job = tasks.create_draft_job(_build_service(), form_id, text, timeout=timeout, background=background)
    return jsonify({"job": tasks.serialize_job(job)}), 202


@drafts_bp.get("/<job_id>")
@login_required
def get_draft_job(job_id: str):
    job = tasks.get_job(job_id)
    if not job:
        return jsonify({"error": "Draft job not found", "code": "not_found"}), 404
    return jsonify({"job": tasks.serialize_job(job)})


@drafts_bp.delete("/<job_id>")
@login_required
def cancel_draft_job(job_id: str):
    if not tasks.cancel_job(job_id):
        return jsonify({"error": "Draft job not found or already finished", "code": "not_found"}), 404
    return jsonify({"cancelled": True, "job_id": job_id})


@drafts_bp.put("/source")
@login_required
def update_source():
    """Report the form's current text so results for older text get discarded."""
    data = get_json_body()
    form_id = str(data.get("form_id") or DEFAULT_FORM_ID)
    snapshot = tasks.update_source_text(form_id, get_text_field(data, "text"))
    return jsonify({"form_id": form_id, "snapshot": snapshot})
