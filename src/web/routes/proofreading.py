"""Proofreading progress routes - list, completion flags and reminders."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from src.logger import get_logger
from src.translation import FilterMode, progress
from src.web.ui_state import login_required

from ._helpers import get_json_body, get_manager, get_store

proofreading_bp = Blueprint("proofreading", __name__)
logger = get_logger(__name__)


@proofreading_bp.get("/")
@login_required
def list_requests():
    """Return proofreading requests, newest first, filtered by ?filter=all|complete|incomplete."""
    raw_filter = request.args.get("filter")
    try:
        mode = progress.parse_filter_mode(raw_filter)
    except ValueError:
        return jsonify({
            "error": f"Unknown filter: {raw_filter}",
            "code": "validation_error",
            "allowed": [m.value for m in FilterMode],
        }), 400

    requests = get_store().filter_proofreading(mode)
    return jsonify({
        "filter": mode.value,
        "requests": [progress.summarize(item) for item in requests],
        "total": len(requests),
    })


@proofreading_bp.get("/<request_id>")
@login_required
def get_request(request_id: str):
    return jsonify({"request": progress.summarize(get_store().get_proofreading(request_id))})


@proofreading_bp.put("/<request_id>/languages/<language>")
@login_required
def update_language(request_id: str, language: str):
    """Record a proofreading event for one language. Body: {"complete": bool}."""
    data = get_json_body()
    complete = data.get("complete", True)
    if not isinstance(complete, bool):
        return jsonify({"error": "'complete' must be a boolean", "code": "validation_error"}), 400

    updated = get_store().set_language_complete(request_id, language, complete)
    return jsonify({"request": progress.summarize(updated)})


@proofreading_bp.get("/<request_id>/reminder")
@login_required
def preview_reminder(request_id: str):
    return jsonify({"message": get_manager().preview_reminder(request_id)})


@proofreading_bp.post("/<request_id>/reminder")
@login_required
def send_reminder(request_id: str):
    data = get_json_body()
    receipt = get_manager().send_reminder(request_id, channel=data.get("channel"))
    return jsonify({
        "receipt": receipt.to_dict(),
        "message": "Reminder has been sent successfully to the translation channel.",
    })
