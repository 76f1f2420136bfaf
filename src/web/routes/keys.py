"""Translation key request routes - create, validate, list and send batches."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from src.logger import get_logger
from src.translation import KeyStatus, messages
from src.web.ui_state import current_user_name, login_required

from ._helpers import get_id_list, get_json_body, get_manager, get_store

keys_bp = Blueprint("keys", __name__)
logger = get_logger(__name__)


@keys_bp.get("/")
@login_required
def list_keys():
    """Return key requests, optionally filtered by ?status=in_progress|sent."""
    status = request.args.get("status") or None
    try:
        items = get_store().list_keys(status)
    except ValueError:
        allowed = [s.value for s in KeyStatus]
        return jsonify({"error": f"Unknown status: {status}", "code": "validation_error", "allowed": allowed}), 400

    return jsonify({"keys": [item.to_dict() for item in items], "total": len(items)})


@keys_bp.get("/<key_id>")
@login_required
def get_key(key_id: str):
    return jsonify({"key": get_store().get_key(key_id).to_dict()})


@keys_bp.get("/validate")
@login_required
def validate_key():
    """Inline duplicate check used while the key is being typed."""
    project = request.args.get("project", "")
    key = request.args.get("key", "")
    taken = get_store().is_key_taken(project, key)
    payload = {"project": project, "key": key, "available": not taken}
    if taken:
        payload["error"] = f"This key already exists in the {project} project"
    return jsonify(payload)


@keys_bp.post("/")
@login_required
def create_key():
    """Create a key request. Body: project, key, english_text, optional drafts."""
    data = get_json_body()
    drafts = data.get("drafts")
    item = get_store().create_key_request(
        project=data.get("project", ""),
        key=data.get("key", ""),
        english_text=data.get("english_text", ""),
        requester=current_user_name(),
        drafts=drafts if isinstance(drafts, dict) else None,
    )
    return jsonify({
        "key": item.to_dict(),
        "message": f'Translation key "{item.key}" has been created successfully!',
    }), 201


@keys_bp.post("/batch/preview")
@login_required
def preview_batch():
    """Compose the batch message for the selected ids without sending it."""
    data = get_json_body()
    selection, text = get_manager().compose_batch(get_id_list(data))
    return jsonify({"message": text, "count": len(selection)})


@keys_bp.post("/batch")
@login_required
def send_batch():
    """Send the selected keys for proofreading. Body: ids, optional channel, idempotency_key."""
    data = get_json_body()
    idempotency_key = request.headers.get("Idempotency-Key") or data.get("idempotency_key")
    key_ids = get_id_list(data)

    proofreading = get_manager().send_batch(
        key_ids,
        channel=data.get("channel"),
        idempotency_key=idempotency_key,
    )
    return jsonify({
        "proofreading_request": proofreading.to_dict(),
        "message": messages.batch_sent_summary(len(proofreading.key_ids)),
    }), 201
