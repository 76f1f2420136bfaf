"""Shared helpers for route blueprints."""

from __future__ import annotations

from typing import Any, Dict, List

from flask import current_app, jsonify, request

from src.ai import TranslationError
from src.notify import NotificationError
from src.translation import TranslationRequestStore, WorkflowManager
from src.translation.exceptions import (
    DuplicateKeyError,
    InvalidSelectionError,
    RequestNotFoundError,
    ValidationError,
    WorkflowError,
)

EXTENSION_KEY = "translation_desk"

_STATUS_BY_ERROR = (
    (RequestNotFoundError, 404),
    (DuplicateKeyError, 409),
    (InvalidSelectionError, 409),
)


def get_services() -> Dict[str, Any]:
    return current_app.extensions[EXTENSION_KEY]


def get_store() -> TranslationRequestStore:
    return get_services()["store"]


def get_manager() -> WorkflowManager:
    return get_services()["manager"]


def get_json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def get_id_list(data: Dict[str, Any], field: str = "ids") -> List[str]:
    """Read a list of ids from a JSON body. Raises ValidationError unless it is a list of strings."""
    value = data.get(field) or []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"'{field}' must be a list of strings", details={"field": field})
    return value


def get_text_field(data: Dict[str, Any], field: str) -> str:
    """Read an optional text field from a JSON body. Raises ValidationError for non-strings."""
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string", details={"field": field})
    return value


def workflow_error_response(exc: WorkflowError):
    status = 400
    for error_type, error_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status = error_status
            break
    return jsonify(exc.to_dict()), status


def notification_error_response(exc: NotificationError):
    return jsonify({
        "error": str(exc),
        "code": exc.code,
        "retryable": exc.retryable,
    }), 502


def translation_error_response(exc: TranslationError):
    status = 400 if exc.code in ("validation_error", "ai_config_missing") else 502
    return jsonify({
        "error": str(exc),
        "code": exc.code,
        "retryable": status == 502,
    }), status
