"""Settings management API routes."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict

from flask import Blueprint, jsonify

import src.config as config
from src.config import (
    BUILTIN_DRAFT_PROVIDERS,
    BUILTIN_DRAFT_PROVIDER_DISPLAY_NAMES,
    NOTIFICATION_PROVIDERS,
    PROVIDER_DEFAULTS,
    PROVIDER_NAME_PATTERN,
)
from src.logger import LOG_FILE, LOG_MODES, get_logger, _clear_log_mode_cache
from src.translation import PROJECTS
from src.web.ui_state import login_required

from ._helpers import get_json_body

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)

WORKFLOW_BOOLEAN_FIELDS = ("auto_translate", "notifications", "seed_demo_data")


@settings_bp.get("/")
@login_required
def get_settings():
    """Return current configuration with meta information for the settings form."""
    current_config = config.load_config()
    logger.debug("Settings retrieved with defaults merged")
    return jsonify({
        "config": current_config,
        "meta": {
            "draft_providers": [
                {"id": p, "name": BUILTIN_DRAFT_PROVIDER_DISPLAY_NAMES[p]}
                for p in BUILTIN_DRAFT_PROVIDERS
            ],
            "notification_providers": NOTIFICATION_PROVIDERS,
            "projects": list(PROJECTS),
            "log_modes": list(LOG_MODES),
            "provider_defaults": PROVIDER_DEFAULTS,
            "provider_name_pattern": PROVIDER_NAME_PATTERN,
        }
    })


@settings_bp.put("/")
@login_required
def update_settings():
    """Update configuration. Body: {"config": {...partial config...}}."""
    data = get_json_body()
    if "config" not in data:
        return jsonify({"error": "Missing 'config' in request body", "code": "validation_error"}), 400

    new_config = data["config"]
    validation_error = validate_config(new_config)
    if validation_error:
        return jsonify({"error": validation_error, "code": "validation_error"}), 400

    current_config = config.load_config()

    # Section-wise merge so fields missing from the request are preserved
    for section in ("workflow", "notifications"):
        if section in new_config:
            current_config[section].update(new_config[section])

    if "drafts" in new_config:
        drafts = current_config["drafts"]
        for key, value in new_config["drafts"].items():
            if isinstance(value, dict) and isinstance(drafts.get(key), dict):
                drafts[key].update(value)
            else:
                drafts[key] = value

    if "log_mode" in new_config:
        current_config["log_mode"] = new_config["log_mode"]

    config.save_config(current_config)

    # Clear log mode cache to ensure new log mode takes effect
    _clear_log_mode_cache()

    logger.info("Settings updated successfully")
    return jsonify({"message": "Settings updated successfully", "config": current_config})


@settings_bp.delete("/logs")
@login_required
def clear_logs():
    """Delete all log files to free up disk space."""
    log_dir = Path(LOG_FILE).parent
    deleted_count = 0
    if log_dir.exists():
        for log_path in log_dir.glob("*.log"):
            log_path.unlink()
            deleted_count += 1

    if deleted_count > 0:
        logger.info("Deleted %d log file(s)", deleted_count)
        return jsonify({"message": f"Successfully deleted {deleted_count} log file(s)"})
    return jsonify({"message": "No log files found to delete"})


@settings_bp.post("/reset")
@login_required
def reset_settings():
    """Drop stored settings and start over from the defaults."""
    config.factory_reset()
    _clear_log_mode_cache()
    return jsonify({"message": "Settings reset to defaults", "config": config.load_config()})


def _validate_provider_block(name: str, provider_config: Any) -> str | None:
    if not isinstance(provider_config, dict):
        return f"{name} config must be an object"

    if "api_url" in provider_config and provider_config["api_url"] and not isinstance(provider_config["api_url"], str):
        return f"{name} api_url must be a string"

    if "models" in provider_config:
        models = provider_config["models"]
        if not isinstance(models, list):
            return f"{name} models must be an array"
        models = [m for m in models if m and isinstance(m, str)]
        if len(models) > 5:
            return f"{name} can have at most 5 models"
        provider_config["models"] = models

    if "max_retries" in provider_config:
        retries = provider_config["max_retries"]
        if not isinstance(retries, int) or isinstance(retries, bool) or retries < 1:
            return f"{name} max_retries must be at least 1"

    if "timeout" in provider_config:
        timeout = provider_config["timeout"]
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            return f"{name} timeout must be a positive number"

    return None


def validate_config(config_dict: Dict[str, Any]) -> str | None:
    """Validate configuration structure and return error message if invalid."""
    if not isinstance(config_dict, dict):
        return "Configuration must be an object"

    workflow = config_dict.get("workflow")
    if workflow is not None:
        if not isinstance(workflow, dict):
            return "workflow config must be an object"
        channel = workflow.get("slack_channel")
        if channel is not None and (not isinstance(channel, str) or not re.match(r"^#[\w.-]+$", channel)):
            return "slack_channel must look like #channel-name"
        project = workflow.get("default_project")
        if project is not None and project not in PROJECTS:
            return f"default_project must be one of: {', '.join(PROJECTS)}"
        for field in WORKFLOW_BOOLEAN_FIELDS:
            if field in workflow and not isinstance(workflow[field], bool):
                return f"{field} must be a boolean"
        template = workflow.get("deep_link_template")
        if template is not None and (not isinstance(template, str) or "{key}" not in template):
            return "deep_link_template must contain {key}"

    notifications = config_dict.get("notifications")
    if notifications is not None:
        error = _validate_provider_block("notifications", notifications)
        if error:
            return error
        provider = notifications.get("provider")
        if provider is not None and provider not in NOTIFICATION_PROVIDERS:
            return f"Invalid notification provider: {provider}"

    drafts = config_dict.get("drafts")
    if drafts is not None:
        if not isinstance(drafts, dict):
            return "drafts config must be an object"
        provider = drafts.get("provider")
        if provider is not None and (not isinstance(provider, str) or not re.match(PROVIDER_NAME_PATTERN, provider)):
            return f"Invalid draft provider name: {provider}. Only letters, numbers, hyphens, and underscores allowed."
        for key, value in drafts.items():
            if isinstance(value, dict):
                error = _validate_provider_block(key, value)
                if error:
                    return error
        latency = drafts.get("simulated_latency")
        if latency is not None and (not isinstance(latency, (int, float)) or isinstance(latency, bool) or latency < 0):
            return "simulated_latency must be a non-negative number"
        job_timeout = drafts.get("job_timeout")
        if job_timeout is not None and (
            not isinstance(job_timeout, (int, float)) or isinstance(job_timeout, bool) or job_timeout <= 0
        ):
            return "job_timeout must be a positive number"
        retries = drafts.get("max_retries")
        if retries is not None and (not isinstance(retries, int) or isinstance(retries, bool) or retries < 1):
            return "drafts max_retries must be at least 1"

    log_mode = config_dict.get("log_mode")
    if log_mode is not None and log_mode not in LOG_MODES:
        return f"log_mode must be one of: {', '.join(LOG_MODES)}"

    return None
