"""Navigation shell routes - sign-in stub and active view."""

from __future__ import annotations

from flask import Blueprint, jsonify

from src.logger import get_logger
from src.web.ui_state import load_shell, login_required, save_shell

from ._helpers import get_json_body

session_bp = Blueprint("session", __name__)
logger = get_logger(__name__)


@session_bp.get("/")
def get_session():
    """Return the current shell state."""
    return jsonify(load_shell().to_dict())


@session_bp.post("/sign-in")
def sign_in():
    shell = load_shell()
    shell.sign_in()
    save_shell(shell)
    logger.info("User %s signed in", shell.user["email"])
    return jsonify(shell.to_dict())


@session_bp.post("/sign-out")
def sign_out():
    shell = load_shell()
    shell.sign_out()
    save_shell(shell)
    return jsonify(shell.to_dict())


@session_bp.put("/view")
@login_required
def select_view():
    data = get_json_body()
    shell = load_shell()
    try:
        shell.select_view(str(data.get("view", "")))
    except ValueError as e:
        return jsonify({"error": str(e), "code": "validation_error"}), 400
    save_shell(shell)
    return jsonify(shell.to_dict())
