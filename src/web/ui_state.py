"""
Navigation shell state.

Which view is active and who is signed in. This is presentation state and
lives in the Flask session, never in the request store. Sign-in is a stub
that always yields the same mock user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Dict, Optional

from flask import jsonify, session

VIEWS = ("create", "dashboard", "analytics")
DEFAULT_VIEW = "create"

MOCK_USER = {"name": "John Doe", "email": "john.doe@holidu.com"}

_SESSION_KEY = "shell"


@dataclass
class NavigationShell:
    active_view: str = DEFAULT_VIEW
    user: Optional[Dict[str, str]] = field(default=None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def sign_in(self):
        self.user = dict(MOCK_USER)

    def sign_out(self):
        self.user = None
        self.active_view = DEFAULT_VIEW

    def select_view(self, view: str):
        """Switch the active view. Raises ValueError for unknown views."""
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view!r}")
        self.active_view = view

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_view": self.active_view,
            "user": self.user,
            "is_authenticated": self.is_authenticated,
            "views": list(VIEWS),
        }


def load_shell() -> NavigationShell:
    data = session.get(_SESSION_KEY) or {}
    view = data.get("active_view", DEFAULT_VIEW)
    return NavigationShell(
        active_view=view if view in VIEWS else DEFAULT_VIEW,
        user=data.get("user"),
    )


def save_shell(shell: NavigationShell):
    session[_SESSION_KEY] = {"active_view": shell.active_view, "user": shell.user}


def current_user_name() -> str:
    shell = load_shell()
    return shell.user["name"] if shell.user else ""


def login_required(view_func):
    """Reject requests from signed-out sessions with 401."""

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if not load_shell().is_authenticated:
            return jsonify({"error": "Please sign in to continue", "code": "unauthenticated"}), 401
        return view_func(*args, **kwargs)

    return wrapper
