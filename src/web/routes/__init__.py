"""Route blueprints for the web application."""

from .keys import keys_bp
from .proofreading import proofreading_bp
from .drafts import drafts_bp
from .session import session_bp
from .settings import settings_bp

__all__ = [
    "keys_bp",
    "proofreading_bp",
    "drafts_bp",
    "session_bp",
    "settings_bp",
]
