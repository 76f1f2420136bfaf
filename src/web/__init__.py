"""Web application package for Translation Desk."""

from flask import Flask

from src.config import initialize_app


def create_app(**kwargs) -> Flask:
    """Application factory for the web interface."""
    initialize_app()

    from .app import build_app  # Import here to avoid circular imports

    return build_app(**kwargs)


__all__ = ["create_app"]
