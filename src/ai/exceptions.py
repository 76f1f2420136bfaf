"""
AI Service Exceptions

This module contains exception classes for the draft generation service.
Separated to avoid circular imports between service.py and providers.py.
"""


class TranslationError(Exception):
    """Draft generation error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class DraftCancelled(TranslationError):
    """Generation stopped because the caller no longer wants the result."""

    def __init__(self, message: str = "Draft generation cancelled"):
        super().__init__(message, code="cancelled")
