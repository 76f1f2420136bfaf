"""
AI Module

This module provides the machine draft generation service and related utilities.
"""

from src.ai.exceptions import DraftCancelled, TranslationError
from src.ai.service import DraftService, validate_draft_config

__all__ = ['DraftCancelled', 'TranslationError', 'DraftService', 'validate_draft_config']
