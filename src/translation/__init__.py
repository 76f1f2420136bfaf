"""
Translation module - Core workflow functionality

This module provides:
- TranslationRequestStore: in-memory owner of key and proofreading requests
- WorkflowManager: batch send and reminder workflows
- Progress helpers and message composition
"""

from src.translation.exceptions import (
    WorkflowError,
    ValidationError,
    DuplicateKeyError,
    EmptySelectionError,
    InvalidSelectionError,
    RequestNotFoundError,
    StaleDraftResult,
)
from src.translation.models import (
    PROJECTS,
    FilterMode,
    KeyStatus,
    ProofreadingRequest,
    TranslationDraft,
    TranslationKeyRequest,
)
from src.translation.progress import (
    compute_completion_rate,
    is_complete,
    filter_requests,
)
from src.translation.messages import (
    compose_batch_message,
    compose_reminder,
)
from src.translation.store import TranslationRequestStore
from src.translation.manager import WorkflowManager
