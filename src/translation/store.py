"""
Translation Request Store

The in-memory owner of translation key requests and proofreading batches.
Every mutation runs under one lock, so duplicate checks and batch commits
are atomic within the process. The store holds domain data only; view
state (selected tab, signed-in user, open dialogs) lives elsewhere.
"""

import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from src.language_codes import PROOFREADING_LANGUAGES, Language, parse_language
from src.logger import get_logger
from src.translation import progress
from src.translation.exceptions import (
    DuplicateKeyError,
    EmptySelectionError,
    InvalidSelectionError,
    RequestNotFoundError,
    ValidationError,
)
from src.translation.models import (
    PROJECTS,
    FilterMode,
    KeyStatus,
    ProofreadingRequest,
    TranslationDraft,
    TranslationKeyRequest,
)

logger = get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class TranslationRequestStore:
    """Authoritative collection of key requests and proofreading requests."""

    def __init__(
        self,
        keys: Optional[Iterable[TranslationKeyRequest]] = None,
        proofreading: Optional[Iterable[ProofreadingRequest]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._lock = threading.RLock()
        self._clock = clock or datetime.now
        self._new_id = id_factory or _new_id
        self._keys: Dict[str, TranslationKeyRequest] = {}
        self._proofreading: Dict[str, ProofreadingRequest] = {}

        for item in keys or []:
            self._keys[item.id] = item
        for request in proofreading or []:
            self._proofreading[request.id] = request

    # ============================================================
    # Key requests
    # ============================================================

    def list_keys(self, status: Union[KeyStatus, str, None] = None) -> List[TranslationKeyRequest]:
        """Return key requests in creation order, optionally filtered by status."""
        if status is not None and not isinstance(status, KeyStatus):
            status = KeyStatus(status)
        with self._lock:
            return [item for item in self._keys.values() if status is None or item.status == status]

    def get_key(self, key_id: str) -> TranslationKeyRequest:
        with self._lock:
            item = self._keys.get(key_id)
        if item is None:
            raise RequestNotFoundError(
                f"Translation key request {key_id} not found",
                details={"id": key_id},
            )
        return item

    def _find_duplicate(self, project: str, key: str) -> Optional[TranslationKeyRequest]:
        folded = key.strip().casefold()
        for item in self._keys.values():
            if item.project == project and item.key.casefold() == folded:
                return item
        return None

    def is_key_taken(self, project: str, key: str) -> bool:
        """Inline validation: True if the project already has this key (any case)."""
        if not project or not key or not key.strip():
            return False
        with self._lock:
            return self._find_duplicate(project, key) is not None

    def create_key_request(
        self,
        project: str,
        key: str,
        english_text: str,
        requester: str,
        drafts: Optional[Dict] = None,
    ) -> TranslationKeyRequest:
        """
        Add a new key request in the in_progress state.

        Raises:
            ValidationError: unknown project, non-string or blank key or text.
            DuplicateKeyError: the project already has this key (case-insensitive).
        """
        for field_name, value in (("key", key), ("english_text", english_text)):
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{field_name} must be a string", details={"field": field_name})

        key = (key or "").strip()
        english_text = (english_text or "").strip()

        if not isinstance(project, str) or project not in PROJECTS:
            raise ValidationError(
                f"Unknown project: {project!r}",
                details={"field": "project", "allowed": list(PROJECTS)},
            )
        if not key:
            raise ValidationError("Translation key is required", details={"field": "key"})
        if not english_text:
            raise ValidationError("English text is required", details={"field": "english_text"})

        draft_texts = TranslationDraft.from_mapping(drafts or {}).texts

        with self._lock:
            duplicate = self._find_duplicate(project, key)
            if duplicate is not None:
                logger.info("Rejected duplicate key %s in project %s", key, project)
                raise DuplicateKeyError(project, key, existing_id=duplicate.id)

            item = TranslationKeyRequest(
                id=self._new_id(),
                key=key,
                english_text=english_text,
                project=project,
                created_at=self._clock(),
                requester=requester,
                status=KeyStatus.IN_PROGRESS,
                drafts=draft_texts,
            )
            self._keys[item.id] = item

        logger.info("Created key request %s (%s / %s)", item.id, project, key)
        return item

    # ============================================================
    # Batches
    # ============================================================

    def select_for_batch(self, key_ids: Iterable[str]) -> List[TranslationKeyRequest]:
        """
        Resolve a set of ids into key requests, in store order.

        Raises:
            RequestNotFoundError: an id is unknown.
            InvalidSelectionError: a selected request was already sent.
        """
        wanted = set(key_ids or [])
        with self._lock:
            unknown = sorted(key_id for key_id in wanted if key_id not in self._keys)
            if unknown:
                raise RequestNotFoundError(
                    "Unknown translation key request(s) in selection",
                    details={"ids": unknown},
                )
            selection = [item for item in self._keys.values() if item.id in wanted]

        already_sent = [item.id for item in selection if not item.is_in_progress]
        if already_sent:
            raise InvalidSelectionError(
                "Only translation keys in progress can be sent",
                details={"ids": already_sent},
            )
        return selection

    def find_by_idempotency_key(self, idempotency_key: Optional[str]) -> Optional[ProofreadingRequest]:
        if not idempotency_key:
            return None
        with self._lock:
            for request in self._proofreading.values():
                if request.idempotency_key == idempotency_key:
                    return request
        return None

    def send_batch(
        self,
        selection: Sequence[TranslationKeyRequest],
        message: str,
        channel: Optional[str] = None,
        message_url: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> ProofreadingRequest:
        """
        Commit a batch: mark every selected key as sent and record the batch.

        The whole selection commits or nothing does.

        Raises:
            EmptySelectionError: the selection is empty.
            RequestNotFoundError / InvalidSelectionError: a selected key vanished
                or is no longer in progress.
        """
        if not selection:
            raise EmptySelectionError()

        with self._lock:
            # Re-validate under the lock; the selection may be stale
            ordered = self.select_for_batch([item.id for item in selection])

            request = ProofreadingRequest(
                id=self._new_id(),
                created_at=self._clock(),
                key_ids=tuple(item.id for item in ordered),
                translation_keys=tuple(item.key for item in ordered),
                completion_status=ProofreadingRequest.empty_status(),
                channel=channel,
                message=message,
                message_url=message_url,
                idempotency_key=idempotency_key,
            )

            for item in ordered:
                item.status = KeyStatus.SENT
            self._proofreading[request.id] = request

        logger.info("Batch %s committed with %d key(s)", request.id, len(ordered))
        return request

    # ============================================================
    # Proofreading requests
    # ============================================================

    def list_proofreading(self) -> List[ProofreadingRequest]:
        with self._lock:
            return list(self._proofreading.values())

    def get_proofreading(self, request_id: str) -> ProofreadingRequest:
        with self._lock:
            request = self._proofreading.get(request_id)
        if request is None:
            raise RequestNotFoundError(
                f"Proofreading request {request_id} not found",
                details={"id": request_id},
            )
        return request

    def filter_proofreading(self, mode: Union[FilterMode, str] = FilterMode.ALL) -> List[ProofreadingRequest]:
        return progress.filter_requests(self.list_proofreading(), mode)

    def set_language_complete(self, request_id: str, language, complete: bool = True) -> ProofreadingRequest:
        """Record a proofreading team finishing (or reopening) one language."""
        parsed: Optional[Language] = parse_language(language)
        if parsed is None or parsed not in PROOFREADING_LANGUAGES:
            raise ValidationError(
                f"Unknown proofreading language: {language!r}",
                details={"field": "language", "allowed": [lang.value for lang in PROOFREADING_LANGUAGES]},
            )

        with self._lock:
            request = self.get_proofreading(request_id)
            request.completion_status[parsed] = bool(complete)

        logger.info(
            "Proofreading request %s: %s marked %s",
            request_id,
            parsed.value,
            "complete" if complete else "incomplete",
        )
        return request

    # Derived views, kept here so callers have one entry point
    compute_completion_rate = staticmethod(progress.compute_completion_rate)
    is_complete = staticmethod(progress.is_complete)
