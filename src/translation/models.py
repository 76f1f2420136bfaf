"""
Workflow data model

Dataclasses for translation key requests, proofreading batches and machine
drafts, plus the fixed project list.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from src.language_codes import (
    DRAFT_LANGUAGES,
    PROOFREADING_LANGUAGES,
    Language,
    parse_language,
)

PROJECTS: Tuple[str, ...] = (
    "Holidu Web",
    "Mobile",
    "Backend",
    "Admin",
    "API",
    "CMS",
)


class KeyStatus(str, Enum):
    """Lifecycle of a key request: in_progress -> sent, never back."""

    IN_PROGRESS = "in_progress"
    SENT = "sent"


class FilterMode(str, Enum):
    ALL = "all"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class TranslationKeyRequest:
    """A request to add a translation key to a project."""

    id: str
    key: str
    english_text: str
    project: str
    created_at: datetime
    requester: str
    status: KeyStatus = KeyStatus.IN_PROGRESS
    drafts: Dict[Language, str] = field(default_factory=dict)

    @property
    def is_in_progress(self) -> bool:
        return self.status == KeyStatus.IN_PROGRESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "english_text": self.english_text,
            "project": self.project,
            "created_at": _isoformat(self.created_at),
            "requester": self.requester,
            "status": self.status.value,
            "drafts": {language.value: text for language, text in self.drafts.items()},
        }


@dataclass
class ProofreadingRequest:
    """
    A batch of keys sent to the proofreading teams.

    ``key_ids`` reference the originating key requests. ``translation_keys``
    holds their names in the same order for message composition; key names
    never change after creation, so the two cannot drift apart.

    Only ``completion_status`` changes after creation.
    """

    id: str
    created_at: datetime
    key_ids: Tuple[str, ...]
    translation_keys: Tuple[str, ...]
    completion_status: Dict[Language, bool]
    channel: Optional[str] = None
    message: str = ""
    message_url: Optional[str] = None
    idempotency_key: Optional[str] = None

    def __post_init__(self):
        if len(self.key_ids) != len(self.translation_keys):
            raise ValueError("key_ids and translation_keys must have the same length")

        status: Dict[Language, bool] = {}
        for code, done in self.completion_status.items():
            language = parse_language(code)
            if language is None or language not in PROOFREADING_LANGUAGES:
                raise ValueError(f"Unsupported proofreading language: {code!r}")
            status[language] = bool(done)

        if set(status) != set(PROOFREADING_LANGUAGES):
            missing = [lang.value for lang in PROOFREADING_LANGUAGES if lang not in status]
            raise ValueError(f"completion_status is missing languages: {missing}")

        # Keep the canonical language order
        self.completion_status = {lang: status[lang] for lang in PROOFREADING_LANGUAGES}

    @classmethod
    def empty_status(cls) -> Dict[Language, bool]:
        return {language: False for language in PROOFREADING_LANGUAGES}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_at": _isoformat(self.created_at),
            "key_ids": list(self.key_ids),
            "translation_keys": list(self.translation_keys),
            "completion_status": {
                language.value: done for language, done in self.completion_status.items()
            },
            "channel": self.channel,
            "message": self.message,
            "message_url": self.message_url,
        }


@dataclass
class TranslationDraft:
    """Machine-generated draft texts for the draft language set."""

    texts: Dict[Language, str]
    missing: Tuple[Language, ...] = ()
    snapshot: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return bool(self.missing)

    @classmethod
    def from_mapping(cls, mapping: Dict[Any, Any], snapshot: str = None) -> "TranslationDraft":
        """
        Build a draft from a provider mapping.

        Unknown codes and non-string or blank values are dropped; draft
        languages without a usable value are listed in ``missing``.
        """
        texts: Dict[Language, str] = {}
        for code, value in (mapping or {}).items():
            language = parse_language(code)
            if language is None or language not in DRAFT_LANGUAGES:
                continue
            if isinstance(value, str) and value.strip():
                texts[language] = value

        ordered = {lang: texts[lang] for lang in DRAFT_LANGUAGES if lang in texts}
        missing = tuple(lang for lang in DRAFT_LANGUAGES if lang not in texts)
        return cls(texts=ordered, missing=missing, snapshot=snapshot)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "texts": {language.value: text for language, text in self.texts.items()},
            "missing": [language.value for language in self.missing],
            "is_partial": self.is_partial,
            "snapshot": self.snapshot,
        }
