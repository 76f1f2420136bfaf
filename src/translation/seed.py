"""
Demo data for a fresh store.

The tool has no persistence for domain data; when the ``seed_demo_data``
setting is on, a new store starts with these keys and batches so the
dashboard and progress views have something to show.
"""

from datetime import datetime
from typing import List

from src.language_codes import Language
from src.translation.models import KeyStatus, ProofreadingRequest, TranslationKeyRequest
from src.translation.store import TranslationRequestStore


def demo_keys() -> List[TranslationKeyRequest]:
    rows = [
        ("1", "DETAIL_MULTI_RATE_CANCELLATION_OPTIONS_AVAILABLE",
         "Cancellation options available for different rates", "Holidu Web",
         datetime(2024, 1, 15), "Sarah Johnson", KeyStatus.IN_PROGRESS),
        ("2", "DETAIL_MULTI_RATE_BOARD_TYPE_OPTIONS_AVAILABLE",
         "Board type options available for multi-rate bookings", "Mobile",
         datetime(2024, 1, 14), "Mike Chen", KeyStatus.IN_PROGRESS),
        ("3", "LIST_SMART_SEARCH_TITLE", "Smart search results", "Backend",
         datetime(2024, 1, 13), "Anna Schmidt", KeyStatus.IN_PROGRESS),
        ("4", "BOOKING_CONFIRMATION_TITLE", "Booking confirmation", "Holidu Web",
         datetime(2024, 1, 12), "John Doe", KeyStatus.SENT),
        ("5", "PAYMENT_SUCCESS_MESSAGE", "Payment successful", "Mobile",
         datetime(2024, 1, 11), "Lisa Wang", KeyStatus.SENT),
    ]
    return [
        TranslationKeyRequest(
            id=key_id,
            key=key,
            english_text=text,
            project=project,
            created_at=created_at,
            requester=requester,
            status=status,
        )
        for key_id, key, text, project, created_at, requester, status in rows
    ]


def demo_proofreading() -> List[ProofreadingRequest]:
    archive = "https://holidu.slack.com/archives/C123456789/"
    return [
        ProofreadingRequest(
            id="1",
            created_at=datetime(2024, 1, 16),
            key_ids=("1", "2"),
            translation_keys=(
                "DETAIL_MULTI_RATE_CANCELLATION_OPTIONS_AVAILABLE",
                "DETAIL_MULTI_RATE_BOARD_TYPE_OPTIONS_AVAILABLE",
            ),
            completion_status={
                Language.DE: True,
                Language.ES: False,
                Language.PT: True,
                Language.NL: False,
                Language.FR: True,
                Language.IT: False,
            },
            channel="#translations",
            message_url=archive + "p1642345678",
        ),
        ProofreadingRequest(
            id="2",
            created_at=datetime(2024, 1, 15),
            key_ids=("3",),
            translation_keys=("LIST_SMART_SEARCH_TITLE",),
            completion_status=ProofreadingRequest.empty_status(),
            channel="#translations",
            message_url=archive + "p1642345679",
        ),
        ProofreadingRequest(
            id="3",
            created_at=datetime(2024, 1, 14),
            key_ids=("4", "5"),
            translation_keys=("BOOKING_CONFIRMATION_TITLE", "PAYMENT_SUCCESS_MESSAGE"),
            completion_status={language: True for language in ProofreadingRequest.empty_status()},
            channel="#translations",
            message_url=archive + "p1642345680",
        ),
    ]


def build_demo_store(**kwargs) -> TranslationRequestStore:
    """Create a store pre-filled with the demo keys and batches."""
    return TranslationRequestStore(keys=demo_keys(), proofreading=demo_proofreading(), **kwargs)
