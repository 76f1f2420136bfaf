"""
Workflow Manager

Coordinates the request store with the notification gateway:
- batch preview and batch send (post first, then commit)
- reminder preview and reminder send
- idempotency keys for repeated batch submissions
"""

import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from src.config import load_config
from src.logger import get_logger
from src.notify import DeliveryReceipt, build_gateway
from src.translation import messages, progress
from src.translation.exceptions import EmptySelectionError, ValidationError
from src.translation.models import ProofreadingRequest, TranslationKeyRequest
from src.translation.store import TranslationRequestStore

logger = get_logger(__name__)


class WorkflowManager:
    """Runs the send and reminder workflows against one store."""

    def __init__(
        self,
        store: TranslationRequestStore,
        gateway=None,
        config_loader: Callable[[], Dict[str, Any]] = load_config,
    ):
        self.store = store
        self._gateway = gateway
        self._config_loader = config_loader
        self._send_lock = threading.Lock()

    def _workflow_config(self) -> Dict[str, Any]:
        return self._config_loader().get('workflow', {})

    def _get_gateway(self):
        if self._gateway is not None:
            return self._gateway
        return build_gateway(self._config_loader())

    def _deep_link_template(self) -> str:
        return self._workflow_config().get('deep_link_template', messages.DEFAULT_DEEP_LINK_TEMPLATE)

    # ============================================================
    # Batches
    # ============================================================

    def compose_batch(self, key_ids: Iterable[str]) -> Tuple[List[TranslationKeyRequest], str]:
        """Resolve a selection and compose its batch message, without sending it."""
        selection = self.store.select_for_batch(key_ids)
        if not selection:
            raise EmptySelectionError()
        return selection, messages.compose_batch_message(selection, self._deep_link_template())

    def preview_batch(self, key_ids: Iterable[str]) -> str:
        return self.compose_batch(key_ids)[1]

    def send_batch(
        self,
        key_ids: Iterable[str],
        channel: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> ProofreadingRequest:
        """
        Post the batch message and mark the selected keys as sent.

        A repeated idempotency key returns the earlier batch without posting
        again. When posting fails the store is left untouched and the
        gateway's NotificationError propagates.
        """
        key_ids = list(key_ids or [])

        with self._send_lock:
            existing = self.store.find_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info("Batch %s already sent for idempotency key %s", existing.id, idempotency_key)
                return existing

            if not key_ids:
                raise EmptySelectionError()

            workflow = self._workflow_config()
            selection = self.store.select_for_batch(key_ids)
            text = messages.compose_batch_message(selection, self._deep_link_template())
            channel = channel or workflow.get('slack_channel', '#translations')

            receipt: Optional[DeliveryReceipt] = None
            if workflow.get('notifications', True):
                receipt = self._get_gateway().post(channel, text, idempotency_key=idempotency_key)
            else:
                logger.info("Notifications disabled; committing batch without posting")

            request = self.store.send_batch(
                selection,
                text,
                channel=receipt.channel if receipt else channel,
                message_url=receipt.permalink if receipt else None,
                idempotency_key=idempotency_key,
            )

        logger.info(messages.batch_sent_summary(len(selection)))
        return request

    # ============================================================
    # Reminders
    # ============================================================

    def preview_reminder(self, request_id: str) -> str:
        return messages.compose_reminder(self.store.get_proofreading(request_id))

    def send_reminder(self, request_id: str, channel: Optional[str] = None) -> DeliveryReceipt:
        """Post a reminder for an incomplete proofreading request."""
        request = self.store.get_proofreading(request_id)
        if progress.is_complete(request):
            raise ValidationError(
                "All languages are already proofread; nothing to remind",
                code="request_complete",
                details={"id": request_id},
            )

        text = messages.compose_reminder(request)
        channel = channel or request.channel or self._workflow_config().get('slack_channel', '#translations')
        receipt = self._get_gateway().post(channel, text)
        logger.info("Reminder for proofreading request %s sent to %s", request_id, receipt.channel)
        return receipt
