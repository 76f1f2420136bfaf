"""
Draft Generation Service Module

This module provides the service that turns English source text into
machine drafts for every draft language:
- DraftService class coordinating provider calls
- Configuration validation
- Error handling, retry logic and partial-result handling

For provider-specific API implementations, see ai/providers.py
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from src.ai.exceptions import DraftCancelled, TranslationError
from src.config import BUILTIN_DRAFT_PROVIDERS, DEFAULT_SYSTEM_MESSAGE, load_config
from src.logger import get_logger
from src.translation.models import TranslationDraft
from src.translation.utils import calculate_hash

logger = get_logger(__name__)


def validate_draft_config(config: Dict[str, Any]) -> None:
    """
    Validate that the configured draft provider is usable.

    Raises:
        TranslationError: If configuration is invalid or missing, with code and details.
    """
    drafts_config = config.get('drafts', {})
    provider = drafts_config.get('provider', 'mock')

    if provider == 'mock':
        return

    provider_config = drafts_config.get(provider)
    if not isinstance(provider_config, dict) or not provider_config:
        raise TranslationError(
            f"Draft provider '{provider}' configuration not found",
            code="ai_config_missing",
            details={"provider": provider}
        )

    api_key = provider_config.get('api_key', '')
    if not api_key or api_key == "YOUR_API_KEY_HERE":
        raise TranslationError(
            f"{provider} API key not configured. Please set it in Settings.",
            code="ai_config_missing",
            details={"provider": provider, "missing_field": "api_key"}
        )

    models = provider_config.get('models', [])
    if not any(m and isinstance(m, str) for m in models or []) and not provider_config.get('model'):
        raise TranslationError(
            f"{provider} model not configured",
            code="ai_config_missing",
            details={"provider": provider, "missing_field": "models"}
        )

    if provider not in BUILTIN_DRAFT_PROVIDERS and not provider_config.get('api_url'):
        raise TranslationError(
            f"Custom provider '{provider}' API URL not configured",
            code="ai_config_missing",
            details={"provider": provider, "missing_field": "api_url"}
        )


class DraftService:
    """Generates machine drafts for a source text."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config if config is not None else load_config()
        self.drafts_config = self.config.get('drafts', {})
        self.provider = self.drafts_config.get('provider', 'mock')
        self.transport = transport
        self.sleep = sleep
        logger.info(f"Initialized draft service with provider: {self.provider}")

    def _get_model(self, provider_config: Dict[str, Any], default_model: str = "") -> str:
        """First model from 'models', then the legacy 'model' field, then the default."""
        models = provider_config.get('models', [])
        if models and isinstance(models, list) and models[0]:
            return models[0]
        return provider_config.get('model', default_model)

    def _get_system_message(self, default: str = DEFAULT_SYSTEM_MESSAGE) -> str:
        return self.drafts_config.get('system_message', default)

    def generate(self, source_text: str, cancel_check: Optional[Callable[[], bool]] = None) -> TranslationDraft:
        """
        Generate drafts for every draft language.

        Languages the provider did not return are listed in ``missing`` of
        the returned draft.

        Args:
            source_text: English source text
            cancel_check: Optional callable; when it returns True generation stops

        Raises:
            TranslationError: empty input, bad configuration, or every attempt failed.
            DraftCancelled: cancel_check asked to stop.
        """
        if not source_text or not source_text.strip():
            raise TranslationError("English text is required to generate drafts", code="validation_error")

        validate_draft_config(self.config)
        is_cancelled = cancel_check or (lambda: False)
        snapshot = calculate_hash(source_text)

        max_retries = max(1, int(self.drafts_config.get('max_retries', 3)))
        last_error: Optional[Exception] = None

        for attempt in range(max_retries):
            if is_cancelled():
                raise DraftCancelled()
            try:
                if attempt > 0:
                    logger.info(f"  Retry attempt {attempt + 1}/{max_retries}")

                mapping = self._call_provider(source_text, is_cancelled)
                draft = TranslationDraft.from_mapping(mapping, snapshot=snapshot)

                if not draft.texts:
                    raise TranslationError("Provider returned no usable drafts", code="parse_error")
                if draft.is_partial:
                    logger.warning(
                        "Partial drafts: missing %s",
                        ", ".join(language.value for language in draft.missing),
                    )

                logger.info(f"Generated drafts for {len(draft.texts)} language(s)")
                return draft

            except DraftCancelled:
                raise
            except TranslationError as e:
                last_error = e
                should_retry, wait_time = self._categorize_error(e, attempt)

                if should_retry and attempt < max_retries - 1:
                    logger.warning(f"  Attempt {attempt + 1} failed: {e}. Waiting {wait_time}s before retry...")
                    self.sleep(wait_time)
                elif not should_retry:
                    logger.error(f"  Non-recoverable error: {e}")
                    break

        logger.error(f"Draft generation failed after {max_retries} attempt(s): {last_error}")
        raise TranslationError(
            f"Draft generation failed: {last_error}",
            code="draft_generation_failed",
            details={"provider": self.provider, "cause": getattr(last_error, 'code', None)},
        )

    def _call_provider(self, source_text: str, is_cancelled: Callable[[], bool]) -> Dict[str, str]:
        from src.ai.providers import (
            call_custom_provider_api,
            call_mock_provider,
            call_openai_api,
        )

        if self.provider == 'mock':
            return call_mock_provider(self, source_text, is_cancelled)
        if self.provider == 'openai':
            return call_openai_api(self, source_text)
        return call_custom_provider_api(self, source_text)

    def _categorize_error(self, error: TranslationError, attempt: int) -> Tuple[bool, float]:
        """
        Categorize an error and determine retry strategy.

        Returns:
            Tuple of (should_retry, wait_time_seconds)
        """
        status_code = error.details.get('status_code')

        # Configuration problems never fix themselves
        if error.code == 'ai_config_missing':
            return False, 0

        # Rate limiting (429) - long backoff
        if status_code == 429:
            return True, min(10 * (2 ** attempt), 120)

        # Authentication and invalid request errors - don't retry
        if status_code in (400, 401, 403, 404):
            return False, 0

        # Server errors (5xx) - standard backoff
        if status_code and status_code >= 500:
            return True, 2 ** attempt

        # Timeout - retry with backoff
        if error.code == 'timeout':
            return True, 2 * (2 ** attempt)

        # Parse errors - retry once
        if error.code == 'parse_error':
            return attempt < 1, 1.0

        return True, 2 ** attempt
