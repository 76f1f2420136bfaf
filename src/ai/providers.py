"""
Draft Provider API Implementations

This module contains the call implementations for each draft provider:
- Mock (offline, simulated latency)
- OpenAI
- Custom providers (OpenAI-compatible)

Each function takes a DraftService instance and the source text, and returns
the raw mapping of language code to draft text.
"""

import json
from typing import Any, Callable, Dict

import httpx

from src.ai.exceptions import DraftCancelled, TranslationError
from src.config import DRAFT_PROMPT
from src.language_codes import DRAFT_LANGUAGES, LANGUAGE_NAMES
from src.logger import get_logger
from src.translation.utils import parse_drafts_response

logger = get_logger(__name__)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (total timeout) or a dict with
            connect, write, read, pool keys
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 30.0),
            read=timeout_config.get('read', 30.0),
            pool=timeout_config.get('pool', 10.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 30.0
    return httpx.Timeout(connect=10.0, write=30.0, read=timeout_value, pool=10.0)


def handle_http_error(e: httpx.HTTPStatusError, provider: str):
    """Handle HTTP errors with detailed messages."""
    status_code = e.response.status_code
    error_text = "Unknown error"

    try:
        error_json = e.response.json()
        if isinstance(error_json, dict) and "error" in error_json:
            error_detail = error_json["error"]
            if isinstance(error_detail, dict):
                error_text = error_detail.get("message", str(error_detail))
            else:
                error_text = str(error_detail)
    except ValueError:
        error_text = e.response.text[:500]

    raise TranslationError(
        f"{provider} API error ({status_code}): {error_text}",
        code="http_error",
        details={"status_code": status_code},
    )


def build_draft_prompt(source_text: str) -> str:
    """Build the prompt asking for drafts in every draft language."""
    return DRAFT_PROMPT.format(
        language_list=", ".join(f"{LANGUAGE_NAMES[lang]} ({lang.value})" for lang in DRAFT_LANGUAGES),
        language_codes=", ".join(lang.value for lang in DRAFT_LANGUAGES),
        source_json=json.dumps(source_text, ensure_ascii=False),
    )


def call_mock_provider(service, source_text: str, is_cancelled: Callable[[], bool] = lambda: False) -> Dict[str, str]:
    """
    Offline provider: waits for the configured latency, then prefixes the
    source text with each language code ("[DE] Hello").
    """
    latency = float(service.drafts_config.get('simulated_latency', 0) or 0)
    waited = 0.0
    step = 0.05
    while waited < latency:
        if is_cancelled():
            raise DraftCancelled()
        service.sleep(min(step, latency - waited))
        waited += step

    if is_cancelled():
        raise DraftCancelled()

    return {lang.value: f"[{lang.value.upper()}] {source_text}" for lang in DRAFT_LANGUAGES}


def _call_chat_completions(service, source_text: str, provider_name: str, provider_config: Dict[str, Any]) -> Dict[str, str]:
    """Shared OpenAI-compatible chat completions call."""
    api_key = provider_config.get('api_key', '')
    model = service._get_model(provider_config, 'gpt-4o-mini')
    timeout = provider_config.get('timeout', 30)
    api_url = provider_config.get('api_url', '')

    if not api_key or api_key == "YOUR_API_KEY_HERE":
        raise TranslationError(f"{provider_name} API key not configured", code="ai_config_missing")
    if not api_url:
        raise TranslationError(f"{provider_name} API URL not configured", code="ai_config_missing")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json"
    }

    body = {
        "model": model,
        "messages": [
            {"role": "system", "content": service._get_system_message()},
            {"role": "user", "content": build_draft_prompt(source_text)},
        ],
    }

    logger.debug(f"  Calling {provider_name} API (model: {model})...")

    try:
        with httpx.Client(timeout=get_httpx_timeout(timeout), transport=service.transport) as client:
            response = client.post(api_url, headers=headers, json=body)
            response.raise_for_status()
            result = response.json()
    except httpx.HTTPStatusError as e:
        handle_http_error(e, provider_name)
    except httpx.TimeoutException:
        raise TranslationError(f"{provider_name} API request timeout", code="timeout")
    except httpx.HTTPError as e:
        raise TranslationError(f"{provider_name} API call failed: {e}", code="connection_error")
    except ValueError as e:
        raise TranslationError(f"{provider_name} returned invalid JSON: {e}", code="parse_error")

    choices = result.get('choices') or []
    if not choices:
        raise TranslationError(f"No content in {provider_name} response", code="parse_error")

    content = choices[0].get('message', {}).get('content', '')
    logger.debug(f"  Received {len(content)} chars from {provider_name}")

    drafts = parse_drafts_response(content)
    if drafts is None:
        raise TranslationError(f"Could not parse drafts from {provider_name} response", code="parse_error")
    return drafts


def call_openai_api(service, source_text: str) -> Dict[str, str]:
    """Call OpenAI chat completions and return the draft mapping."""
    provider_config = dict(service.drafts_config.get('openai', {}))
    provider_config.setdefault('api_url', 'https://api.openai.com/v1/chat/completions')
    return _call_chat_completions(service, source_text, "OpenAI", provider_config)


def call_custom_provider_api(service, source_text: str) -> Dict[str, str]:
    """Call a custom provider using the OpenAI-compatible format."""
    provider = service.provider
    provider_config = service.drafts_config.get(provider, {})
    return _call_chat_completions(service, source_text, f"Custom provider '{provider}'", provider_config)
