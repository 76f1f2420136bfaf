"""
Notification Gateway

Posts composed workflow messages to a chat channel:
- SlackGateway: Slack Web API (chat.postMessage) over httpx, with retries
- LogGateway: offline stand-in that only logs the message

Use build_gateway() to get the gateway selected in the configuration.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from src.logger import get_logger
from src.notify.exceptions import NotificationError

logger = get_logger(__name__)

# Slack error codes that will not succeed on a retry
PERMANENT_SLACK_ERRORS = {
    "invalid_auth",
    "not_authed",
    "account_inactive",
    "token_revoked",
    "channel_not_found",
    "not_in_channel",
    "is_archived",
    "msg_too_long",
    "no_text",
    "missing_scope",
}


@dataclass
class DeliveryReceipt:
    """Outcome of a successful post."""

    channel: str
    ts: Optional[str] = None
    permalink: Optional[str] = None
    provider: str = "log"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "ts": self.ts,
            "permalink": self.permalink,
            "provider": self.provider,
        }


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (total timeout) or a dict with
            connect, write, read, pool keys
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 5.0),
            write=timeout_config.get('write', 10.0),
            read=timeout_config.get('read', 15.0),
            pool=timeout_config.get('pool', 5.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 15.0
    return httpx.Timeout(connect=5.0, write=10.0, read=timeout_value, pool=5.0)


class LogGateway:
    """Gateway that logs messages instead of posting them."""

    provider = "log"

    def post(self, channel: str, text: str, idempotency_key: Optional[str] = None) -> DeliveryReceipt:
        logger.info("Message for %s (idempotency_key=%s):\n%s", channel, idempotency_key, text)
        return DeliveryReceipt(channel=channel, ts=f"{time.time():.6f}", provider=self.provider)


class SlackGateway:
    """Gateway posting to Slack's chat.postMessage endpoint."""

    provider = "slack"

    def __init__(
        self,
        config: Dict[str, Any],
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_url = config.get("api_url", "https://slack.com/api/chat.postMessage")
        self.api_token = config.get("api_token", "")
        self.permalink_template = config.get("permalink_template", "")
        self.max_retries = max(1, int(config.get("max_retries", 3)))
        self.timeout = config.get("timeout", 15)
        self._transport = transport
        self._sleep = sleep

        if not self.api_token or self.api_token == "YOUR_API_TOKEN_HERE":
            raise NotificationError(
                "Slack API token not configured. Please set it in Settings.",
                code="notification_config_missing",
                details={"missing_field": "api_token"},
            )

    def build_permalink(self, channel: str, ts: Optional[str]) -> Optional[str]:
        """Build the archive link of a posted message (Slack drops the dot in ts)."""
        if not self.permalink_template or not ts:
            return None
        return self.permalink_template.format(channel=channel.lstrip('#'), ts=ts.replace('.', ''))

    def post(self, channel: str, text: str, idempotency_key: Optional[str] = None) -> DeliveryReceipt:
        """
        Post a message, retrying transient failures with exponential backoff.

        Raises:
            NotificationError: when the message could not be delivered. The
                ``retryable`` flag tells the caller whether trying again later
                may succeed.
        """
        last_error: Optional[NotificationError] = None

        for attempt in range(self.max_retries):
            try:
                if attempt > 0:
                    logger.info(f"  Retry attempt {attempt + 1}/{self.max_retries}")
                return self._post_once(channel, text, idempotency_key)
            except NotificationError as e:
                last_error = e
                should_retry, wait_time = self._categorize_error(e, attempt)
                if should_retry and attempt < self.max_retries - 1:
                    logger.warning(f"  Attempt {attempt + 1} failed: {e}. Waiting {wait_time}s before retry...")
                    self._sleep(wait_time)
                elif not should_retry:
                    logger.error(f"  Non-recoverable error: {e}")
                    break

        logger.error(f"Posting to {channel} failed after {self.max_retries} attempt(s): {last_error}")
        raise last_error

    def _post_once(self, channel: str, text: str, idempotency_key: Optional[str]) -> DeliveryReceipt:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        body = {"channel": channel, "text": text, "mrkdwn": True}

        logger.debug(f"  Posting {len(text)} chars to {channel} via {self.api_url}")

        try:
            with httpx.Client(timeout=get_httpx_timeout(self.timeout), transport=self._transport) as client:
                response = client.post(self.api_url, headers=headers, json=body)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            retry_after = e.response.headers.get("Retry-After")
            raise NotificationError(
                f"Slack API error ({status_code})",
                code="http_error",
                details={"status_code": status_code, "retry_after": retry_after},
                retryable=status_code == 429 or status_code >= 500,
            )
        except httpx.TimeoutException:
            raise NotificationError("Slack API request timeout", code="timeout", retryable=True)
        except httpx.HTTPError as e:
            raise NotificationError(f"Slack API call failed: {e}", code="connection_error", retryable=True)
        except ValueError as e:
            raise NotificationError(f"Slack API returned invalid JSON: {e}", code="bad_response", retryable=True)

        if not result.get("ok"):
            error = result.get("error", "unknown_error")
            raise NotificationError(
                f"Slack rejected the message: {error}",
                code=error,
                details={"response": result},
                retryable=error not in PERMANENT_SLACK_ERRORS,
            )

        posted_channel = result.get("channel") or channel
        ts = result.get("ts")
        return DeliveryReceipt(
            channel=posted_channel,
            ts=ts,
            permalink=self.build_permalink(posted_channel, ts),
            provider=self.provider,
        )

    def _categorize_error(self, error: NotificationError, attempt: int) -> Tuple[bool, float]:
        """
        Categorize an error and determine retry strategy.

        Returns:
            Tuple of (should_retry, wait_time_seconds)
        """
        if not error.retryable:
            return False, 0

        status_code = error.details.get("status_code")
        if status_code == 429 or error.code == "ratelimited":
            retry_after = error.details.get("retry_after")
            try:
                return True, min(float(retry_after), 60.0)
            except (TypeError, ValueError):
                return True, min(5 * (2 ** attempt), 60)

        if error.code == "timeout":
            return True, 2 * (2 ** attempt)

        return True, 2 ** attempt


def build_gateway(config: Dict[str, Any], transport: Optional[httpx.BaseTransport] = None):
    """Create the gateway named by config["notifications"]["provider"]."""
    notifications = config.get("notifications", {})
    provider = notifications.get("provider", "log")

    if provider == "slack":
        return SlackGateway(notifications, transport=transport)
    if provider == "log":
        return LogGateway()

    raise NotificationError(
        f"Unsupported notification provider: {provider}",
        code="notification_config_missing",
        details={"provider": provider},
    )
