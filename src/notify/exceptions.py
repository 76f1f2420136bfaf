"""
Notification Gateway Exceptions

Separated to avoid circular imports between gateway.py and its callers.
"""


class NotificationError(Exception):
    """Delivery to the chat platform failed, with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None, retryable: bool = False):
        super().__init__(message)
        self.code = code or "notification_failed"
        self.details = details or {}
        self.retryable = retryable
