"""
Fire-and-forget notification sender.

Notifications are delivered by POSTing JSON to a webhook owned by the delivery
service. Delivery problems are logged and counted but never raised, so a
failed notification cannot undo a committed friend-graph change.

Configuration via environment variables:
- NOTIFICATION_WEBHOOK_URL: Delivery endpoint (notifications are only logged when unset)
- NOTIFICATION_TIMEOUT: Request timeout in seconds (default: 2.0)
"""

import os
from typing import Optional

import requests

from filmmatch.logging_config import get_logger
from filmmatch.metrics import track_notification

logger = get_logger(__name__)


class NotificationSender:
    """Posts ``{"userId": ..., "message": ...}`` payloads to the delivery webhook."""

    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        self.webhook_url = webhook_url if webhook_url is not None else os.getenv("NOTIFICATION_WEBHOOK_URL", "")
        self.timeout = timeout or float(os.getenv("NOTIFICATION_TIMEOUT", "2.0"))
        self.session = requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def notify(self, user_id: str, message: str) -> bool:
        """
        Send a notification to a user.

        Returns:
            True if the webhook accepted the notification, False otherwise
        """
        if not self.enabled:
            track_notification('skipped')
            logger.info("notification_skipped", user_id=user_id, reason="webhook_not_configured")
            return False

        try:
            response = self.session.post(
                self.webhook_url,
                json={"userId": user_id, "message": message},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            track_notification('error')
            logger.warning("notification_failed", user_id=user_id, error=str(e))
            return False

        track_notification('sent')
        logger.info("notification_sent", user_id=user_id, status_code=response.status_code)
        return True


_notification_sender: Optional[NotificationSender] = None


def get_notification_sender() -> NotificationSender:
    """Get or create the global notification sender."""
    global _notification_sender
    if _notification_sender is None:
        _notification_sender = NotificationSender()
    return _notification_sender


def reset_notification_sender():
    global _notification_sender
    _notification_sender = None
