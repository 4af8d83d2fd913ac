"""Webhook notifications for sync outcomes.

Discord webhooks get a ``{"content": ...}`` JSON body; anything else (ntfy, Pushover bridges, ...) gets the message
as plain text. A notification that cannot be delivered is logged and dropped: it never fails the sync.
"""

import httpx

from up_actual_sync.core.models import SyncAttemptResult
from up_actual_sync.core.utils import get_logger

logger = get_logger("up-actual-sync.notify")

DISCORD_WEBHOOK_MARKER = "discord.com/api/webhooks"
NOTIFY_TIMEOUT_SECONDS = 10.0


def is_discord_webhook(url: str) -> bool:
    """Return True when the URL is a Discord webhook."""
    return DISCORD_WEBHOOK_MARKER in url


def format_success(attempt: SyncAttemptResult) -> str:
    """Human-readable summary of a successful sync."""
    result = attempt.result
    message = (
        "✅ Up → Actual sync complete\n"
        f"Fetched: {attempt.fetched_count} | Added: {len(result.added)} | "
        f"Updated: {len(result.updated)} | Skipped: {attempt.skipped}\n"
        f"Duration: {attempt.duration_ms / 1000:.1f}s"
    )
    if result.errors:
        message += f"\n⚠️ Errors: {len(result.errors)} record(s) failed to import"
    return message


def format_failure(error_message: str, attempts: int) -> str:
    """Human-readable summary of a sync that gave up."""
    return f"❌ Up → Actual sync FAILED after {attempts} attempts\nError: {error_message}"


class Notifier:
    """Posts sync outcomes to the configured webhook, if any."""

    def __init__(self, webhook_url: str | None, http_client: httpx.Client | None = None) -> None:
        """Initialize the notifier; ``http_client`` is created per send when not injected."""
        self.webhook_url = webhook_url
        self.http = http_client

    def send(self, message: str) -> bool:
        """Send one message. Returns True when the webhook accepted it; never raises."""
        if not self.webhook_url:
            logger.debug("No webhook URL configured, skipping notification")
            return False
        if is_discord_webhook(self.webhook_url):
            kwargs = {"json": {"content": message}}
        else:
            kwargs = {"content": message.encode(), "headers": {"Content-Type": "text/plain; charset=utf-8"}}
        try:
            if self.http is not None:
                response = self.http.post(self.webhook_url, **kwargs)
            else:
                with httpx.Client(timeout=NOTIFY_TIMEOUT_SECONDS) as client:
                    response = client.post(self.webhook_url, **kwargs)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Webhook notification error (non-fatal): {exc}")
            return False
        if not response.is_success:
            logger.warning(f"Webhook notification failed: HTTP {response.status_code} {response.reason_phrase}")
            return False
        logger.debug("Webhook notification sent successfully")
        return True

    def notify_success(self, attempt: SyncAttemptResult) -> bool:
        """Send the success summary."""
        return self.send(format_success(attempt))

    def notify_failure(self, error_message: str, attempts: int) -> bool:
        """Send the failure summary after the final attempt."""
        return self.send(format_failure(error_message, attempts))
