"""Backoff schedule for the retry loop: 5 min, 15 min, 45 min, ..."""

BASE_DELAY_MS = 5 * 60 * 1000
MULTIPLIER = 3


def backoff_delay_ms(attempt_index: int) -> int:
    """Return the wait in milliseconds after the zero-based ``attempt_index`` failed.

    No jitter and no cap; the configured attempt count bounds the longest wait.
    """
    if attempt_index < 0:
        msg = f"attempt_index must be >= 0, got {attempt_index}"
        raise ValueError(msg)
    return BASE_DELAY_MS * MULTIPLIER**attempt_index
