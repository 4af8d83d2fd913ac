"""Retry loop around sync attempts, with the 5 → 15 → 45 minute backoff schedule."""

import time
from collections.abc import Callable

from up_actual_sync.core.backoff import backoff_delay_ms
from up_actual_sync.core.errors import RetryExhaustedError
from up_actual_sync.core.models import SyncAttemptResult
from up_actual_sync.core.utils import get_logger
from up_actual_sync.services.notifier import Notifier

logger = get_logger("up-actual-sync.retry")


def run_with_retry(
    attempt: Callable[[], SyncAttemptResult],
    max_attempts: int,
    notifier: Notifier,
    sleep: Callable[[float], None] = time.sleep,
) -> SyncAttemptResult:
    """Run ``attempt`` up to ``max_attempts`` times, sleeping per the backoff schedule between failures.

    The first success is notified and returned. When every attempt fails, a single failure notification carrying
    the last error is sent and :class:`RetryExhaustedError` is raised for the entry point to turn into an exit code.
    """
    logger.info(f"=== Up to Actual sync starting (max {max_attempts} attempts) ===")
    last_error: Exception | None = None

    for number in range(1, max_attempts + 1):
        try:
            logger.info(f"Sync attempt {number} of {max_attempts}")
            outcome = attempt()
        except Exception as exc:
            last_error = exc
            logger.exception(f"Sync attempt {number} of {max_attempts} failed: {exc}")
            if number < max_attempts:
                delay_ms = backoff_delay_ms(number - 1)
                logger.info(f"Retrying in {delay_ms // 60000} minutes (next attempt {number + 1})")
                sleep(delay_ms / 1000)
            continue

        logger.info(f"=== Sync completed successfully === {outcome.summary()}")
        notifier.notify_success(outcome)
        return outcome

    logger.error(f"=== Sync FAILED: all {max_attempts} attempts exhausted === last error: {last_error}")
    notifier.notify_failure(str(last_error) if last_error else "Unknown error", max_attempts)
    raise RetryExhaustedError(max_attempts, last_error)
