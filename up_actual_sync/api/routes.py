"""FastAPI endpoints for triggering the Up → Actual sync over HTTP.

An external scheduler (cron, Cloud Scheduler, a timer function) calls ``POST /sync`` once per tick. Each call is
exactly one attempt; retries belong to the scheduler's own policy, which is why a failed attempt answers 502.
"""

import threading
from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException

from up_actual_sync.api.dependencies import get_attempt_runner, get_notifier, get_settings
from up_actual_sync.core.errors import RetryExhaustedError
from up_actual_sync.core.models import SyncAttemptResult
from up_actual_sync.core.settings import Settings
from up_actual_sync.core.utils import get_logger
from up_actual_sync.services.notifier import Notifier
from up_actual_sync.workers.retry import run_with_retry

router = APIRouter()
logger = get_logger("up-actual-sync.api")

HTTP_409_CONFLICT = 409
HTTP_502_BAD_GATEWAY = 502

# At most one attempt per process owns the local budget copy
sync_lock = threading.Lock()


@router.post(
    "/sync",
    summary="Run one sync attempt",
    description=(
        "Fetch settled Up Bank transactions for the configured rolling window and import them into Actual Budget.\n\n"
        "**Response:**\n"
        "- 200 OK: counts of fetched, added, updated, skipped and errored transactions.\n"
        "- 409 Conflict: another sync is already running in this process.\n"
        "- 500 Internal Server Error: configuration is incomplete.\n"
        "- 502 Bad Gateway: the attempt failed; the scheduler's retry policy should try again later."
    ),
    response_description="Sync summary.",
    responses={
        200: {
            "description": "Sync completed.",
            "content": {
                "application/json": {
                    "example": {
                        "fetched": 12,
                        "added": 3,
                        "updated": 0,
                        "skipped": 9,
                        "errors": 0,
                        "duration_ms": 4210,
                    }
                }
            },
        },
        409: {"description": "Sync already running."},
        502: {"description": "Sync attempt failed."},
    },
)
def trigger_sync(
    settings: Settings = Depends(get_settings),  # noqa: B008
    notifier: Notifier = Depends(get_notifier),  # noqa: B008
    runner: Callable[[Settings], SyncAttemptResult] = Depends(get_attempt_runner),  # noqa: B008
) -> dict:
    """Run exactly one sync attempt and report its outcome."""
    if not sync_lock.acquire(blocking=False):
        logger.warning("Rejected sync trigger: a sync is already running")
        raise HTTPException(HTTP_409_CONFLICT, "A sync is already running")
    try:
        logger.info("Sync triggered over HTTP")
        outcome = run_with_retry(lambda: runner(settings), 1, notifier)
    except RetryExhaustedError as exc:
        raise HTTPException(HTTP_502_BAD_GATEWAY, str(exc.last_error)) from exc
    finally:
        sync_lock.release()
    return outcome.summary()


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
