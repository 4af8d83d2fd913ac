"""FastAPI dependencies for DI (settings, notifier, attempt runner).

Settings are loaded once per app and kept on ``app.state``. Routes never read the environment or build clients
themselves, so tests swap any of these through ``app.dependency_overrides``.
"""

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request

from up_actual_sync.core.errors import ConfigValidationError
from up_actual_sync.core.models import SyncAttemptResult
from up_actual_sync.core.settings import Settings, load_config
from up_actual_sync.services.notifier import Notifier
from up_actual_sync.workers.sync_runner import run_once

HTTP_500_INTERNAL_SERVER_ERROR = 500


def get_settings(request: Request) -> Settings:
    """Provide the settings the app was built with.

    An app built without settings loads them from ``.env`` on first use and keeps them; a configuration error
    becomes a 500 naming every missing variable.
    """
    state = request.app.state
    settings = getattr(state, "settings", None)
    if settings is not None:
        return settings
    try:
        state.settings = load_config()
    except ConfigValidationError as exc:
        raise HTTPException(
            HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "Invalid configuration", "missing": exc.missing, "invalid": exc.invalid},
        ) from exc
    return state.settings


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:  # noqa: B008
    """Provide a Notifier for the configured webhook."""
    return Notifier(settings.webhook_url)


def get_attempt_runner() -> Callable[[Settings], SyncAttemptResult]:
    """Provide the single-attempt entry point."""
    return run_once
