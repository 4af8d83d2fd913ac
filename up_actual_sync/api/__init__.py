"""API package: provides FastAPI dependencies and route definitions for the HTTP trigger."""

from .dependencies import get_attempt_runner, get_notifier, get_settings  # noqa: F401
from .routes import router  # noqa: F401
