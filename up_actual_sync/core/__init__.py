"""Core package: provides settings, errors, models, the backoff schedule and shared utilities."""

from .backoff import backoff_delay_ms  # noqa: F401
from .errors import (  # noqa: F401
    ConfigValidationError,
    DestinationSessionError,
    RetryExhaustedError,
    SourceApiError,
    SourceAuthError,
    SourceError,
    SourceRateLimitError,
    SourceUnreachableError,
    SyncError,
    TransformContractViolation,
)
from .models import DestinationTransaction, ImportResult, SourceTransaction, SyncAttemptResult  # noqa: F401
from .settings import Settings, load_config  # noqa: F401
from .utils import get_logger, setup_logging  # noqa: F401
