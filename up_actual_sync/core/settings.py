"""Configuration and environment settings for the Up → Actual sync.

Every value is read from the process environment (or a local ``.env`` file) once, at the top of an entry point,
via :func:`load_config`. The resulting :class:`Settings` instance is frozen and passed explicitly into every
component; nothing in the library looks configuration up on its own.
"""

from pathlib import Path

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from up_actual_sync.core.errors import ConfigValidationError
from up_actual_sync.core.utils import safe_cast

UP_BASE_URL = "https://api.up.com.au/api/v1"
DEFAULT_WINDOW_HOURS = 48
DEFAULT_MAX_RETRIES = 4
LOG_LEVELS = ("debug", "info", "warning", "warn", "error")

REQUIRED_VARS = (
    "UP_API_TOKEN",
    "ACTUAL_SERVER_URL",
    "ACTUAL_PASSWORD",
    "ACTUAL_SYNC_ID",
    "ACTUAL_ACCOUNT_ID",
)


class Settings(BaseSettings):
    """Application settings for the Up → Actual sync."""

    # Up Bank
    up_api_token: SecretStr
    up_base_url: str = UP_BASE_URL

    # Actual Budget
    actual_server_url: str
    actual_password: SecretStr
    actual_sync_id: str
    actual_account_id: str
    actual_e2e_password: SecretStr | None = None
    actual_data_dir: Path = Path("./actual-data")

    # Notifications
    webhook_url: str | None = None

    # Sync
    sync_window_hours: int = DEFAULT_WINDOW_HOURS
    max_retries: int = DEFAULT_MAX_RETRIES
    http_timeout_seconds: float = 30.0

    log_level: str = "info"

    # HTTP trigger
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    @field_validator("up_api_token", "actual_password", mode="before")
    @classmethod
    def _reject_blank_secret(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("actual_server_url", "actual_sync_id", "actual_account_id", mode="before")
    @classmethod
    def _reject_blank(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("actual_e2e_password", "webhook_url", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("sync_window_hours", mode="before")
    @classmethod
    def _window_or_default(cls, value: object) -> int:
        return _positive_int_or(value, DEFAULT_WINDOW_HOURS)

    @field_validator("max_retries", mode="before")
    @classmethod
    def _retries_or_default(cls, value: object) -> int:
        return _positive_int_or(value, DEFAULT_MAX_RETRIES)

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_level_or_info(cls, value: object) -> str:
        level = str(value or "").strip().lower()
        return level if level in LOG_LEVELS else "info"


def _positive_int_or(value: object, default: int) -> int:
    """Parse a positive integer, falling back to ``default`` for anything else (empty, garbage, zero)."""
    parsed = safe_cast(str(value).strip(), int, default)
    return parsed if parsed > 0 else default


def load_config(env_file: str | Path | None = ".env") -> Settings:
    """Build and validate the settings once.

    Raises:
        ConfigValidationError: listing every missing or blank required variable.

    """
    try:
        return Settings(_env_file=env_file)
    except ValidationError as exc:
        missing = []
        invalid = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            name = field.upper()
            if name in REQUIRED_VARS and error["type"] in ("missing", "value_error"):
                missing.append(name)
            else:
                invalid.append(f"{name}: {error['msg']}")
        # Keep the documented order regardless of pydantic's error order
        missing = [name for name in REQUIRED_VARS if name in missing]
        raise ConfigValidationError(missing, invalid) from exc
