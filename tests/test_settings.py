"""Tests for loading and validating configuration."""

from pathlib import Path

import pytest

from up_actual_sync.core.errors import ConfigValidationError
from up_actual_sync.core.settings import REQUIRED_VARS, load_config

OPTIONAL_VARS = (
    "ACTUAL_E2E_PASSWORD",
    "ACTUAL_DATA_DIR",
    "WEBHOOK_URL",
    "SYNC_WINDOW_HOURS",
    "MAX_RETRIES",
    "LOG_LEVEL",
    "UP_BASE_URL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every variable the settings read."""
    for name in REQUIRED_VARS + OPTIONAL_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def full_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Set every required variable."""
    clean_env.setenv("UP_API_TOKEN", "up:yeah:token")
    clean_env.setenv("ACTUAL_SERVER_URL", "http://localhost:5006")
    clean_env.setenv("ACTUAL_PASSWORD", "secret")
    clean_env.setenv("ACTUAL_SYNC_ID", "sync-id")
    clean_env.setenv("ACTUAL_ACCOUNT_ID", "account-id")
    return clean_env


def test_defaults_applied(full_env: pytest.MonkeyPatch) -> None:
    """Optional values fall back to their documented defaults."""
    settings = load_config(env_file=None)
    expected = {
        "sync_window_hours": 48,
        "max_retries": 4,
        "log_level": "info",
        "webhook_url": None,
        "actual_e2e_password": None,
        "actual_data_dir": Path("./actual-data"),
        "up_base_url": "https://api.up.com.au/api/v1",
    }
    for field, value in expected.items():
        if getattr(settings, field) != value:
            msg = f"Expected {field}={value!r}, got {getattr(settings, field)!r}"
            raise AssertionError(msg)


def test_every_missing_variable_reported_at_once(clean_env: pytest.MonkeyPatch) -> None:
    """A single error lists all missing required variables, not just the first."""
    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(env_file=None)
    if exc_info.value.missing != list(REQUIRED_VARS):
        msg = f"Expected {list(REQUIRED_VARS)}, got {exc_info.value.missing}"
        raise AssertionError(msg)
    for name in REQUIRED_VARS:
        if name not in str(exc_info.value):
            msg = f"Expected {name} in error message"
            raise AssertionError(msg)


def test_blank_required_variable_counts_as_missing(full_env: pytest.MonkeyPatch) -> None:
    """An empty string is as good as unset."""
    full_env.setenv("ACTUAL_PASSWORD", "")
    full_env.setenv("ACTUAL_ACCOUNT_ID", "  ")
    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(env_file=None)
    if exc_info.value.missing != ["ACTUAL_PASSWORD", "ACTUAL_ACCOUNT_ID"]:
        msg = f"Unexpected missing list: {exc_info.value.missing}"
        raise AssertionError(msg)


def test_unparseable_numbers_fall_back_to_defaults(full_env: pytest.MonkeyPatch) -> None:
    """Garbage or non-positive window/retry values use the defaults."""
    full_env.setenv("SYNC_WINDOW_HOURS", "soon")
    full_env.setenv("MAX_RETRIES", "0")
    settings = load_config(env_file=None)
    if (settings.sync_window_hours, settings.max_retries) != (48, 4):
        msg = f"Expected defaults, got {settings.sync_window_hours}, {settings.max_retries}"
        raise AssertionError(msg)


def test_overrides_read_from_environment(full_env: pytest.MonkeyPatch) -> None:
    """Explicit values win over defaults; a blank E2E password means none."""
    full_env.setenv("SYNC_WINDOW_HOURS", "72")
    full_env.setenv("MAX_RETRIES", "2")
    full_env.setenv("LOG_LEVEL", "DEBUG")
    full_env.setenv("ACTUAL_E2E_PASSWORD", "")
    settings = load_config(env_file=None)
    if (settings.sync_window_hours, settings.max_retries, settings.log_level) != (72, 2, "debug"):
        msg = f"Unexpected settings: {settings!r}"
        raise AssertionError(msg)
    if settings.actual_e2e_password is not None:
        msg = "Expected a blank E2E password to be treated as unset"
        raise AssertionError(msg)


def test_secrets_not_exposed_in_repr(full_env: pytest.MonkeyPatch) -> None:
    """Tokens and passwords never show up in the settings repr."""
    settings = load_config(env_file=None)
    if "up:yeah:token" in repr(settings) or "secret" in repr(settings).replace("SecretStr", ""):
        msg = "Secret value leaked into repr"
        raise AssertionError(msg)


def test_reads_dotenv_file(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Values can come from a .env file."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "UP_API_TOKEN=file-token\n"
        "ACTUAL_SERVER_URL=http://file:5006\n"
        "ACTUAL_PASSWORD=file-pass\n"
        "ACTUAL_SYNC_ID=file-sync\n"
        "ACTUAL_ACCOUNT_ID=file-account\n"
        "WEBHOOK_URL=https://ntfy.sh/topic\n"
    )
    settings = load_config(env_file=env_file)
    if settings.actual_sync_id != "file-sync" or settings.webhook_url != "https://ntfy.sh/topic":
        msg = f"Expected values from {env_file}, got {settings!r}"
        raise AssertionError(msg)
