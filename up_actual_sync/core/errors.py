"""Error taxonomy for the sync pipeline.

Everything below the retry loop is attempt-fatal but process-recoverable: an attempt aborts on the first error and
the next attempt starts from scratch. Only :class:`ConfigValidationError` (before any attempt) and
:class:`RetryExhaustedError` (after the last one) end the run.
"""

UNKNOWN_DETAIL = "Unknown error"


class SyncError(Exception):
    """Base class for every error raised by the sync pipeline."""


class ConfigValidationError(SyncError):
    """Required configuration is missing or invalid. Raised before any network call is made."""

    def __init__(self, missing: list[str], invalid: list[str] | None = None) -> None:
        """Record every missing variable (and any invalid one) in a single error."""
        self.missing = list(missing)
        self.invalid = list(invalid or [])
        lines = []
        if self.missing:
            lines.append("Missing required environment variables:")
            lines.extend(f"  - {name}" for name in self.missing)
        if self.invalid:
            lines.append("Invalid environment variables:")
            lines.extend(f"  - {entry}" for entry in self.invalid)
        super().__init__("\n".join(lines) or "Invalid configuration")


class SourceError(SyncError):
    """Base class for Up Bank API failures."""

    def __init__(self, message: str, status: int | None = None, detail: str | None = None) -> None:
        """Keep the HTTP status and provider detail text alongside the message."""
        self.status = status
        self.detail = detail
        super().__init__(message)


class SourceAuthError(SourceError):
    """The API token was rejected (HTTP 401/403)."""

    def __init__(self, status: int, detail: str | None = None) -> None:
        """Build the message from the status code and provider detail."""
        super().__init__(
            f"Up Bank API authentication failed: HTTP {status} - {detail or UNKNOWN_DETAIL}", status, detail
        )


class SourceUnreachableError(SourceError):
    """The API could not be reached, or the connectivity check failed for a reason other than authentication."""

    def __init__(self, status: int | None, detail: str | None = None) -> None:
        """Build the message; ``status`` is None when no response was received at all."""
        where = f"HTTP {status}" if status is not None else "no response"
        super().__init__(f"Up Bank API unreachable: {where} - {detail or UNKNOWN_DETAIL}", status, detail)


class SourceRateLimitError(SourceError):
    """The API answered HTTP 429. Transient: the retry loop's backoff is what recovers from it."""

    def __init__(self, retry_after: int | None = None, detail: str | None = None) -> None:
        """Remember the provider's Retry-After hint when it sent one."""
        self.retry_after = retry_after
        super().__init__("Up Bank API rate limited (HTTP 429). Will retry with backoff.", 429, detail)


class SourceApiError(SourceError):
    """Any other non-success response while fetching transactions."""

    def __init__(self, status: int, detail: str | None = None) -> None:
        """Build the message from the status code and provider detail."""
        super().__init__(f"Up Bank API error: HTTP {status} - {detail or UNKNOWN_DETAIL}", status, detail)


class DestinationSessionError(SyncError):
    """Opening, using or closing the Actual Budget session failed."""


class TransformContractViolation(SyncError):  # noqa: N818
    """A source transaction is missing a field the mapping relies on."""

    def __init__(self, transaction_id: str | None, field: str, reason: str = "missing or malformed") -> None:
        """Name the offending transaction and field."""
        self.transaction_id = transaction_id
        self.field = field
        super().__init__(f"Transaction {transaction_id or '<no id>'}: field '{field}' is {reason}")


class RetryExhaustedError(SyncError):
    """Every configured attempt failed."""

    def __init__(self, attempts: int, last_error: BaseException | None) -> None:
        """Carry the attempt count and the error of the final attempt."""
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Sync failed after {attempts} attempts: {last_error or UNKNOWN_DETAIL}")
