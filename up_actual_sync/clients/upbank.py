"""UpBankClient: read-only client for the Up Bank REST API.

Fetches settled transactions for a rolling window, following the cursor links Up returns in ``links.next`` until
there are none left. Rate limiting (HTTP 429) and authentication failures surface as their own error types so the
retry loop can tell them apart from generic API errors.

Up Bank API docs: https://developer.up.com.au/
"""

from datetime import datetime
from typing import Any

import httpx

from up_actual_sync.core.errors import (
    SourceApiError,
    SourceAuthError,
    SourceRateLimitError,
    SourceUnreachableError,
)
from up_actual_sync.core.models import SETTLED
from up_actual_sync.core.settings import Settings
from up_actual_sync.core.utils import get_logger, rfc3339, safe_cast, window_start

PAGE_SIZE = 100
RATE_LIMIT_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_LOW_WATER = 10
HTTP_TOO_MANY_REQUESTS = 429
AUTH_STATUSES = (401, 403)

logger = get_logger("up-actual-sync.upbank")


def _error_detail(response: httpx.Response) -> str | None:
    """Pull ``errors[0].detail`` out of a JSON:API error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    errors = body.get("errors") or []
    if errors and isinstance(errors[0], dict):
        return errors[0].get("detail")
    return None


class UpBankClient:
    """Client for the Up Bank transactions API.

    The HTTP client can be injected (tests, shared connection pools); otherwise one is created and owned by this
    instance and closed by :meth:`close` or on leaving the ``with`` block.
    """

    def __init__(self, settings: Settings, http_client: httpx.Client | None = None) -> None:
        """Initialize the client with settings and an optional httpx client."""
        self.settings = settings
        self.base_url = settings.up_base_url.rstrip("/")
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(timeout=settings.http_timeout_seconds)

    def __enter__(self) -> "UpBankClient":
        """Return self for use as a context manager."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the owned HTTP client."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self.http.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.up_api_token.get_secret_value()}",
            "Accept": "application/json",
        }

    def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        try:
            return self.http.get(url, params=params, headers=self._headers())
        except httpx.RequestError as exc:
            logger.warning(f"Up Bank API request failed: {type(exc).__name__}: {exc}")
            raise SourceUnreachableError(None, str(exc)) from exc

    def check_connectivity(self) -> bool:
        """Verify the token against ``/util/ping``.

        Raises:
            SourceAuthError: the token was rejected.
            SourceUnreachableError: any other failure, including no response at all.

        """
        url = f"{self.base_url}/util/ping"
        logger.debug(f"Pinging Up Bank API: {url}")
        response = self._get(url)
        if response.status_code in AUTH_STATUSES:
            raise SourceAuthError(response.status_code, _error_detail(response))
        if not response.is_success:
            raise SourceUnreachableError(response.status_code, _error_detail(response))
        try:
            meta = response.json().get("meta") or {}
        except (ValueError, AttributeError):
            meta = {}
        logger.info(f"Up Bank API authenticated successfully {meta.get('statusEmoji', '')}".rstrip())
        return True

    def fetch_window(self, window_hours: int | None = None, now: datetime | None = None) -> list[dict[str, Any]]:
        """Fetch every settled transaction created in the last ``window_hours`` hours.

        Pages are requested one after another and concatenated in response order.
        """
        hours = window_hours or self.settings.sync_window_hours
        since = rfc3339(window_start(hours, now))
        logger.info(f"Fetching settled transactions from Up Bank since {since} (window {hours}h)")

        url: str | None = f"{self.base_url}/transactions"
        params: dict[str, str] | None = {
            "filter[status]": SETTLED,
            "filter[since]": since,
            "page[size]": str(PAGE_SIZE),
        }
        transactions: list[dict[str, Any]] = []
        pages = 0
        while url:
            pages += 1
            logger.debug(f"Fetching page {pages}: {url}")
            response = self._get(url, params=params)
            self._log_rate_limit(response)
            self._raise_for_status(response)

            body = response.json()
            page = body.get("data") or []
            transactions.extend(page)
            logger.debug(f"Page {pages} returned {len(page)} transactions")

            # The next link already carries every filter and the cursor
            url = (body.get("links") or {}).get("next")
            params = None

        logger.info(f"Finished fetching transactions from Up Bank: {len(transactions)} across {pages} page(s)")
        return transactions

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        status = response.status_code
        detail = _error_detail(response)
        if status == HTTP_TOO_MANY_REQUESTS:
            retry_after = safe_cast(response.headers.get("Retry-After"), int)
            logger.warning(f"Up Bank API rate limited (HTTP 429), retry-after={retry_after}")
            raise SourceRateLimitError(retry_after, detail)
        raise SourceApiError(status, detail)

    def _log_rate_limit(self, response: httpx.Response) -> None:
        remaining = response.headers.get(RATE_LIMIT_HEADER)
        if remaining is None:
            return
        logger.debug(f"Up Bank rate limit remaining: {remaining}")
        value = safe_cast(remaining, int)
        if value is not None and value < RATE_LIMIT_LOW_WATER:
            logger.warning(f"Up Bank API rate limit running low: {value} requests remaining")
