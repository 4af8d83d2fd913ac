"""ActualBudgetClient: destination side of the sync.

Drives a :class:`BudgetSession` through one connect → import → disconnect cycle. Actual works on a local copy of
the budget, so disconnecting is what pushes the imported transactions back to the server; it must happen even when
the import fails.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from up_actual_sync.clients.base import BudgetSession
from up_actual_sync.core.errors import DestinationSessionError
from up_actual_sync.core.models import AccountSummary, DestinationTransaction, ImportResult
from up_actual_sync.core.settings import Settings
from up_actual_sync.core.utils import get_logger

logger = get_logger("up-actual-sync.actual")


class SessionState(Enum):
    """Lifecycle of one destination session."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class ActualBudgetClient:
    """Client for importing transactions into one Actual Budget account."""

    def __init__(self, settings: Settings, session: BudgetSession) -> None:
        """Initialize the client with settings and the budget session it drives."""
        self.settings = settings
        self.budget = session
        self.state = SessionState.DISCONNECTED

    def connect(self) -> None:
        """Log in and download the budget into the local data directory."""
        if self.state is SessionState.CONNECTED:
            msg = "Already connected to Actual Budget"
            raise DestinationSessionError(msg)
        settings = self.settings
        logger.info(
            f"Connecting to Actual Budget server {settings.actual_server_url} (sync id {settings.actual_sync_id})"
        )
        e2e = settings.actual_e2e_password
        try:
            self.budget.connect(
                settings.actual_server_url, settings.actual_password.get_secret_value(), settings.actual_data_dir
            )
            if e2e is not None:
                self.budget.download_remote_state(settings.actual_sync_id, e2e.get_secret_value())
            else:
                self.budget.download_remote_state(settings.actual_sync_id)
        except DestinationSessionError:
            raise
        except Exception as exc:
            msg = f"Failed to connect to Actual Budget: {exc}"
            raise DestinationSessionError(msg) from exc
        self.state = SessionState.CONNECTED
        logger.info("Connected to Actual Budget and downloaded budget")

    def import_batch(self, account_id: str, transactions: list[DestinationTransaction]) -> ImportResult:
        """Import a batch into ``account_id``.

        An empty batch returns an empty result without touching the session. Per-record failures come back in
        ``errors``; only a failure of the whole call raises.
        """
        if not transactions:
            logger.info("No transactions to import")
            return ImportResult()
        if self.state is not SessionState.CONNECTED:
            msg = "Cannot import: not connected to Actual Budget"
            raise DestinationSessionError(msg)

        logger.info(f"Importing {len(transactions)} transactions into Actual Budget account {account_id}")
        try:
            result = self.budget.import_batch(account_id, transactions)
        except DestinationSessionError:
            raise
        except Exception as exc:
            msg = f"Import into Actual Budget failed: {exc}"
            raise DestinationSessionError(msg) from exc

        logger.info(
            f"Import complete: added={len(result.added)} updated={len(result.updated)} errors={len(result.errors)}"
        )
        if result.errors:
            logger.warning(f"Import errors encountered: {[error.model_dump() for error in result.errors]}")
        return result

    def list_accounts(self) -> list[AccountSummary]:
        """List every account in the budget, to help find the account id to configure."""
        if self.state is not SessionState.CONNECTED:
            msg = "Cannot list accounts: not connected to Actual Budget"
            raise DestinationSessionError(msg)
        try:
            return self.budget.list_accounts()
        except Exception as exc:
            msg = f"Listing Actual Budget accounts failed: {exc}"
            raise DestinationSessionError(msg) from exc

    def disconnect(self) -> None:
        """Sync local changes back to the server and release the session. No-op when not connected."""
        if self.state is SessionState.DISCONNECTED:
            return
        logger.info("Disconnecting from Actual Budget (syncing changes)")
        self.state = SessionState.DISCONNECTED
        try:
            self.budget.disconnect()
        except Exception as exc:
            msg = f"Failed to disconnect from Actual Budget: {exc}"
            raise DestinationSessionError(msg) from exc
        logger.info("Disconnected from Actual Budget")

    @contextmanager
    def session(self) -> Iterator["ActualBudgetClient"]:
        """Connect for the duration of the block; always disconnects, even when the block raises."""
        self.connect()
        try:
            yield self
        finally:
            self.disconnect()
