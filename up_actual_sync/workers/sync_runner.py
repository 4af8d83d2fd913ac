"""One end-to-end sync attempt: ping Up, fetch the window, transform, import into Actual.

Used identically by the CLI retry loop, the single-shot scheduled run and the HTTP trigger. Errors are not caught
or translated here; the caller decides whether to retry.
"""

import time
from collections.abc import Callable

from up_actual_sync.clients.actual_budget import ActualBudgetClient
from up_actual_sync.clients.base import BudgetSession
from up_actual_sync.clients.upbank import UpBankClient
from up_actual_sync.core.models import SyncAttemptResult
from up_actual_sync.core.settings import Settings
from up_actual_sync.core.utils import ensure_dir, get_logger
from up_actual_sync.services.transform import transform_batch

logger = get_logger("up-actual-sync.sync")


def default_budget_session() -> BudgetSession:
    """Build the actualpy-backed session used outside tests."""
    from up_actual_sync.clients.actualpy_session import ActualpyBudgetSession

    return ActualpyBudgetSession()


class SyncRunner:
    """Runs sync attempts against one source client and one destination client."""

    def __init__(
        self,
        settings: Settings,
        source: UpBankClient,
        destination: ActualBudgetClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the runner with its collaborators."""
        self.settings = settings
        self.source = source
        self.destination = destination
        self.clock = clock

    def _elapsed_ms(self, started: float) -> int:
        return int((self.clock() - started) * 1000)

    def execute_attempt(self) -> SyncAttemptResult:
        """Run one attempt and return its result; any failure propagates unchanged."""
        started = self.clock()

        self.source.check_connectivity()
        resources = self.source.fetch_window(self.settings.sync_window_hours)

        if not resources:
            logger.info("No transactions to sync in the current window")
            return SyncAttemptResult(fetched_count=0, duration_ms=self._elapsed_ms(started))

        transactions = transform_batch(resources)

        # The local working copy may live somewhere ephemeral (e.g. /tmp on serverless hosts)
        ensure_dir(self.settings.actual_data_dir)

        with self.destination.session():
            result = self.destination.import_batch(self.settings.actual_account_id, transactions)

        return SyncAttemptResult(result=result, fetched_count=len(resources), duration_ms=self._elapsed_ms(started))


def run_once(
    settings: Settings,
    source: UpBankClient | None = None,
    budget_session: BudgetSession | None = None,
) -> SyncAttemptResult:
    """Run a single sync attempt with default collaborators for anything not supplied."""
    owned_source = source is None
    source = source or UpBankClient(settings)
    destination = ActualBudgetClient(settings, budget_session or default_budget_session())
    try:
        return SyncRunner(settings, source, destination).execute_attempt()
    finally:
        if owned_source:
            source.close()
